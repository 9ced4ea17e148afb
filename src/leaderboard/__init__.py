"""Leaderboard data pipeline: scrape, award, aggregate, export and import."""

__version__ = "0.1.0"
