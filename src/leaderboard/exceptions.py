"""Exceptions raised by the leaderboard pipeline."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A required setting is missing or unusable."""


class UnsafeContributorError(ValueError):
    """A contributor identity cannot be used as a file name."""
