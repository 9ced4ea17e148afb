"""Activity data sources for the scrape stage.

A real deployment replaces ``ExampleActivitySource`` with a client for its
platform (GitHub, Slack, a forum API, ...). Slugs must be stable across
runs so that re-scraping the same event updates instead of duplicating it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from leaderboard.activities.definitions import ActivityKind
from leaderboard.schemas import ActivityRecord


class ActivitySource(Protocol):
    async def fetch_activities(self, since: datetime) -> list[ActivityRecord]:
        """Return every activity that occurred at or after ``since``."""
        ...


class ExampleActivitySource:
    """Stub source that yields one example activity per contributor per day."""

    def __init__(self, contributor: str = "example-contributor-1") -> None:
        self.contributor = contributor

    async def fetch_activities(self, since: datetime) -> list[ActivityRecord]:
        now = datetime.now(timezone.utc)
        return [
            ActivityRecord(
                slug=f"example-activity-{self.contributor}-{now:%Y-%m-%d}",
                contributor=self.contributor,
                activity_definition=ActivityKind.EXAMPLE_ACTIVITY.value,
                title="Example Activity",
                occured_at=now,
                link="https://example.com",
                text="Example Activity",
                points=0,
                meta={"example": "example"},
            )
        ]
