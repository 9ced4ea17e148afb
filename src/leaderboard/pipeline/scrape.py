"""Scrape stage: pull recent activities from the source into the store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import structlog

from leaderboard.activities.service import add_activities
from leaderboard.activities.sources import ActivitySource, ExampleActivitySource
from leaderboard.config import Settings, get_settings
from leaderboard.contributors.service import add_contributors
from leaderboard.database import Store, open_store

logger = structlog.get_logger()


def scrape_since(days: int, now: datetime | None = None) -> datetime:
    """Start of the lookback window."""
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=days)


async def run(
    store: Store,
    settings: Settings,
    source: ActivitySource | None = None,
    now: datetime | None = None,
) -> int:
    """Fetch activities since ``scrape_days`` ago and persist them.

    Contributors are added before their activities. Returns the number of
    activities fetched.
    """
    source = source or ExampleActivitySource()
    since = scrape_since(settings.scrape_days, now)

    logger.info("scrape_started", since=since.isoformat(), days=settings.scrape_days)
    activities = await source.fetch_activities(since)
    logger.info("activities_fetched", count=len(activities))

    async with store.session() as db:
        await add_contributors(db, [a.contributor for a in activities], batch_size=settings.batch_size)
        await add_activities(db, activities, batch_size=settings.batch_size)

    logger.info("scrape_finished", activities=len(activities))
    return len(activities)


async def main(settings: Settings | None = None, source: ActivitySource | None = None) -> None:
    settings = settings or get_settings()
    async with open_store(settings) as store:
        await run(store, settings, source=source)
