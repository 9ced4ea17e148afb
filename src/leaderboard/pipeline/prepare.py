"""Prepare stage: register activity kinds, aggregate definitions and badges."""

from __future__ import annotations

import structlog

from leaderboard.activities.service import upsert_activity_definitions
from leaderboard.aggregates.service import upsert_contributor_aggregate_definitions
from leaderboard.config import Settings, get_settings
from leaderboard.database import Store, open_store
from leaderboard.gamification.badge_service import seed_badges

logger = structlog.get_logger()


async def run(store: Store, settings: Settings) -> None:
    async with store.session() as db:
        await upsert_activity_definitions(db)
        await upsert_contributor_aggregate_definitions(db)
        badges = await seed_badges(db)
    logger.info("definitions_upserted", badges=badges)


async def main(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    async with open_store(settings) as store:
        await run(store, settings)
