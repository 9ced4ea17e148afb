"""Pre-build stage: recompute aggregates and award badges before the site build."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from leaderboard.aggregates.engine import AverageResult
from leaderboard.aggregates.service import AGGREGATE_DEFINITIONS, calculate_and_upsert_average
from leaderboard.config import Settings, get_settings
from leaderboard.database import Store, open_store
from leaderboard.gamification.badge_service import award_engagement_champion_badges

logger = structlog.get_logger()


@dataclass
class PrebuildSummary:
    aggregates: dict[str, AverageResult]
    badges_awarded: int


async def run(store: Store, settings: Settings) -> PrebuildSummary:
    aggregates: dict[str, AverageResult] = {}
    async with store.session() as db:
        for definition in AGGREGATE_DEFINITIONS:
            aggregates[definition.slug] = await calculate_and_upsert_average(
                db, definition, batch_size=settings.batch_size
            )

        awarded = await award_engagement_champion_badges(db, batch_size=settings.batch_size)

    logger.info("prebuild_finished", aggregates=len(aggregates), badges_awarded=awarded)
    return PrebuildSummary(aggregates=aggregates, badges_awarded=awarded)


async def main(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    async with open_store(settings) as store:
        await run(store, settings)
