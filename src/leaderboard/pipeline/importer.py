"""Import stage: load per-contributor JSON files back into the store.

Activities are upserted (update on conflict). Badges are inserted with
no-op on conflict, so importing an older data tree never rewrites an
award already in the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from leaderboard.activities.service import add_activities
from leaderboard.config import Settings, get_settings
from leaderboard.contributors.service import add_contributors
from leaderboard.database import Store, open_store
from leaderboard.flatfile import ACTIVITIES_KIND, BADGES_KIND, kind_dir, read_contributor_files
from leaderboard.gamification.badge_service import upsert_contributor_badges
from leaderboard.schemas import ActivityRecord, ContributorBadgeRecord

logger = structlog.get_logger()


@dataclass
class ImportSummary:
    activities: int = 0
    badges: int = 0


async def run(store: Store, settings: Settings, data_path: str | Path) -> ImportSummary:
    summary = ImportSummary()

    activities = read_contributor_files(
        kind_dir(data_path, settings.source_name, ACTIVITIES_KIND), ActivityRecord
    )
    badges = read_contributor_files(
        kind_dir(data_path, settings.source_name, BADGES_KIND), ContributorBadgeRecord
    )

    async with store.session() as db:
        if not activities:
            logger.info("activities_import_skipped")
        else:
            await add_contributors(db, [a.contributor for a in activities], batch_size=settings.batch_size)
            await add_activities(db, activities, batch_size=settings.batch_size)
            summary.activities = len(activities)
            logger.info("activities_imported", count=len(activities))

        if not badges:
            logger.info("badges_import_skipped")
        else:
            await add_contributors(db, [b.contributor for b in badges], batch_size=settings.batch_size)
            await upsert_contributor_badges(db, badges, batch_size=settings.batch_size)
            summary.badges = len(badges)
            logger.info("badges_imported", count=len(badges))

    return summary


async def main(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    data_path = settings.require_data_path()
    async with open_store(settings) as store:
        await run(store, settings, data_path)
