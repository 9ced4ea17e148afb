"""Export stage: write managed activities and badges as per-contributor JSON."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from leaderboard.activities.definitions import managed_activity_kinds
from leaderboard.activities.service import list_activities
from leaderboard.config import Settings, get_settings
from leaderboard.database import Store, open_store
from leaderboard.flatfile import (
    ACTIVITIES_KIND,
    BADGES_KIND,
    group_by_contributor,
    kind_dir,
    write_contributor_files,
)
from leaderboard.gamification.badge_service import list_contributor_badges
from leaderboard.gamification.seed import managed_badge_slugs

logger = structlog.get_logger()


@dataclass
class ExportSummary:
    activity_files: int
    badge_files: int


async def run(store: Store, settings: Settings, data_path: str | Path) -> ExportSummary:
    async with store.session() as db:
        activities = await list_activities(db, managed_activity_kinds())
        badges = await list_contributor_badges(db, managed_badge_slugs())

    activities_dir = kind_dir(data_path, settings.source_name, ACTIVITIES_KIND)
    grouped_activities = group_by_contributor(activities)
    logger.info("exporting_activities", activities=len(activities), contributors=len(grouped_activities))
    activity_files = write_contributor_files(activities_dir, grouped_activities)
    logger.info("activities_exported", files=activity_files, directory=str(activities_dir))

    badges_dir = kind_dir(data_path, settings.source_name, BADGES_KIND)
    grouped_badges = group_by_contributor(badges)
    logger.info("exporting_badges", badges=len(badges), contributors=len(grouped_badges))
    badge_files = write_contributor_files(badges_dir, grouped_badges)
    logger.info("badges_exported", files=badge_files, directory=str(badges_dir))

    return ExportSummary(activity_files=activity_files, badge_files=badge_files)


async def main(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    data_path = settings.require_data_path()
    async with open_store(settings) as store:
        await run(store, settings, data_path)
