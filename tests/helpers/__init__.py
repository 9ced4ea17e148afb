"""Record factories shared by the test suite."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard.activities.definitions import ActivityKind
from leaderboard.activities.service import add_activities
from leaderboard.contributors.service import add_contributors
from leaderboard.schemas import ActivityRecord, ContributorBadgeRecord

BASE_TIME = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def make_activity(
    slug: str,
    contributor: str = "test-contributor",
    occured_at: datetime = BASE_TIME,
    meta: dict[str, Any] | None = None,
    **overrides: Any,
) -> ActivityRecord:
    fields: dict[str, Any] = {
        "slug": slug,
        "contributor": contributor,
        "activity_definition": ActivityKind.EXAMPLE_ACTIVITY.value,
        "title": f"Activity {slug}",
        "occured_at": occured_at,
        "link": "https://example.com",
        "text": "Test activity text",
        "points": 0,
        "meta": meta,
    }
    fields.update(overrides)
    return ActivityRecord(**fields)


def make_activities(
    count: int,
    contributor: str = "test-contributor",
    start: datetime = BASE_TIME,
    prefix: str | None = None,
) -> list[ActivityRecord]:
    """``count`` activities one hour apart, the first at ``start``."""
    prefix = prefix or f"{contributor}-activity"
    return [
        make_activity(f"{prefix}-{i}", contributor=contributor, occured_at=start + timedelta(hours=i))
        for i in range(count)
    ]


def make_badge(
    contributor: str,
    variant: str,
    achieved_on: date = BASE_TIME.date(),
    badge: str = "engagement_champion",
    meta: dict[str, Any] | None = None,
) -> ContributorBadgeRecord:
    return ContributorBadgeRecord(
        slug=f"{badge}__{contributor}__{variant}",
        badge=badge,
        contributor=contributor,
        variant=variant,
        achieved_on=achieved_on,
        meta=meta,
    )


async def seed_activities(db: AsyncSession, activities: Sequence[ActivityRecord]) -> None:
    await add_contributors(db, [a.contributor for a in activities])
    await add_activities(db, activities)


async def count_rows(db: AsyncSession, model: type) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()
