"""Activity persistence and per-contributor activity metrics."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard.activities.definitions import ACTIVITY_DEFINITIONS
from leaderboard.db.models import Activity, ActivityDefinition
from leaderboard.gamification.badge_engine import BadgeMetric
from leaderboard.schemas import ActivityDefinitionRecord, ActivityRecord
from leaderboard.upsert import DEFAULT_BATCH_SIZE, ConflictPolicy, upsert_rows


async def upsert_activity_definitions(
    db: AsyncSession,
    definitions: Sequence[ActivityDefinitionRecord] = ACTIVITY_DEFINITIONS,
) -> int:
    """Insert or update the registered activity kinds."""
    return await upsert_rows(
        db,
        ActivityDefinition,
        [d.to_row() for d in definitions],
        conflict_columns=["slug"],
        policy=ConflictPolicy.UPDATE,
        label="activity definitions",
    )


async def add_activities(
    db: AsyncSession,
    activities: Sequence[ActivityRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Upsert activities keyed by slug.

    A re-ingested slug overwrites every descriptive field; the row itself
    (and its slug) is kept.
    """
    return await upsert_rows(
        db,
        Activity,
        [a.to_row() for a in activities],
        conflict_columns=["slug"],
        policy=ConflictPolicy.UPDATE,
        batch_size=batch_size,
        label="activities",
    )


async def list_activities(db: AsyncSession, kinds: Sequence[str]) -> list[ActivityRecord]:
    """All activities of the given kinds, oldest first."""
    if not kinds:
        return []
    result = await db.execute(
        select(Activity)
        .where(Activity.activity_definition.in_(kinds))
        .order_by(Activity.occured_at, Activity.slug)
        .execution_options(populate_existing=True)
    )
    return [ActivityRecord.model_validate(row) for row in result.scalars()]


async def get_activity_counts(db: AsyncSession) -> dict[str, BadgeMetric]:
    """Activity count and first activity timestamp for every contributor."""
    result = await db.execute(
        select(
            Activity.contributor,
            func.count().label("count"),
            func.min(Activity.occured_at).label("first_activity_at"),
        ).group_by(Activity.contributor)
    )

    return {
        contributor: BadgeMetric(count=int(count), reference_at=first_activity_at)
        for contributor, count, first_activity_at in result.all()
    }
