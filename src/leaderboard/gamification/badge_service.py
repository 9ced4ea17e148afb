"""Badge definition and award persistence."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard.activities.service import get_activity_counts
from leaderboard.db.models import BadgeDefinition, ContributorBadge
from leaderboard.gamification.badge_engine import (
    BadgeMetric,
    BadgeThreshold,
    evaluate_badge_thresholds,
)
from leaderboard.gamification.seed import (
    BADGE_SEED_DATA,
    ENGAGEMENT_CHAMPION,
    ENGAGEMENT_CHAMPION_THRESHOLDS,
)
from leaderboard.schemas import BadgeDefinitionRecord, ContributorBadgeRecord
from leaderboard.upsert import DEFAULT_BATCH_SIZE, ConflictPolicy, upsert_rows

logger = logging.getLogger(__name__)

MetricSource = Callable[[AsyncSession], Awaitable[Mapping[str, BadgeMetric]]]


async def get_badge_by_slug(db: AsyncSession, slug: str) -> BadgeDefinition | None:
    """Fetch a badge definition by slug."""
    result = await db.execute(
        select(BadgeDefinition)
        .where(BadgeDefinition.slug == slug)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def upsert_badge_definition(db: AsyncSession, definition: BadgeDefinitionRecord) -> int:
    """Insert or update a badge family (name, description and variants)."""
    return await upsert_rows(
        db,
        BadgeDefinition,
        [definition.to_row()],
        conflict_columns=["slug"],
        policy=ConflictPolicy.UPDATE,
        label="badge definitions",
    )


async def seed_badges(db: AsyncSession) -> int:
    """Upsert every badge definition. Returns number of badges seeded."""
    for definition in BADGE_SEED_DATA:
        await upsert_badge_definition(db, definition)
    logger.info("Seeded %d badge definitions", len(BADGE_SEED_DATA))
    return len(BADGE_SEED_DATA)


async def upsert_contributor_badges(
    db: AsyncSession,
    badges: Sequence[ContributorBadgeRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Insert awards that do not exist yet.

    An award slug already in the store keeps its original ``achieved_on``
    and ``meta``. Returns the number of newly awarded badges.
    """
    return await upsert_rows(
        db,
        ContributorBadge,
        [b.to_row() for b in badges],
        conflict_columns=["slug"],
        policy=ConflictPolicy.IGNORE,
        batch_size=batch_size,
        label="new contributor badges",
    )


async def list_contributor_badges(db: AsyncSession, badge_slugs: Sequence[str]) -> list[ContributorBadgeRecord]:
    if not badge_slugs:
        return []
    result = await db.execute(
        select(ContributorBadge)
        .where(ContributorBadge.badge.in_(badge_slugs))
        .order_by(ContributorBadge.contributor, ContributorBadge.slug)
        .execution_options(populate_existing=True)
    )
    return [ContributorBadgeRecord.model_validate(row) for row in result.scalars()]


async def award_threshold_badges(
    db: AsyncSession,
    badge_slug: str,
    thresholds: Sequence[BadgeThreshold],
    metric_source: MetricSource,
    metric_name: str = "metric_value",
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Award every variant each contributor currently qualifies for.

    Returns the number of awards that were new. Re-running over unchanged
    data returns 0 and leaves stored awards untouched.
    """
    metrics = await metric_source(db)
    logger.info("Found %d contributors with %s metrics", len(metrics), badge_slug)

    awards = evaluate_badge_thresholds(badge_slug, metrics, thresholds, metric_name)
    logger.info("Awarding %d %s badge variants", len(awards), badge_slug)

    if not awards:
        return 0
    return await upsert_contributor_badges(db, awards, batch_size=batch_size)


async def award_engagement_champion_badges(db: AsyncSession, batch_size: int = DEFAULT_BATCH_SIZE) -> int:
    """Engagement Champion: tiers by total activity count, dated on the first activity."""
    return await award_threshold_badges(
        db,
        ENGAGEMENT_CHAMPION,
        ENGAGEMENT_CHAMPION_THRESHOLDS,
        get_activity_counts,
        metric_name="activity_count",
        batch_size=batch_size,
    )
