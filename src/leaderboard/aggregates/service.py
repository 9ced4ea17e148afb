"""Aggregate definitions, computation and persistence."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard.activities.definitions import ActivityKind
from leaderboard.aggregates.engine import AggregateDefinition, AverageResult, compute_averages
from leaderboard.db.models import Activity, ContributorAggregate, ContributorAggregateDefinition, GlobalAggregate
from leaderboard.schemas import (
    AggregateValue,
    ContributorAggregateDefinitionRecord,
    ContributorAggregateRecord,
    GlobalAggregateRecord,
)
from leaderboard.upsert import DEFAULT_BATCH_SIZE, ConflictPolicy, upsert_rows

logger = logging.getLogger(__name__)

EXAMPLE_AVG_METRIC = AggregateDefinition(
    slug="example_avg_metric",
    name="Example Avg. Metric",
    description="Average of an example metric",
    activity_definition=ActivityKind.EXAMPLE_ACTIVITY.value,
    meta_field="example_metric",
)

AGGREGATE_DEFINITIONS: list[AggregateDefinition] = [EXAMPLE_AVG_METRIC]


async def upsert_contributor_aggregate_definitions(
    db: AsyncSession,
    definitions: Sequence[AggregateDefinition] = AGGREGATE_DEFINITIONS,
) -> int:
    rows = [
        ContributorAggregateDefinitionRecord(slug=d.slug, name=d.name, description=d.description).to_row()
        for d in definitions
    ]
    return await upsert_rows(
        db,
        ContributorAggregateDefinition,
        rows,
        conflict_columns=["slug"],
        policy=ConflictPolicy.UPDATE,
        label="contributor aggregate definitions",
    )


async def upsert_global_aggregates(
    db: AsyncSession,
    aggregates: Sequence[GlobalAggregateRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Insert or overwrite global aggregates (name, description and value)."""
    return await upsert_rows(
        db,
        GlobalAggregate,
        [a.to_row() for a in aggregates],
        conflict_columns=["slug"],
        policy=ConflictPolicy.UPDATE,
        batch_size=batch_size,
        label="global aggregates",
    )


async def upsert_contributor_aggregates(
    db: AsyncSession,
    aggregates: Sequence[ContributorAggregateRecord],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Insert or overwrite per-contributor aggregate values."""
    return await upsert_rows(
        db,
        ContributorAggregate,
        [a.to_row() for a in aggregates],
        conflict_columns=["aggregate", "contributor"],
        policy=ConflictPolicy.UPDATE,
        update_columns=["value"],
        batch_size=batch_size,
        label="contributor aggregates",
    )


async def calculate_and_upsert_average(
    db: AsyncSession,
    definition: AggregateDefinition = EXAMPLE_AVG_METRIC,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> AverageResult:
    """Recompute one average aggregate from activity meta and store it.

    Nothing is written for contributors without a usable value, and no
    global row is written when no activity carries one.
    """
    result = await db.execute(
        select(Activity.contributor, Activity.meta).where(
            Activity.activity_definition == definition.activity_definition
        )
    )
    averages = compute_averages(result.all(), definition.meta_field)

    if averages.contributor_values:
        await upsert_contributor_aggregates(
            db,
            [
                ContributorAggregateRecord(
                    aggregate=definition.slug,
                    contributor=contributor,
                    value=AggregateValue(value=value),
                )
                for contributor, value in averages.contributor_values.items()
            ],
            batch_size=batch_size,
        )
        logger.info("Updated %s for %d contributors", definition.slug, len(averages.contributor_values))

    if averages.global_value is not None:
        await upsert_global_aggregates(
            db,
            [
                GlobalAggregateRecord(
                    slug=definition.slug,
                    name=definition.name,
                    description=definition.description,
                    value=AggregateValue(value=averages.global_value),
                )
            ],
            batch_size=batch_size,
        )
        logger.info("Updated global %s: %d", definition.slug, averages.global_value)

    return averages


async def get_global_aggregate(db: AsyncSession, slug: str) -> GlobalAggregateRecord | None:
    result = await db.execute(
        select(GlobalAggregate)
        .where(GlobalAggregate.slug == slug)
        .execution_options(populate_existing=True)
    )
    row = result.scalar_one_or_none()
    if row is None or row.value is None:
        return None
    return GlobalAggregateRecord.model_validate(row)


async def get_contributor_aggregates(db: AsyncSession, aggregate: str) -> dict[str, int | float]:
    """Stored values of one aggregate, keyed by contributor."""
    result = await db.execute(
        select(ContributorAggregate)
        .where(ContributorAggregate.aggregate == aggregate)
        .execution_options(populate_existing=True)
    )
    return {row.contributor: AggregateValue.model_validate(row.value).value for row in result.scalars()}
