"""Batched INSERT ... ON CONFLICT with an explicit conflict policy.

Every write in the pipeline goes through ``upsert_rows``. Rows are split
into fixed-size chunks so a single statement stays under SQLite's bound
parameter limit; chunks are executed and committed one after another.
A failing chunk aborts the rest of the call and the error propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from enum import Enum
from typing import Any, TypeVar

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard.db.base import Base

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000

T = TypeVar("T")


class ConflictPolicy(str, Enum):
    """What to do when a row with the same key already exists."""

    UPDATE = "update"  # overwrite non-key columns (definitions, aggregates, activities)
    IGNORE = "ignore"  # keep the stored row untouched (awards, contributor identities)


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive chunks of at most ``size`` items."""
    if size < 1:
        msg = f"Batch size must be at least 1, got {size}"
        raise ValueError(msg)
    for start in range(0, len(items), size):
        yield items[start : start + size]


async def upsert_rows(
    db: AsyncSession,
    model: type[Base],
    rows: Sequence[Mapping[str, Any]],
    *,
    conflict_columns: Sequence[str],
    policy: ConflictPolicy,
    update_columns: Sequence[str] | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    label: str | None = None,
) -> int:
    """Upsert ``rows`` into ``model``'s table.

    With ``ConflictPolicy.UPDATE`` the ``update_columns`` (default: every
    non-key column present in the rows) are overwritten on conflict. With
    ``ConflictPolicy.IGNORE`` conflicting rows are skipped.

    Returns the number of affected rows summed over all chunks. It is
    informational only: ignored conflicts legitimately lower it.
    """
    if not rows:
        return 0

    label = label or model.__tablename__
    if policy is ConflictPolicy.UPDATE and update_columns is None:
        update_columns = [c for c in rows[0] if c not in conflict_columns]

    affected = 0
    for batch in batched(rows, batch_size):
        stmt = sqlite_insert(model).values([dict(row) for row in batch])
        if policy is ConflictPolicy.UPDATE and update_columns:
            stmt = stmt.on_conflict_do_update(
                index_elements=list(conflict_columns),
                set_={column: stmt.excluded[column] for column in update_columns},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))

        result = await db.execute(stmt)
        await db.commit()

        count = max(result.rowcount or 0, 0)
        affected += count
        logger.info("Upserted %d/%d %s", count, len(batch), label)

    return affected
