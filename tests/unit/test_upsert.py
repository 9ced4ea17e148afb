"""Upsert layer tests: chunking, conflict policies and failure behavior."""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from helpers import count_rows, make_activities
from leaderboard.activities.service import add_activities
from leaderboard.config import MEMORY_DB_PATH
from leaderboard.contributors.service import add_contributors
from leaderboard.database import Store
from leaderboard.db.models import Activity, ActivityDefinition
from leaderboard.upsert import ConflictPolicy, batched, upsert_rows


def _definition(slug: str, name: str | None = "Name", description: str = "Description") -> dict:
    return {"slug": slug, "name": name, "description": description, "points": 0, "icon": None}


class TestBatched:
    def test_fixed_size_chunks(self):
        chunks = list(batched(list(range(2500)), 1000))
        assert [len(c) for c in chunks] == [1000, 1000, 500]
        assert [x for c in chunks for x in c] == list(range(2500))

    def test_empty_input_yields_nothing(self):
        assert list(batched([], 10)) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError, match="at least 1"):
            list(batched([1, 2], 0))


class TestConflictPolicies:
    @pytest.mark.asyncio
    async def test_update_overwrites_existing_row(self, db_session):
        await upsert_rows(db_session, ActivityDefinition, [_definition("a", description="old")],
                          conflict_columns=["slug"], policy=ConflictPolicy.UPDATE)
        await upsert_rows(db_session, ActivityDefinition, [_definition("a", description="new")],
                          conflict_columns=["slug"], policy=ConflictPolicy.UPDATE)

        row = (await db_session.execute(
            select(ActivityDefinition).execution_options(populate_existing=True)
        )).scalar_one()
        assert row.description == "new"

    @pytest.mark.asyncio
    async def test_ignore_keeps_existing_row(self, db_session):
        await upsert_rows(db_session, ActivityDefinition, [_definition("a", description="old")],
                          conflict_columns=["slug"], policy=ConflictPolicy.IGNORE)
        affected = await upsert_rows(db_session, ActivityDefinition, [_definition("a", description="new")],
                                     conflict_columns=["slug"], policy=ConflictPolicy.IGNORE)

        assert affected == 0
        row = (await db_session.execute(select(ActivityDefinition))).scalar_one()
        assert row.description == "old"

    @pytest.mark.asyncio
    async def test_affected_count_sums_chunks(self, db_session):
        rows = [_definition(f"def-{i}") for i in range(7)]
        affected = await upsert_rows(db_session, ActivityDefinition, rows,
                                     conflict_columns=["slug"], policy=ConflictPolicy.IGNORE, batch_size=3)
        assert affected == 7
        assert await count_rows(db_session, ActivityDefinition) == 7

    @pytest.mark.asyncio
    async def test_empty_rows_is_noop(self, db_session):
        assert await upsert_rows(db_session, ActivityDefinition, [],
                                 conflict_columns=["slug"], policy=ConflictPolicy.UPDATE) == 0

    @pytest.mark.asyncio
    async def test_failed_chunk_aborts_remaining_chunks(self, db_session):
        rows = [
            _definition("ok-1"),
            _definition("ok-2"),
            _definition("bad", name=None),  # violates NOT NULL
            _definition("ok-3"),
            _definition("ok-4"),
            _definition("ok-5"),
        ]
        with pytest.raises(IntegrityError):
            await upsert_rows(db_session, ActivityDefinition, rows,
                              conflict_columns=["slug"], policy=ConflictPolicy.UPDATE, batch_size=2)
        await db_session.rollback()

        slugs = set((await db_session.execute(select(ActivityDefinition.slug))).scalars())
        # First chunk was committed; the failing chunk and everything after it was not.
        assert slugs == {"ok-1", "ok-2"}


class TestBatchSizeInvariance:
    @pytest_asyncio.fixture
    async def second_store(self):
        store = Store(MEMORY_DB_PATH)
        await store.create_schema()
        yield store
        await store.dispose()

    @pytest.mark.asyncio
    async def test_chunked_and_unchunked_upserts_store_the_same_rows(self, store, second_store):
        activities = (
            make_activities(1200, contributor="alice")
            + make_activities(800, contributor="bob")
            + make_activities(500, contributor="carol")
        )
        assert len(activities) == 2500

        async with store.session() as db:
            await add_contributors(db, [a.contributor for a in activities])
            chunked = await add_activities(db, activities, batch_size=1000)
            chunked_rows = (await db.execute(select(Activity).order_by(Activity.slug))).scalars().all()
            chunked_state = [(a.slug, a.contributor, a.occured_at, a.title) for a in chunked_rows]

        async with second_store.session() as db:
            await add_contributors(db, [a.contributor for a in activities])
            single = await add_activities(db, activities, batch_size=len(activities))
            single_rows = (await db.execute(select(Activity).order_by(Activity.slug))).scalars().all()
            single_state = [(a.slug, a.contributor, a.occured_at, a.title) for a in single_rows]

        assert chunked == single == 2500
        assert chunked_state == single_state
        assert len(chunked_state) == 2500
