"""Pre-build stage: aggregates and badge awards over stored activities."""

from __future__ import annotations

import pytest

from helpers import count_rows, make_activities, make_activity, seed_activities
from leaderboard.aggregates.service import get_global_aggregate
from leaderboard.db.models import ContributorBadge, GlobalAggregate
from leaderboard.gamification.badge_service import list_contributor_badges
from leaderboard.pipeline import prebuild, prepare


class TestPrebuildRun:
    @pytest.mark.asyncio
    async def test_computes_aggregates_and_awards_badges(self, store, settings):
        await prepare.run(store, settings)
        activities = make_activities(12, contributor="alice")
        activities[0] = make_activity("metric-1", contributor="alice", meta={"example_metric": 4})
        activities[1] = make_activity("metric-2", contributor="alice", meta={"example_metric": 7})
        async with store.session() as db:
            await seed_activities(db, activities)

        summary = await prebuild.run(store, settings)

        assert summary.badges_awarded == 1
        assert summary.aggregates["example_avg_metric"].global_value == 6
        async with store.session() as db:
            (badge,) = await list_contributor_badges(db, ["engagement_champion"])
            assert badge.slug == "engagement_champion__alice__bronze"
            stored = await get_global_aggregate(db, "example_avg_metric")
            assert stored.value.value == 6

    @pytest.mark.asyncio
    async def test_empty_store(self, store, settings):
        summary = await prebuild.run(store, settings)

        assert summary.badges_awarded == 0
        assert summary.aggregates["example_avg_metric"].global_value is None
        async with store.session() as db:
            assert await count_rows(db, GlobalAggregate) == 0
            assert await count_rows(db, ContributorBadge) == 0

    @pytest.mark.asyncio
    async def test_second_run_awards_nothing_new(self, store, settings):
        async with store.session() as db:
            await seed_activities(db, make_activities(55, contributor="bob"))

        first = await prebuild.run(store, settings)
        second = await prebuild.run(store, settings)

        assert first.badges_awarded == 2
        assert second.badges_awarded == 0
        async with store.session() as db:
            assert await count_rows(db, ContributorBadge) == 2
