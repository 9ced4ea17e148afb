"""Threshold badge engine: turns per-contributor metrics into badge awards.

Every run re-asserts every tier a contributor qualifies for. Awards are
written with ON CONFLICT DO NOTHING keyed by the award slug, so repeated
runs never duplicate a badge nor move its ``achieved_on`` date.

Thresholds are evaluated in the order given and are never sorted. A
non-monotonic list (e.g. ``gold`` cheaper than ``silver``) is legal and
can award non-adjacent tiers in the same pass.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from leaderboard.schemas import ContributorBadgeRecord

AWARDED_BY_AUTOMATED = "automated"


@dataclass(frozen=True)
class BadgeThreshold:
    variant: str
    required: int


@dataclass(frozen=True)
class BadgeMetric:
    """A contributor's metric value and the date its badges are dated on."""

    count: int
    reference_at: datetime | date


def award_slug(badge_slug: str, contributor: str, variant: str) -> str:
    """Idempotency key of an award.

    Changing this format orphans every previously awarded badge.
    """
    return f"{badge_slug}__{contributor}__{variant}"


def achieved_on(reference_at: datetime | date) -> date:
    """Day (UTC) a reference timestamp falls on."""
    if isinstance(reference_at, datetime):
        if reference_at.tzinfo is not None:
            reference_at = reference_at.astimezone(timezone.utc)
        return reference_at.date()
    return reference_at


def evaluate_badge_thresholds(
    badge_slug: str,
    metrics: Mapping[str, BadgeMetric],
    thresholds: Sequence[BadgeThreshold],
    metric_name: str = "metric_value",
) -> list[ContributorBadgeRecord]:
    """Build one award per (contributor, threshold) with ``count >= required``.

    ``achieved_on`` is the metric's reference date, not today, so the same
    data yields the same award dates whenever the engine runs.
    """
    awards: list[ContributorBadgeRecord] = []
    for contributor, metric in metrics.items():
        for threshold in thresholds:
            if metric.count < threshold.required:
                continue
            meta: dict[str, Any] = {
                metric_name: metric.count,
                "threshold": threshold.required,
                "awarded_by": AWARDED_BY_AUTOMATED,
            }
            awards.append(
                ContributorBadgeRecord(
                    slug=award_slug(badge_slug, contributor, threshold.variant),
                    badge=badge_slug,
                    contributor=contributor,
                    variant=threshold.variant,
                    achieved_on=achieved_on(metric.reference_at),
                    meta=meta,
                )
            )
    return awards
