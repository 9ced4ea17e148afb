"""Average aggregates over a numeric activity meta field."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AggregateDefinition:
    """An average of ``meta[meta_field]`` over activities of one kind."""

    slug: str
    name: str
    description: str
    activity_definition: str
    meta_field: str


@dataclass(frozen=True)
class AverageResult:
    contributor_values: dict[str, int] = field(default_factory=dict)
    global_value: int | None = None
    sample_count: int = 0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with ties toward +inf (2.5 -> 3, -2.5 -> -2).

    Python's ``round`` rounds ties to even, which would give 2 for 2.5.
    ``floor(value + 0.5)`` is avoided since the addition itself can round up
    (0.49999999999999994 + 0.5 == 1.0).
    """
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


def numeric_value(raw: Any) -> float | None:
    """Coerce a meta value to a finite number, or ``None`` if it is not one."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        # float() accepts digit separators ("1_000"); plain numeric text only.
        if "_" in raw:
            return None
        try:
            number = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def compute_averages(
    rows: Iterable[tuple[str, Mapping[str, Any] | None]],
    meta_field: str,
) -> AverageResult:
    """Rounded per-contributor means and the rounded mean of all values.

    The global value averages every individual value, not the per-contributor
    means. Rows without a usable number are skipped (never counted as 0);
    with no usable number at all the global value is ``None``.
    """
    per_contributor: dict[str, list[float]] = {}
    all_values: list[float] = []

    for contributor, meta in rows:
        if not meta or meta_field not in meta:
            continue
        value = numeric_value(meta[meta_field])
        if value is None:
            continue
        per_contributor.setdefault(contributor, []).append(value)
        all_values.append(value)

    if not all_values:
        return AverageResult()

    return AverageResult(
        contributor_values={
            contributor: round_half_up(sum(values) / len(values))
            for contributor, values in per_contributor.items()
        },
        global_value=round_half_up(sum(all_values) / len(all_values)),
        sample_count=len(all_values),
    )
