"""Pydantic records exchanged between the store, the engines and the data tree."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel


class _Record(BaseModel):
    model_config = {"from_attributes": True}

    def to_row(self) -> dict[str, Any]:
        """Column values for an upsert (Python objects, not JSON strings)."""
        return self.model_dump()


# --- Activities ---


class ActivityRecord(_Record):
    slug: str
    contributor: str
    activity_definition: str
    title: str | None = None
    occured_at: datetime
    link: str | None = None
    text: str | None = None
    points: int | None = None
    meta: dict[str, Any] | None = None


class ActivityDefinitionRecord(_Record):
    slug: str
    name: str
    description: str
    points: int | None = None
    icon: str | None = None


# --- Badges ---


class BadgeVariant(BaseModel):
    description: str
    svg_url: str
    requirement: str | None = None


class BadgeDefinitionRecord(_Record):
    """A badge family. Variant order is not carried by the mapping."""

    slug: str
    name: str
    description: str
    variants: dict[str, BadgeVariant]


class ContributorBadgeRecord(_Record):
    slug: str
    badge: str
    contributor: str
    variant: str
    achieved_on: date
    meta: dict[str, Any] | None = None


# --- Aggregates ---


class AggregateValue(BaseModel):
    """Tagged aggregate value, stored as ``{"type": ..., "value": ...}``."""

    type: Literal["number"] = "number"
    value: int | float


class GlobalAggregateRecord(_Record):
    slug: str
    name: str
    description: str | None = None
    value: AggregateValue


class ContributorAggregateDefinitionRecord(_Record):
    slug: str
    name: str
    description: str | None = None


class ContributorAggregateRecord(_Record):
    aggregate: str
    contributor: str
    value: AggregateValue
