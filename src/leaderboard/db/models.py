"""ORM models for the leaderboard store.

Column names follow the flat JSON files exported for the static site
(note the historical ``occured_at`` spelling), so records round-trip
between the store and the data tree without renaming.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Index, SmallInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from leaderboard.db.base import Base


class UTCDateTime(TypeDecorator[datetime]):
    """Timestamp stored as naive UTC, returned timezone-aware.

    Naive values are assumed to already be UTC.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


# JSON NULL would round-trip as the string "null"; store SQL NULL instead.
NullableJSON = JSON(none_as_null=True)


# ---------------------------------------------------------------------------
# Contributors
# ---------------------------------------------------------------------------


class Contributor(Base):
    """Maps to the 'contributor' table."""

    __tablename__ = "contributor"

    username: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str | None] = mapped_column(String, nullable=True)
    title: Mapped[str | None] = mapped_column(String, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    social_profiles: Mapped[dict[str, Any] | None] = mapped_column(NullableJSON, nullable=True)
    joining_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    meta: Mapped[dict[str, Any] | None] = mapped_column(NullableJSON, nullable=True)


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------


class ActivityDefinition(Base):
    """Registered activity kinds."""

    __tablename__ = "activity_definition"

    slug: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    points: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    icon: Mapped[str | None] = mapped_column(String, nullable=True)


class Activity(Base):
    """A single recorded event. ``slug`` is the merge key."""

    __tablename__ = "activity"
    __table_args__ = (
        Index("idx_activity_occured_at", "occured_at"),
        Index("idx_activity_contributor", "contributor"),
        Index("idx_activity_definition", "activity_definition"),
    )

    slug: Mapped[str] = mapped_column(String, primary_key=True)
    contributor: Mapped[str] = mapped_column(String, ForeignKey("contributor.username"), nullable=False)
    activity_definition: Mapped[str] = mapped_column(
        String, ForeignKey("activity_definition.slug"), nullable=False
    )
    title: Mapped[str | None] = mapped_column(String, nullable=True)
    occured_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    link: Mapped[str | None] = mapped_column(String, nullable=True)
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    points: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
    meta: Mapped[dict[str, Any] | None] = mapped_column(NullableJSON, nullable=True)


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------


class BadgeDefinition(Base):
    """Badge families. ``variants`` maps variant id -> display metadata."""

    __tablename__ = "badge_definition"

    slug: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    variants: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)


class ContributorBadge(Base):
    """Awarded badges. Immutable once written (inserted with ON CONFLICT DO NOTHING)."""

    __tablename__ = "contributor_badge"
    __table_args__ = (Index("idx_contributor_badge_contributor", "contributor"),)

    slug: Mapped[str] = mapped_column(String, primary_key=True)
    badge: Mapped[str] = mapped_column(String, ForeignKey("badge_definition.slug"), nullable=False)
    contributor: Mapped[str] = mapped_column(String, ForeignKey("contributor.username"), nullable=False)
    variant: Mapped[str] = mapped_column(String, nullable=False)
    achieved_on: Mapped[date] = mapped_column(Date, nullable=False)
    meta: Mapped[dict[str, Any] | None] = mapped_column(NullableJSON, nullable=True)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


class GlobalAggregate(Base):
    """Site-wide derived values, overwritten on every pre-build."""

    __tablename__ = "global_aggregate"

    slug: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    value: Mapped[dict[str, Any] | None] = mapped_column(NullableJSON, nullable=True)


class ContributorAggregateDefinition(Base):
    __tablename__ = "contributor_aggregate_definition"

    slug: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class ContributorAggregate(Base):
    """Per-contributor derived values, keyed by (aggregate, contributor)."""

    __tablename__ = "contributor_aggregate"

    aggregate: Mapped[str] = mapped_column(
        String, ForeignKey("contributor_aggregate_definition.slug"), primary_key=True
    )
    contributor: Mapped[str] = mapped_column(String, ForeignKey("contributor.username"), primary_key=True)
    value: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
