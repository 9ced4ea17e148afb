"""Badge seed data and the thresholds that award each variant."""

from __future__ import annotations

from leaderboard.gamification.badge_engine import BadgeThreshold
from leaderboard.schemas import BadgeDefinitionRecord, BadgeVariant

ENGAGEMENT_CHAMPION = "engagement_champion"

# Ascending requirement. The variants mapping below has no order of its own.
ENGAGEMENT_CHAMPION_THRESHOLDS: list[BadgeThreshold] = [
    BadgeThreshold(variant="bronze", required=10),
    BadgeThreshold(variant="silver", required=50),
    BadgeThreshold(variant="gold", required=100),
    BadgeThreshold(variant="platinum", required=500),
    BadgeThreshold(variant="diamond", required=1000),
]

BADGE_SEED_DATA: list[BadgeDefinitionRecord] = [
    BadgeDefinitionRecord(
        slug=ENGAGEMENT_CHAMPION,
        name="Engagement Champion",
        description="Awarded for active participation and consistent engagement in the community",
        variants={
            t.variant: BadgeVariant(
                description=f"{t.variant.capitalize()} - {t.required} activities",
                svg_url=f"/badges/engagement-{t.variant}.svg",
                requirement=f"Complete {t.required} activities",
            )
            for t in ENGAGEMENT_CHAMPION_THRESHOLDS
        },
    ),
]


def managed_badge_slugs() -> list[str]:
    return [badge.slug for badge in BADGE_SEED_DATA]
