"""Activity kinds managed by this scraper.

Export only writes activities whose kind is listed here, so a data tree
shared by several scrapers keeps one partition per scraper.
"""

from __future__ import annotations

from enum import Enum

from leaderboard.schemas import ActivityDefinitionRecord


class ActivityKind(str, Enum):
    EXAMPLE_ACTIVITY = "example_activity"


ACTIVITY_DEFINITIONS: list[ActivityDefinitionRecord] = [
    ActivityDefinitionRecord(
        slug=ActivityKind.EXAMPLE_ACTIVITY.value,
        name="Example Activity",
        description="Example Activity",
        points=0,
        icon="message-circle",
    ),
]


def managed_activity_kinds() -> list[str]:
    return [kind.value for kind in ActivityKind]
