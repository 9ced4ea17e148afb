"""Contributor identity persistence and file-name safety."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard.db.models import Contributor
from leaderboard.exceptions import UnsafeContributorError
from leaderboard.upsert import DEFAULT_BATCH_SIZE, ConflictPolicy, upsert_rows

logger = logging.getLogger(__name__)

AVATAR_URL_TEMPLATE = "https://gravatar.com/avatar/{username}"

# Path separators, characters Windows refuses in file names, and control chars.
_UNSAFE_CHARS = re.compile(r'[/\\<>:"|?*\x00-\x1f\x7f]')

# Most filesystems cap a single name at 255 bytes; the ".json" suffix is added on export.
MAX_CONTRIBUTOR_BYTES = 255 - len(".json")


def validate_contributor_filename(contributor: str) -> str:
    """Return ``contributor`` unchanged if it is safe as a single path segment.

    Raises:
        UnsafeContributorError: For empty names, ``.``/``..``, names ending in
            a dot or space, names too long for a file name, and names with
            separators, reserved or control characters.
    """
    if not contributor or contributor in {".", ".."}:
        msg = f"Contributor {contributor!r} cannot be used as a file name"
        raise UnsafeContributorError(msg)
    if contributor.endswith((".", " ")):
        msg = f"Contributor {contributor!r} ends with a dot or space"
        raise UnsafeContributorError(msg)
    if len(contributor.encode("utf-8")) > MAX_CONTRIBUTOR_BYTES:
        msg = f"Contributor {contributor[:32]!r}... exceeds {MAX_CONTRIBUTOR_BYTES} bytes as a file name"
        raise UnsafeContributorError(msg)
    if _UNSAFE_CHARS.search(contributor):
        msg = f"Contributor {contributor!r} contains characters unsafe for a file name"
        raise UnsafeContributorError(msg)
    return contributor


def is_safe_contributor(contributor: str) -> bool:
    try:
        validate_contributor_filename(contributor)
    except UnsafeContributorError:
        return False
    return True


async def add_contributors(
    db: AsyncSession,
    usernames: Iterable[str],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> int:
    """Insert new contributors, leaving existing ones untouched.

    Duplicate usernames are dropped first since the username is the key.
    Returns the number of newly inserted contributors.
    """
    unique = list(dict.fromkeys(usernames))
    rows = [
        {"username": username, "avatar_url": AVATAR_URL_TEMPLATE.format(username=username)}
        for username in unique
    ]
    return await upsert_rows(
        db,
        Contributor,
        rows,
        conflict_columns=["username"],
        policy=ConflictPolicy.IGNORE,
        batch_size=batch_size,
        label="new contributors",
    )
