"""Per-contributor JSON files under ``<data_path>/data/<source>/<kind>/``.

Each file is a JSON array of records belonging to one contributor and is
named after that contributor, so contributor identities are validated
before they become file names.
"""

from __future__ import annotations

import json
from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from leaderboard.contributors.service import is_safe_contributor

logger = structlog.get_logger()

ACTIVITIES_KIND = "activities"
BADGES_KIND = "badges"

PROGRESS_EVERY = 10

M = TypeVar("M", bound=BaseModel)


def kind_dir(data_path: str | Path, source_name: str, kind: str) -> Path:
    return Path(data_path) / "data" / source_name / kind


def group_by_contributor(records: Iterable[M]) -> dict[str, list[M]]:
    grouped: dict[str, list[M]] = defaultdict(list)
    for record in records:
        grouped[record.contributor].append(record)  # type: ignore[attr-defined]
    return dict(grouped)


def write_contributor_files(directory: Path, grouped: Mapping[str, Sequence[BaseModel]]) -> int:
    """Write one ``<contributor>.json`` per contributor. Returns files written.

    Contributors whose identity is not a safe file name are skipped.
    """
    directory.mkdir(parents=True, exist_ok=True)

    written = 0
    for contributor, records in grouped.items():
        if not is_safe_contributor(contributor):
            logger.warning("unsafe_contributor_skipped", contributor=contributor, directory=str(directory))
            continue

        payload = [record.model_dump(mode="json") for record in records]
        (directory / f"{contributor}.json").write_text(json.dumps(payload, indent=2), encoding="utf-8")
        written += 1

        if written % PROGRESS_EVERY == 0:
            logger.info("export_progress", written=written, total=len(grouped), directory=str(directory))

    return written


def read_contributor_files(directory: Path, model: type[M]) -> list[M] | None:
    """Load every record from the ``*.json`` files in ``directory``.

    Returns ``None`` when the directory does not exist. Unreadable files and
    records that fail validation are skipped with a warning.
    """
    if not directory.is_dir():
        logger.info("import_directory_missing", directory=str(directory))
        return None

    files = sorted(directory.glob("*.json"))
    logger.info("import_files_found", count=len(files), directory=str(directory))

    records: list[M] = []
    for index, path in enumerate(files, start=1):
        if index % PROGRESS_EVERY == 0:
            logger.info("import_progress", file_number=index, total=len(files), records=len(records))

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("import_file_unparseable", file=str(path), error=str(exc))
            continue
        if not isinstance(raw, list):
            logger.warning("import_file_not_a_list", file=str(path))
            continue

        for item in raw:
            try:
                records.append(model.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "import_record_skipped",
                    file=str(path),
                    slug=item.get("slug") if isinstance(item, dict) else None,
                    errors=exc.error_count(),
                )

    logger.info("import_directory_loaded", files=len(files), records=len(records), directory=str(directory))
    return records
