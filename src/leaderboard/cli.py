"""Command line entry point: ``leaderboard <stage>``.

Exit codes: 0 on success, 2 for configuration problems (nothing was done),
1 for any other failure.
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Awaitable, Callable, Sequence

import structlog
from pydantic import ValidationError

from leaderboard.config import Settings, get_settings
from leaderboard.exceptions import ConfigurationError
from leaderboard.logging import setup_logging
from leaderboard.pipeline import export, importer, prebuild, prepare, scrape

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2

STAGES: dict[str, Callable[[Settings], Awaitable[object]]] = {
    "scrape": scrape.main,
    "prepare": prepare.main,
    "pre-build": prebuild.main,
    "export": export.main,
    "import": importer.main,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leaderboard",
        description="Leaderboard data pipeline stages.",
    )
    parser.add_argument("stage", choices=sorted(STAGES), help="pipeline stage to run")
    parser.add_argument("--log-level", default=None, help="override LEADERBOARD_LOG_LEVEL")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as exc:
        # Logging is not configured yet; fall back to structlog defaults.
        logger.error("invalid_configuration", errors=exc.errors(include_url=False))
        return EXIT_CONFIG

    if args.log_level:
        settings = settings.model_copy(update={"log_level": args.log_level})
    setup_logging(settings)

    stage = STAGES[args.stage]
    try:
        asyncio.run(stage(settings))
    except ConfigurationError as exc:
        logger.error("configuration_error", stage=args.stage, error=str(exc))
        return EXIT_CONFIG
    except Exception:
        logger.exception("stage_failed", stage=args.stage)
        return EXIT_FAILURE

    logger.info("stage_completed", stage=args.stage)
    return EXIT_OK
