"""Logging setup: structlog events and stdlib service lines share one format."""

from __future__ import annotations

import io
import json
import logging

import structlog

from leaderboard.config import Settings
from leaderboard.logging import setup_logging


def _lines(stream) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestJsonFormat:
    def test_service_progress_line_is_json(self, json_log):
        logging.getLogger("leaderboard.upsert").info("Upserted %d/%d %s", 3, 5, "activities")

        (line,) = _lines(json_log)
        assert line["event"] == "Upserted 3/5 activities"
        assert line["level"] == "info"
        assert line["logger"] == "leaderboard.upsert"
        assert "timestamp" in line

    def test_structlog_event_is_json(self, json_log):
        structlog.get_logger("leaderboard.pipeline.test").info("stage_completed", stage="prepare")

        (line,) = _lines(json_log)
        assert line["event"] == "stage_completed"
        assert line["stage"] == "prepare"
        assert line["logger"] == "leaderboard.pipeline.test"

    def test_level_filters_service_lines(self, json_log):
        handler = setup_logging(Settings(log_format="json", log_level="WARNING", _env_file=None), stream=json_log)
        try:
            logging.getLogger("leaderboard.upsert").info("Upserted %d/%d %s", 1, 1, "activities")
            logging.getLogger("leaderboard.upsert").warning("slow batch")
        finally:
            logging.getLogger().removeHandler(handler)

        assert [line["event"] for line in _lines(json_log)] == ["slow batch"]


class TestHandlerReplacement:
    def test_second_setup_replaces_handler(self):
        first, second = io.StringIO(), io.StringIO()
        root = logging.getLogger()

        setup_logging(Settings(log_format="json", _env_file=None), stream=first)
        handler = setup_logging(Settings(log_format="console", _env_file=None), stream=second)
        try:
            logging.getLogger("leaderboard.test").warning("only once")
        finally:
            root.removeHandler(handler)

        assert first.getvalue() == ""
        assert "only once" in second.getvalue()
