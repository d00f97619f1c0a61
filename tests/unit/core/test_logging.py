"""
Unit Tests for Logging Setup.

setup_logging() replaces the root handlers, so every test restores them
and resets structlog afterwards.
"""

import json
import logging
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import structlog

from notes_app.core.config_schema import LoggingSchema
from notes_app.core.logging import get_logger, merge_extra, setup_logging


def make_logging_config(log_path, level="INFO", fmt="json", console=False, file=True):
    schema = LoggingSchema(
        level=level,
        format=fmt,
        handlers={
            "console": {"enabled": console},
            "file": {
                "enabled": file,
                "path": str(log_path),
                "max_bytes": 1024 * 1024,
                "backup_count": 1,
            },
        },
    )
    return SimpleNamespace(logging=schema)


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def read_records(path) -> list[dict]:
    for handler in logging.getLogger().handlers:
        handler.flush()
    return [json.loads(line) for line in path.read_text().splitlines() if line]


class TestMergeExtra:

    def test_lifts_extra_to_top_level(self):
        event = {"event": "Image stored", "extra": {"reference": "/uploads/a.png", "size": 3}}

        result = merge_extra(None, "info", event)

        assert result == {"event": "Image stored", "reference": "/uploads/a.png", "size": 3}

    def test_existing_keys_not_overwritten(self):
        event = {"event": "x", "request_id": "bound", "extra": {"request_id": "other"}}

        assert merge_extra(None, "info", event)["request_id"] == "bound"

    def test_no_extra_is_noop(self):
        assert merge_extra(None, "info", {"event": "x"}) == {"event": "x"}


class TestSetupLogging:

    def test_sets_root_level_from_config(self, tmp_path):
        config = make_logging_config(tmp_path / "system.jsonl", level="WARNING")

        with patch("notes_app.core.logging.get_app_config", return_value=config):
            setup_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_arguments_override_config(self, tmp_path):
        config = make_logging_config(tmp_path / "system.jsonl", level="WARNING")

        with patch("notes_app.core.logging.get_app_config", return_value=config):
            setup_logging(level="debug", enable_file_logging=False)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert root.handlers == []

    def test_console_handler_added_when_enabled(self, tmp_path):
        config = make_logging_config(tmp_path / "system.jsonl", console=True, file=False)

        with patch("notes_app.core.logging.get_app_config", return_value=config):
            setup_logging(format_type="console")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)

    def test_file_records_are_flat_json(self, tmp_path):
        log_path = tmp_path / "logs" / "system.jsonl"
        config = make_logging_config(log_path)

        with patch("notes_app.core.logging.get_app_config", return_value=config):
            setup_logging()

        structlog.contextvars.bind_contextvars(request_id="req-7")
        get_logger("notes_app.tests").info("Image stored", extra={"reference": "/uploads/a.png"})

        records = [r for r in read_records(log_path) if r["event"] == "Image stored"]
        assert len(records) == 1
        record = records[0]
        assert record["event"] == "Image stored"
        assert record["reference"] == "/uploads/a.png"
        assert record["request_id"] == "req-7"
        assert record["level"] == "info"
        assert record["logger"] == "notes_app.tests"
        assert "extra" not in record

    def test_relative_file_path_resolved_under_project_root(self, tmp_path):
        (tmp_path / ".project_root").touch()
        config = make_logging_config("logs/system.jsonl")

        with patch("notes_app.core.logging.get_app_config", return_value=config), \
             patch("notes_app.core.logging.find_project_root", return_value=tmp_path):
            setup_logging()

        assert (tmp_path / "logs").is_dir()


class TestGetLogger:

    def test_returns_bound_logger_with_name(self):
        logger = get_logger("notes_app.services.note")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")
