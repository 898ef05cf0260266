"""Tests for autotime/logging_config.py"""

import json
import logging

import pytest

from autotime.logging_config import get_logger, run_context, setup_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


class TestSetupLogging:
    def test_file_gets_json_lines_with_run_context(self, tmp_path, restore_root_logging):
        log_file = tmp_path / "logs" / "autotime.log"
        setup_logging(level="INFO", json_output=True, log_file=log_file)
        logger = get_logger("autotime.probe")

        with run_context(dry_run=True, window_days=3) as run_id:
            logger.info("probe_event", entries=4)
        logger.info("outside_run")

        for handler in logging.getLogger().handlers:
            handler.flush()
        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        inside = next(line for line in lines if line["event"] == "probe_event")
        outside = next(line for line in lines if line["event"] == "outside_run")

        assert inside["run_id"] == run_id
        assert inside["dry_run"] is True
        assert inside["window_days"] == 3
        assert inside["entries"] == 4
        assert inside["level"] == "info"
        assert "run_id" not in outside

    def test_http_client_loggers_quietened(self, restore_root_logging):
        setup_logging(level="DEBUG", json_output=False)
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, restore_root_logging):
        setup_logging(level="chatty", json_output=False)
        assert logging.getLogger().level == logging.INFO
