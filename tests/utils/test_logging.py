"""Tests for structured logging setup."""

import json
import logging

import structlog

from opsdesk.utils.logging import LOG_FILE_NAME, get_logger, setup_logging


def _flush_handlers():
    for handler in logging.getLogger().handlers:
        handler.flush()


class TestSetupLogging:

    def teardown_method(self):
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.WARNING)
        structlog.reset_defaults()

    def test_console_and_rotating_file(self, tmp_path):
        setup_logging(debug=False, log_dir=str(tmp_path))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 2
        assert (tmp_path / LOG_FILE_NAME).exists()

    def test_events_reach_the_log_file(self, tmp_path):
        setup_logging(debug=False, log_dir=str(tmp_path))
        get_logger("engine.record_store").info("record_created", id="INC-2024-001")
        _flush_handlers()

        lines = (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8").splitlines()
        event = json.loads(lines[-1])
        assert event["event"] == "record_created"
        assert event["id"] == "INC-2024-001"
        assert event["level"] == "info"
        assert event["logger"] == "engine.record_store"

    def test_file_stays_json_in_debug_mode(self, tmp_path):
        setup_logging(debug=True, log_dir=str(tmp_path))
        get_logger("collaborators.roster").debug("roster_member_updated", member_id="2")
        _flush_handlers()

        event = json.loads((tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8").splitlines()[-1])
        assert event["event"] == "roster_member_updated"
        assert event["level"] == "debug"

    def test_stdlib_records_are_rendered_too(self, tmp_path):
        setup_logging(debug=False, log_dir=str(tmp_path))
        logging.getLogger("third.party").warning("disk %s", "full")
        _flush_handlers()

        event = json.loads((tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8").splitlines()[-1])
        assert event["event"] == "disk full"
        assert event["level"] == "warning"

    def test_without_log_dir_only_console(self):
        setup_logging(debug=True, log_dir=None)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert logging.getLogger().level == logging.DEBUG

    def test_reconfiguring_does_not_stack_handlers(self, tmp_path):
        setup_logging(log_dir=str(tmp_path))
        setup_logging(log_dir=str(tmp_path))
        assert len(logging.getLogger().handlers) == 2

    def test_console_events_go_to_stderr(self, capsys):
        setup_logging(debug=False, log_dir=None)
        get_logger("engine.record_store").info("record_created", id="INC-2024-001")

        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip().splitlines()[-1])
        assert event["event"] == "record_created"
        assert event["id"] == "INC-2024-001"

    def test_level_filtering(self, capsys):
        setup_logging(debug=False, log_dir=None)
        get_logger("engine.aggregation").debug("summary_computed")

        assert "summary_computed" not in capsys.readouterr().err
