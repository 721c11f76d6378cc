"""Tests for wren.logs — status severities and handler setup."""

import json
import logging
import logging.handlers
from pathlib import Path

from wren.config import AppConfig
from wren.logs import JSONFormatter, configure_logging, log_level_for_status


class TestLevelForStatus:
    def test_client_errors_are_info(self) -> None:
        assert log_level_for_status(404) == logging.INFO
        assert log_level_for_status(400) == logging.INFO

    def test_server_errors_are_error(self) -> None:
        assert log_level_for_status(500) == logging.ERROR
        assert log_level_for_status(502) == logging.ERROR

    def test_anything_else_is_critical(self) -> None:
        assert log_level_for_status(0) == logging.CRITICAL
        assert log_level_for_status(302) == logging.CRITICAL


class TestConfigureLogging:
    def teardown_method(self) -> None:
        for name in ("wren", "dnsproxy"):
            logger = logging.getLogger(name)
            for handler in list(logger.handlers):
                if handler.get_name() == "wren":
                    logger.removeHandler(handler)
                    handler.close()

    def test_stream_handler_by_default(self) -> None:
        handler = configure_logging(AppConfig(log_level="warning"))
        assert isinstance(handler, logging.StreamHandler)
        assert logging.getLogger("wren").level == logging.WARNING

    def test_rotating_file_handler(self, tmp_path: Path) -> None:
        config = AppConfig(log_file=tmp_path / "logs" / "app.log", log_backups=3)
        handler = configure_logging(config)
        assert isinstance(handler, logging.handlers.TimedRotatingFileHandler)
        assert handler.backupCount == 3
        assert (tmp_path / "logs").is_dir()

    def test_extra_logger_names(self) -> None:
        handler = configure_logging(AppConfig(), names=("dnsproxy",))
        assert handler in logging.getLogger("dnsproxy").handlers

    def test_idempotent(self) -> None:
        configure_logging(AppConfig())
        configure_logging(AppConfig())
        named = [h for h in logging.getLogger("wren").handlers if h.get_name() == "wren"]
        assert len(named) == 1

    def test_json_format(self) -> None:
        handler = configure_logging(AppConfig(log_format="json"))
        assert isinstance(handler.formatter, JSONFormatter)


class TestJSONFormatter:
    def test_one_object_per_record(self) -> None:
        record = logging.LogRecord("wren.server", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "hello world"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "wren.server"
