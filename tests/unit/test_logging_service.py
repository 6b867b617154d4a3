"""Tests for server logging setup."""

import logging
from logging.handlers import RotatingFileHandler

from rentledger.services.logging import resolve_level, setup_server_logging


class TestServerLogging:
    """Test root logger configuration."""

    def setup_method(self):
        self.root_logger = logging.getLogger()
        self.saved_handlers = self.root_logger.handlers[:]
        self.saved_level = self.root_logger.level

    def teardown_method(self):
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.saved_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.saved_level)

    def test_creates_log_directory(self, tmp_path):
        log_file = tmp_path / "nested" / "server.log"

        setup_server_logging(str(log_file), "INFO")

        assert log_file.parent.is_dir()

    def test_stdout_and_rotating_file(self, tmp_path):
        setup_server_logging(str(tmp_path / "server.log"), "INFO")

        handlers = self.root_logger.handlers
        assert len(handlers) == 2
        assert any(isinstance(handler, RotatingFileHandler) for handler in handlers)

    def test_empty_log_file_means_stdout_only(self):
        setup_server_logging("", "INFO")

        assert len(self.root_logger.handlers) == 1
        assert not isinstance(self.root_logger.handlers[0], logging.FileHandler)

    def test_repeated_setup_does_not_duplicate(self, tmp_path):
        setup_server_logging(str(tmp_path / "server.log"), "INFO")
        setup_server_logging(str(tmp_path / "server.log"), "INFO")

        assert len(self.root_logger.handlers) == 2

    def test_writes_formatted_records(self, tmp_path):
        log_file = tmp_path / "server.log"
        setup_server_logging(str(log_file), "WARNING")

        logging.getLogger("rentledger.test").info("hidden")
        logging.getLogger("rentledger.test").error("ledger fault on invoice 7")
        for handler in self.root_logger.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "rentledger.test - ERROR - ledger fault on invoice 7" in content
        assert "hidden" not in content
        assert self.root_logger.level == logging.WARNING


class TestResolveLevel:
    def test_names(self):
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(" Warning ") == logging.WARNING

    def test_unknown_and_empty(self):
        assert resolve_level("chatty") == logging.INFO
        assert resolve_level("") == logging.INFO
        assert resolve_level(None) == logging.INFO
