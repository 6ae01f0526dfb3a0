"""Tests for settings and logging configuration."""

import json
import logging

import pytest
from pydantic import ValidationError

from petition_admin.core.config import Settings
from petition_admin.core.logging import JSONFormatter, get_logger, setup_logging


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.database_url.startswith("sqlite+aiosqlite://")
        assert settings.log_level == "INFO"
        assert settings.log_format == "dev"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "structured")

        settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.log_format == "structured"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="chatty")

    def test_invalid_argon2_cost(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, argon2_time_cost=0)


class TestLogging:
    @pytest.fixture(autouse=True)
    def restore_package_logger(self):
        logger = logging.getLogger("petition_admin")
        sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
        saved = (logger.handlers[:], logger.level, logger.propagate, sqlalchemy_logger.level)
        yield
        logger.handlers, level, logger.propagate, sqlalchemy_level = saved
        logger.setLevel(level)
        sqlalchemy_logger.setLevel(sqlalchemy_level)

    def test_json_formatter_escapes_message(self):
        record = logging.LogRecord(
            "petition_admin.test", logging.INFO, __file__, 1, 'said "hi"\nbye', None, None
        )

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == 'said "hi"\nbye'
        assert entry["level"] == "INFO"
        assert entry["logger"] == "petition_admin.test"

    def test_structured_setup(self):
        root_handlers = logging.root.handlers[:]

        logger = setup_logging(Settings(_env_file=None, log_level="WARNING", log_format="structured"))

        assert logger.name == "petition_admin"
        assert logger.level == logging.WARNING
        assert not logger.propagate
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logging.root.handlers == root_handlers

    def test_dev_setup_quiets_sqlalchemy(self):
        logger = setup_logging(Settings(_env_file=None, log_level="INFO", log_format="dev"))

        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_debug_setup_enables_sqlalchemy(self):
        setup_logging(Settings(_env_file=None, log_level="DEBUG"))

        assert logging.getLogger("sqlalchemy.engine").level == logging.DEBUG

    def test_repeated_setup_replaces_handler(self):
        setup_logging(Settings(_env_file=None))
        logger = setup_logging(Settings(_env_file=None))

        assert len(logger.handlers) == 1

    def test_get_logger_prefix(self):
        assert get_logger("auth").name == "petition_admin.auth"
