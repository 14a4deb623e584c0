"""Unit tests for logging configuration."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
import structlog

from tunnelctl_core.observability import configure_logging


@pytest.fixture(autouse=True)
def restore_root_level() -> Generator[None, None, None]:
    """Keep the root logger level from leaking between tests."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_sets_root_level(self) -> None:
        """The stdlib root logger gets the requested level."""
        configure_logging(log_level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_level_is_case_insensitive(self) -> None:
        """Lower-case level names are accepted."""
        configure_logging(log_level="error")
        assert logging.getLogger().level == logging.ERROR

    def test_unknown_level(self) -> None:
        """Unknown levels raise ValueError."""
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(log_level="LOUD")

    def test_uses_stdlib_logger_factory(self) -> None:
        """structlog events are routed through the stdlib logging module."""
        configure_logging(log_level="INFO", json_format=True, add_timestamp=False)
        config = structlog.get_config()
        assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)
        assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)
