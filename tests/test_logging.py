"""Tests for glissue.logging (GlissueLogging, level/format from config)."""

import logging

from glissue.config import LoggingConfig
from glissue.logging import (
    DEFAULT_FORMAT,
    DEFAULT_LEVEL,
    HTTP_LOGGERS,
    LEVELS,
    GlissueLogging,
    _resolve_level,
)


class TestConstants:
    """Module constants and level mapping."""

    def test_levels_has_four_standard_levels(self) -> None:
        """LEVELS maps DEBUG, INFO, WARNING, ERROR to logging constants."""
        assert LEVELS == {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
        }

    def test_default_format_has_timestamp(self) -> None:
        """Progress lines carry a timestamp."""
        assert "%(asctime)s" in DEFAULT_FORMAT
        assert "%(message)s" in DEFAULT_FORMAT

    def test_default_level_is_info(self) -> None:
        assert DEFAULT_LEVEL == "INFO"


class TestResolveLevel:
    """_resolve_level maps level names to logging constants."""

    def test_known_levels(self) -> None:
        assert _resolve_level("DEBUG") == logging.DEBUG
        assert _resolve_level("WARNING") == logging.WARNING

    def test_lowercase_and_whitespace_normalized(self) -> None:
        """Level is stripped and uppercased before lookup."""
        assert _resolve_level(" debug ") == logging.DEBUG
        assert _resolve_level("\terror\t") == logging.ERROR

    def test_unknown_level_returns_info(self) -> None:
        assert _resolve_level("TRACE") == logging.INFO
        assert _resolve_level("") == logging.INFO


class TestGlissueLogging:
    """GlissueLogging applies LoggingConfig to the root logger."""

    def test_setup_sets_root_level_from_config(self) -> None:
        for level_name, expected_num in LEVELS.items():
            GlissueLogging(LoggingConfig(level=level_name, format="%(message)s")).setup()
            assert logging.root.level == expected_num

    def test_setup_applies_format(self) -> None:
        custom = "%(levelname)s || %(message)s"
        GlissueLogging(LoggingConfig(level="INFO", format=custom)).setup()
        assert logging.root.handlers
        assert logging.root.handlers[0].formatter._fmt == custom

    def test_empty_format_uses_default(self) -> None:
        GlissueLogging(LoggingConfig(level="INFO", format="")).setup()
        assert logging.root.handlers[0].formatter._fmt == DEFAULT_FORMAT

    def test_http_loggers_quiet_above_debug(self) -> None:
        """urllib3 connection lines stay out of INFO progress output."""
        GlissueLogging(LoggingConfig(level="INFO", format="%(message)s")).setup()
        for name in HTTP_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING
        assert not logging.getLogger("urllib3.connectionpool").isEnabledFor(logging.INFO)

    def test_http_loggers_verbose_at_debug(self) -> None:
        GlissueLogging(LoggingConfig(level="DEBUG", format="%(message)s")).setup()
        for name in HTTP_LOGGERS:
            assert logging.getLogger(name).level == logging.DEBUG
