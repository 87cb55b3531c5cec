"""Tests for gkcli.logging (GkLogging, level/format from config)."""

import logging

from gkcli.config import LoggingConfig
from gkcli.logging import DEFAULT_FORMAT, LEVELS, GkLogging, _resolve_level


def test_default_config_logs_warnings_only() -> None:
    """CLI output stays quiet unless asked: the default config sets WARNING."""
    GkLogging(LoggingConfig()).setup()
    assert logging.root.level == logging.WARNING


def test_resolve_level_normalizes_and_falls_back() -> None:
    """Names are case/whitespace insensitive; unknown names give INFO."""
    assert _resolve_level(" debug ") == logging.DEBUG
    assert _resolve_level("Error") == logging.ERROR
    assert _resolve_level("TRACE") == logging.INFO
    assert _resolve_level("") == logging.INFO


def test_setup_sets_root_level_from_config() -> None:
    """setup() applies each supported level to the root logger."""
    for level_name, expected in LEVELS.items():
        GkLogging(LoggingConfig(level=level_name, format="%(message)s")).setup()
        assert logging.root.level == expected


def test_verbose_forces_debug() -> None:
    """--verbose overrides the configured level."""
    GkLogging(LoggingConfig(level="ERROR"), verbose=True).setup()
    assert logging.root.level == logging.DEBUG


def test_setup_applies_format_and_default() -> None:
    """Custom format is used; an empty one falls back to DEFAULT_FORMAT."""
    custom = "%(levelname)s || %(message)s"
    GkLogging(LoggingConfig(level="INFO", format=custom)).setup()
    assert logging.root.handlers[0].formatter._fmt == custom

    GkLogging(LoggingConfig(level="INFO", format="")).setup()
    assert logging.root.handlers[0].formatter._fmt == DEFAULT_FORMAT
