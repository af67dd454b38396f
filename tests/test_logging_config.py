import logging

import pytest

from snakeforest.cli.logging_config import LOG_LEVEL_ENV_VAR, configure_logging


def test_explicit_level_wins_over_environment(monkeypatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "ERROR")

    logger = configure_logging(level="debug")

    assert logger.name == "snakeforest"
    assert logger.level == logging.DEBUG


def test_environment_level_and_default(monkeypatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "info")
    assert configure_logging().level == logging.INFO

    monkeypatch.delenv(LOG_LEVEL_ENV_VAR)
    assert configure_logging().level == logging.WARNING


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError, match="unsupported log level: loud"):
        configure_logging(level="loud")
