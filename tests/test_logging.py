"""Tests for setup_logging."""

from __future__ import annotations

import logging

import pytest
import structlog

from src.infra.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_structlog():
    yield
    structlog.reset_defaults()


def test_json_output_renders_event(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(json_output=True, log_level="INFO")
    structlog.get_logger().info("karma_created", name="Deep work")

    err = capsys.readouterr().err
    assert '"event": "karma_created"' in err
    assert '"name": "Deep work"' in err


def test_level_filters_debug(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(json_output=True, log_level="WARNING")
    structlog.get_logger().info("db_engine_created")

    assert "db_engine_created" not in capsys.readouterr().err


def test_library_loggers_quieted() -> None:
    setup_logging(log_level="DEBUG")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
