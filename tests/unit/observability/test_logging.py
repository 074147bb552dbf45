"""
growth-autopilot: unit tests for structured logging

File: tests/unit/observability/test_logging.py
Last updated: 2026-10-19

Purpose
- Validate the JSON-lines sink: one parseable object per line, correlation
  fields, secret redaction and clean queue shutdown.

What this test file should cover
- Redaction of messages and extra fields.
- Correlation scope binding and unbinding.
- structlog events reaching the sink.
- Records from several threads landing as valid lines without drops.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import pytest
import structlog

from growth_autopilot.observability.logging import (
    LOG_FILENAME,
    LoggingConfig,
    configure_structlog,
    correlation_scope,
    get_active_logging_handle,
    get_correlation_context,
    parse_log_level,
    setup_structured_logging,
    shutdown_logging,
)

if TYPE_CHECKING:
    from pathlib import Path

FAKE_KEY = "sk-FAKEtestvalue1234567890"


@pytest.fixture(autouse=True)
def _cleanup_logging() -> None:
    yield
    shutdown_logging()


def _logger_name() -> str:
    return f"growth_autopilot.tests.logging.{uuid4().hex}"


def _read_json_lines(path: Path) -> list[dict[str, Any]]:
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines if line.strip()]


def test_log_lines_are_json_with_run_id_and_redacted_secrets(tmp_path: Path) -> None:
    name = _logger_name()
    handle = setup_structured_logging(LoggingConfig(run_id="run-1", base_log_dir=tmp_path, logger_name=name))
    logger = logging.getLogger(name)

    logger.info("calling upstream api_key=%s", FAKE_KEY, extra={"password": "hunter2", "pages": 3})
    shutdown_logging(handle)

    assert handle.log_path == tmp_path / "run-1" / LOG_FILENAME
    (entry,) = _read_json_lines(handle.log_path)
    assert entry["run_id"] == "run-1"
    assert entry["level"] == "INFO"
    assert entry["logger"] == name
    assert entry["timestamp"].endswith("Z")
    assert FAKE_KEY not in entry["message"]
    assert "[REDACTED]" in entry["message"]
    assert entry["fields"] == {"pages": 3, "password": "[REDACTED]"}


def test_redaction_can_be_disabled(tmp_path: Path) -> None:
    name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(run_id="run-raw", base_log_dir=tmp_path, logger_name=name, redact_secrets=False)
    )

    logging.getLogger(name).warning("raw api_key=%s", FAKE_KEY)
    shutdown_logging(handle)

    (entry,) = _read_json_lines(handle.log_path)
    assert FAKE_KEY in entry["message"]


def test_correlation_scope_fields_are_copied_onto_records(tmp_path: Path) -> None:
    name = _logger_name()
    handle = setup_structured_logging(LoggingConfig(run_id="run-2", base_log_dir=tmp_path, logger_name=name))
    logger = logging.getLogger(name)

    with correlation_scope(tenant_id="acme", project_id="web", command="analyze"):
        assert get_correlation_context() == {"tenant_id": "acme", "project_id": "web", "command": "analyze"}
        logger.info("inside")
        with correlation_scope(project_id=None):
            logger.info("nested")
    logger.info("outside")
    shutdown_logging(handle)

    inside, nested, outside = _read_json_lines(handle.log_path)
    assert inside["tenant_id"] == "acme"
    assert inside["command"] == "analyze"
    assert "project_id" not in nested
    assert nested["tenant_id"] == "acme"
    assert "tenant_id" not in outside
    assert get_correlation_context() == {}


def test_structlog_events_reach_the_sink(tmp_path: Path) -> None:
    name = _logger_name()
    handle = setup_structured_logging(LoggingConfig(run_id="run-3", base_log_dir=tmp_path, logger_name=name))
    configure_structlog()

    structlog.get_logger(name).info("analysis_completed", findings=4, trace_id="trace-9")
    shutdown_logging(handle)

    (entry,) = _read_json_lines(handle.log_path)
    assert entry["message"] == "analysis_completed"
    assert entry["trace_id"] == "trace-9"
    assert entry["fields"] == {"findings": 4}


def test_level_filtering(tmp_path: Path) -> None:
    name = _logger_name()
    handle = setup_structured_logging(
        LoggingConfig(run_id="run-4", base_log_dir=tmp_path, logger_name=name, level="WARNING")
    )
    logger = logging.getLogger(name)

    logger.info("hidden")
    logger.error("shown")
    shutdown_logging(handle)

    assert [entry["message"] for entry in _read_json_lines(handle.log_path)] == ["shown"]


def test_multithreaded_records_are_complete_lines(tmp_path: Path) -> None:
    name = _logger_name()
    handle = setup_structured_logging(LoggingConfig(run_id="run-5", base_log_dir=tmp_path, logger_name=name))
    logger = logging.getLogger(name)

    def _emit(worker: int) -> None:
        for index in range(25):
            logger.info("worker %d line %d", worker, index)

    threads = [threading.Thread(target=_emit, args=(worker,)) for worker in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    handle.flush()
    shutdown_logging(handle)

    entries = _read_json_lines(handle.log_path)
    assert len(entries) == 100
    assert handle.dropped_records == 0
    assert handle.is_shutdown


def test_new_setup_replaces_active_handle(tmp_path: Path) -> None:
    first = setup_structured_logging(LoggingConfig(run_id="first", base_log_dir=tmp_path, logger_name=_logger_name()))
    second = setup_structured_logging(LoggingConfig(run_id="second", base_log_dir=tmp_path, logger_name=_logger_name()))

    assert first.is_shutdown
    assert get_active_logging_handle() is second

    shutdown_logging()
    shutdown_logging()
    assert second.is_shutdown
    assert get_active_logging_handle() is None


@pytest.mark.parametrize(
    ("config", "message"),
    [
        (LoggingConfig(run_id="  "), "run_id must not be empty"),
        (LoggingConfig(run_id="ok", queue_size=0), "queue_size must be > 0"),
    ],
)
def test_invalid_logging_config_is_rejected(tmp_path: Path, config: LoggingConfig, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        setup_structured_logging(config)


def test_parse_log_level() -> None:
    assert parse_log_level("debug") == logging.DEBUG
    assert parse_log_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError, match="unsupported logging level"):
        parse_log_level("chatty")
