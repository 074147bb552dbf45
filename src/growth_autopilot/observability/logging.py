"""
growth-autopilot: structured JSON-lines logging

File: src/growth_autopilot/observability/logging.py
Last updated: 2026-10-19

Purpose
- Route structlog events into stdlib logging and write them, one JSON object
  per line, to ``<artifacts>/<run_id>/logs.jsonl`` through a non-blocking
  queue handler and a background listener.

Functional requirements
- Correlation fields (run, trace, tenant, project, command) are bound through
  a contextvars scope and copied onto every record.
- Messages and extra fields pass through secret redaction unless disabled.
- Logging is flushed and stopped explicitly and again at interpreter exit.
"""

from __future__ import annotations

import atexit
import contextvars
import json
import logging
import logging.handlers
import math
import queue
import threading
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Final

import structlog

from growth_autopilot.domain.timestamps import to_iso8601z
from growth_autopilot.security.redaction import redact_structure

LogRedactor = Callable[[Any], Any]

LOG_FILENAME: Final[str] = "logs.jsonl"
ROOT_LOGGER_NAME: Final[str] = "growth_autopilot"

CORRELATION_KEYS: Final[tuple[str, ...]] = ("run_id", "trace_id", "tenant_id", "project_id", "command")

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "correlation"}

_correlation: contextvars.ContextVar[Mapping[str, str]] = contextvars.ContextVar("growth_correlation", default={})

_registry_lock = threading.Lock()
_active: StructuredLoggingHandle | None = None
_atexit_hooked = False


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Where and how one run's logs are written."""

    run_id: str
    base_log_dir: Path | str = Path("artifacts")
    logger_name: str = ROOT_LOGGER_NAME
    level: int | str = "INFO"
    queue_size: int = 4096
    log_to_stderr: bool = False
    redact_secrets: bool = True


def configure_structlog() -> None:
    """Send structlog events through stdlib logging so the JSON sink sees them."""

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class _RunQueueHandler(logging.handlers.QueueHandler):
    """Enqueues without blocking; a full queue drops the record and counts it."""

    def __init__(self, log_queue: queue.Queue[Any]) -> None:
        super().__init__(log_queue)
        self._drop_lock = threading.Lock()
        self.dropped = 0

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # The listener thread cannot see this thread's contextvars.
        bound = get_correlation_context()
        if bound:
            record.correlation = bound
        prepared: logging.LogRecord = super().prepare(record)
        return prepared

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            with self._drop_lock:
                self.dropped += 1


class _JsonLinesFormatter(logging.Formatter):
    def __init__(self, run_id: str, redactor: LogRedactor) -> None:
        super().__init__()
        self._run_id = run_id
        self._redact = redactor

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "timestamp": to_iso8601z(datetime.fromtimestamp(record.created, tz=UTC)),
            "level": record.levelname,
            "logger": record.name,
            "message": _as_text(self._redact(record.getMessage())),
            "run_id": self._run_id,
        }
        line.update(getattr(record, "correlation", {}))
        for key in CORRELATION_KEYS:
            value = record.__dict__.get(key)
            if isinstance(value, str) and value.strip():
                line[key] = value.strip()

        extras = {
            key: _to_json_value(value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and key not in CORRELATION_KEYS and not key.startswith("_")
        }
        if extras:
            line["fields"] = self._redact(extras)
        if record.exc_info is not None:
            line["exception"] = _as_text(self._redact(self.formatException(record.exc_info)))
        return json.dumps(line, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(eq=False)
class StructuredLoggingHandle:
    """One active logging setup: the run's logger, its queue and its sinks."""

    logger: logging.Logger
    run_id: str
    log_path: Path
    _queue: queue.Queue[Any]
    _queue_handler: _RunQueueHandler
    _sinks: tuple[logging.Handler, ...]
    _listener: logging.handlers.QueueListener
    _lock: threading.Lock = field(default_factory=threading.Lock)
    _closed: bool = False

    @property
    def dropped_records(self) -> int:
        return self._queue_handler.dropped

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def flush(self, *, timeout_seconds: float = 2.0) -> None:
        """Wait (bounded) for the listener to drain the queue, then flush sinks."""

        deadline = time.monotonic() + max(timeout_seconds, 0.0)
        while self._queue.unfinished_tasks and time.monotonic() < deadline:
            time.sleep(0.01)
        for sink in self._sinks:
            sink.flush()

    def shutdown(self, *, timeout_seconds: float = 2.0) -> None:
        with self._lock:
            if self._closed:
                return
            self.flush(timeout_seconds=timeout_seconds)
            self._listener.stop()
            self.logger.removeHandler(self._queue_handler)
            self._queue_handler.close()
            for sink in self._sinks:
                sink.close()
            self._closed = True


def setup_structured_logging(config: LoggingConfig) -> StructuredLoggingHandle:
    """Install the queue-backed JSON-lines sink for ``config.run_id``.

    Any previously active setup is shut down first; only one run logs at a time.
    """

    global _active
    shutdown_logging()

    run_id = config.run_id.strip()
    if not run_id:
        raise ValueError("run_id must not be empty")
    if config.queue_size <= 0:
        raise ValueError("queue_size must be > 0")
    level = parse_log_level(config.level)

    log_path = Path(config.base_log_dir) / run_id / LOG_FILENAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = _JsonLinesFormatter(run_id, default_log_redactor if config.redact_secrets else _passthrough)

    sinks: list[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if config.log_to_stderr:
        sinks.append(logging.StreamHandler())
    for sink in sinks:
        sink.setLevel(level)
        sink.setFormatter(formatter)

    logger = logging.getLogger(config.logger_name)
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    logger.setLevel(level)
    logger.propagate = False

    log_queue: queue.Queue[Any] = queue.Queue(maxsize=config.queue_size)
    queue_handler = _RunQueueHandler(log_queue)
    queue_handler.setLevel(level)
    listener = logging.handlers.QueueListener(log_queue, *sinks, respect_handler_level=True)
    listener.start()
    logger.addHandler(queue_handler)

    handle = StructuredLoggingHandle(logger, run_id, log_path, log_queue, queue_handler, tuple(sinks), listener)
    with _registry_lock:
        _active = handle
    _hook_atexit()
    return handle


def flush_logging(handle: StructuredLoggingHandle | None = None, *, timeout_seconds: float = 2.0) -> None:
    target = handle or get_active_logging_handle()
    if target is not None:
        target.flush(timeout_seconds=timeout_seconds)


def shutdown_logging(handle: StructuredLoggingHandle | None = None, *, timeout_seconds: float = 2.0) -> None:
    """Stop the listener and close every sink of ``handle`` (or the active one)."""

    global _active
    target = handle or get_active_logging_handle()
    if target is None:
        return
    target.shutdown(timeout_seconds=timeout_seconds)
    with _registry_lock:
        if _active is target:
            _active = None


def get_active_logging_handle() -> StructuredLoggingHandle | None:
    with _registry_lock:
        return _active


def get_correlation_context() -> dict[str, str]:
    return dict(_correlation.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Bind correlation fields for every record logged inside the scope.

    ``None`` values unbind a field for the duration of the scope.
    """

    bound = get_correlation_context()
    for key, value in fields.items():
        if value is None:
            bound.pop(key, None)
        elif value.strip():
            bound[key] = value.strip()
    token = _correlation.set(bound)
    try:
        yield
    finally:
        _correlation.reset(token)


def default_log_redactor(value: Any) -> Any:
    return redact_structure(value)


def parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelNamesMapping().get(value.strip().upper())
    if level is None:
        raise ValueError(f"unsupported logging level {value!r}")
    return level


def _hook_atexit() -> None:
    global _atexit_hooked
    if not _atexit_hooked:
        atexit.register(shutdown_logging)
        _atexit_hooked = True


def _passthrough(value: Any) -> Any:
    return value


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return "" if value is None else json.dumps(value, sort_keys=True, ensure_ascii=False)


def _to_json_value(value: object) -> Any:
    """Coerce an ``extra`` value into something ``json.dumps`` accepts."""

    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, datetime):
        return to_iso8601z(value)
    if isinstance(value, Mapping):
        return {str(key): _to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json_value(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_to_json_value(item) for item in value), key=repr)
    return str(value)


__all__ = [
    "CORRELATION_KEYS",
    "LOG_FILENAME",
    "LoggingConfig",
    "StructuredLoggingHandle",
    "configure_structlog",
    "correlation_scope",
    "default_log_redactor",
    "flush_logging",
    "get_active_logging_handle",
    "get_correlation_context",
    "parse_log_level",
    "setup_structured_logging",
    "shutdown_logging",
]
