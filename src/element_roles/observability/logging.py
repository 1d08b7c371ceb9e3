"""JSON-lines logging for CLI runs and embedding services.

Emitting threads only enqueue records; a single ``QueueListener`` thread formats them
and writes one JSON object per line to ``<log_dir>/<run_id>/<log_filename>``. structlog
events from the domain modules are routed into the same stdlib tree, so a schema
rejection and an application message end up side by side in one file.
"""

from __future__ import annotations

import atexit
import copy
import json
import logging
import logging.handlers
import math
import queue
import sys
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final, cast

import structlog

from element_roles.schema.serialization import JSONValue

_DEFAULT_LOG_FILENAME: Final[str] = "element_roles.jsonl"
_DEFAULT_LOGGER_NAME: Final[str] = "element_roles"
_DEFAULT_QUEUE_SIZE: Final[int] = 4096

# Anything else found on a record arrived through ``extra=`` and is emitted as a field.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(vars(logging.makeLogRecord({}))) | {
    "asctime",
    "message",
    "taskName",
}


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Where and how one run writes its JSON-lines log."""

    run_id: str
    base_log_dir: Path | str = Path("logs")
    logger_name: str = _DEFAULT_LOGGER_NAME
    level: int | str = "INFO"
    queue_size: int = _DEFAULT_QUEUE_SIZE
    log_filename: str = _DEFAULT_LOG_FILENAME
    log_to_stdout: bool = False
    route_structlog: bool = True

    @property
    def log_path(self) -> Path:
        return Path(self.base_log_dir) / self.run_id.strip() / self.log_filename.strip()

    def validate(self) -> int:
        """Reject unusable settings and return the numeric log level."""

        for field_name in ("run_id", "logger_name", "log_filename"):
            value = getattr(self, field_name)
            if not isinstance(value, str):
                raise ValueError(f"{field_name} must be a string, got {type(value).__name__}")
            if not value.strip():
                raise ValueError(f"{field_name} must not be empty")
        if Path(self.log_filename).name != self.log_filename:
            raise ValueError("log_filename must not include path separators")
        if (
            isinstance(self.queue_size, bool)
            or not isinstance(self.queue_size, int)
            or self.queue_size <= 0
        ):
            raise ValueError("queue_size must be > 0")
        return _level_number(self.level)


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    run_id: str,
    log_dir: Path | str | None = None,
    logger_name: str = _DEFAULT_LOGGER_NAME,
) -> logging.Logger:
    """Start JSON-lines logging from an ``[observability]`` settings section."""

    section = dict(observability_config or {})
    level = section.get("log_level", "INFO")
    base_log_dir = log_dir if log_dir is not None else section.get("log_dir", "logs")

    handle = setup_structured_logging(
        LoggingConfig(
            run_id=run_id,
            base_log_dir=base_log_dir if isinstance(base_log_dir, (Path, str)) else "logs",
            logger_name=logger_name,
            level=level if isinstance(level, (int, str)) else "INFO",
            log_to_stdout=section.get("log_to_stdout") is True,
        )
    )
    return handle.logger


class _BoundedQueueHandler(logging.handlers.QueueHandler):
    """Enqueue without ever blocking the caller; overflow is counted and discarded."""

    def __init__(self, capacity: int) -> None:
        super().__init__(queue.Queue(maxsize=capacity))
        self._overflow_lock = threading.Lock()
        self._overflow = 0

    @property
    def overflow(self) -> int:
        with self._overflow_lock:
            return self._overflow

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # The listener shares this process, so exc_info stays usable for the formatter.
        prepared = copy.copy(record)
        prepared.message = record.getMessage()
        prepared.msg = prepared.message
        prepared.args = None
        return prepared

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            with self._overflow_lock:
                self._overflow += 1


class _JsonLinesFormatter(logging.Formatter):
    def __init__(self, run_id: str) -> None:
        super().__init__()
        self.run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        payload: dict[str, JSONValue] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": self.run_id,
        }
        fields = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if fields:
            payload["fields"] = fields
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class StructuredLoggingHandle:
    """A running logging setup; ``shutdown`` drains the queue and detaches it."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        run_id: str,
        log_path: Path,
        queue_handler: _BoundedQueueHandler,
        listener: logging.handlers.QueueListener,
        sinks: tuple[logging.Handler, ...],
        routes_structlog: bool,
    ) -> None:
        self.logger = logger
        self.run_id = run_id
        self.log_path = log_path
        self._queue_handler = queue_handler
        self._listener = listener
        self._sinks = sinks
        self._routes_structlog = routes_structlog
        self._lock = threading.Lock()
        self._closed = False

    @property
    def dropped_records(self) -> int:
        return self._queue_handler.overflow

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def flush(self, *, timeout_seconds: float = 2.0) -> None:
        """Wait for queued records to be written, then flush every sink."""

        pending = self._queue_handler.queue
        deadline = time.monotonic() + max(timeout_seconds, 0.0)
        while getattr(pending, "unfinished_tasks", 0) > 0 and time.monotonic() < deadline:
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
            if self._routes_structlog:
                reset_structlog()
            self._closed = True


class _ActiveHandle:
    """Process-wide slot for the most recent logging setup."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handle: StructuredLoggingHandle | None = None
        self._atexit_registered = False

    def get(self) -> StructuredLoggingHandle | None:
        with self._lock:
            return self._handle

    def install(self, handle: StructuredLoggingHandle) -> None:
        with self._lock:
            self._handle = handle
            if not self._atexit_registered:
                atexit.register(shutdown_logging)
                self._atexit_registered = True

    def release(self, handle: StructuredLoggingHandle) -> None:
        with self._lock:
            if self._handle is handle:
                self._handle = None


_ACTIVE = _ActiveHandle()


def setup_structured_logging(config: LoggingConfig) -> StructuredLoggingHandle:
    """Start queue-backed JSON-lines logging for one run.

    Any previously active setup is shut down first. The named logger stops propagating
    and keeps only the queue handler, so its records are written exactly once.
    """

    level = config.validate()
    shutdown_logging()

    log_path = config.log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = _JsonLinesFormatter(config.run_id.strip())
    sinks: list[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if config.log_to_stdout:
        sinks.append(logging.StreamHandler(sys.stdout))
    for sink in sinks:
        sink.setLevel(level)
        sink.setFormatter(formatter)

    logger = logging.getLogger(config.logger_name.strip())
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    logger.setLevel(level)
    logger.propagate = False

    queue_handler = _BoundedQueueHandler(config.queue_size)
    queue_handler.setLevel(level)
    listener = logging.handlers.QueueListener(
        queue_handler.queue, *sinks, respect_handler_level=True
    )
    listener.start()
    logger.addHandler(queue_handler)

    if config.route_structlog:
        configure_structlog()

    handle = StructuredLoggingHandle(
        logger=logger,
        run_id=config.run_id.strip(),
        log_path=log_path,
        queue_handler=queue_handler,
        listener=listener,
        sinks=tuple(sinks),
        routes_structlog=config.route_structlog,
    )
    _ACTIVE.install(handle)
    return handle


def flush_logging(
    handle: StructuredLoggingHandle | None = None,
    *,
    timeout_seconds: float = 2.0,
) -> None:
    target = handle if handle is not None else _ACTIVE.get()
    if target is not None:
        target.flush(timeout_seconds=timeout_seconds)


def shutdown_logging(
    handle: StructuredLoggingHandle | None = None,
    *,
    timeout_seconds: float = 2.0,
) -> None:
    """Drain and close ``handle`` (the active setup by default). Safe to repeat."""

    target = handle if handle is not None else _ACTIVE.get()
    if target is None:
        return
    target.shutdown(timeout_seconds=timeout_seconds)
    _ACTIVE.release(target)


def get_active_logging_handle() -> StructuredLoggingHandle | None:
    return _ACTIVE.get()


def configure_structlog() -> None:
    """Route structlog events through stdlib logging.

    The event name becomes the record message and bound key/values become extra
    fields, so domain events land in whatever handlers the stdlib tree carries. When
    the package logger has no sink yet it gets a ``NullHandler``, so unsunk events are
    dropped instead of reaching stdlib's last-resort stderr output.
    """

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    package_logger = logging.getLogger(_DEFAULT_LOGGER_NAME)
    if not package_logger.handlers:
        package_logger.addHandler(logging.NullHandler())


def reset_structlog() -> None:
    structlog.reset_defaults()


def _level_number(level: int | str) -> int:
    if isinstance(level, bool) or not isinstance(level, (int, str)):
        raise ValueError(f"level must be int or str, got {type(level).__name__}")
    if isinstance(level, int):
        return level
    number = logging.getLevelNamesMapping().get(level.strip().upper())
    if number is None:
        raise ValueError(f"unsupported logging level {level!r}")
    return number


def _jsonable(value: object) -> JSONValue:
    if value is None or isinstance(value, (bool, int, str)):
        return cast("JSONValue", value)
    if isinstance(value, float):
        return value if math.isfinite(value) else repr(value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_jsonable(item) for item in value), key=repr)
    return repr(value)


__all__ = [
    "LoggingConfig",
    "StructuredLoggingHandle",
    "configure_structlog",
    "flush_logging",
    "get_active_logging_handle",
    "reset_structlog",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
