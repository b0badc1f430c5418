"""
Structured logging configuration for accountreload.

Provides JSON-formatted logging with automatic context propagation and
configurable output handlers.

Usage:
    from accountreload.logging_config import configure_logging, get_logger

    # Configure at application entry point
    configure_logging(level="INFO", json_output=True)

    # Get a structured logger
    logger = get_logger(__name__)
    logger.info("Reloading account", service="pronote")

    # Automatic context propagation
    with LogContext(service="izly", account="acc-1"):
        logger.info("Adapter resolved")  # Includes service and account
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
import threading
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Context variables for automatic field injection
_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})

# Log rotation configuration (for file logging)
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


@dataclass
class LogRecord:
    """Structured log record with all context fields."""

    timestamp: str
    level: str
    logger: str
    message: str
    fields: Dict[str, Any] = field(default_factory=dict)
    service: Optional[str] = None
    account: Optional[str] = None
    exception: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            "ts": self.timestamp,
            "level": self.level,
            "logger": self.logger,
            "msg": self.message,
        }
        if self.service:
            result["service"] = self.service
        if self.account:
            result["account"] = self.account
        if self.fields:
            result.update(self.fields)
        if self.exception:
            result["exception"] = self.exception
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def to_text(self) -> str:
        """Format as human-readable text."""
        parts = [
            self.timestamp,
            f"[{self.level}]",
            f"[{self.logger}]",
        ]
        if self.service:
            parts.append(f"[{self.service}]")
        if self.account:
            parts.append(f"[{self.account}]")
        parts.append(self.message)
        if self.fields:
            parts.append(" ".join(f"{k}={v}" for k, v in self.fields.items()))
        if self.exception:
            parts.append(f"\n{self.exception.get('traceback', '')}")
        return " ".join(parts)


def _build_record(record: logging.LogRecord, timestamp: str, logger_name: str) -> LogRecord:
    ctx = _log_context.get()
    fields = dict(getattr(record, "structured_fields", {}))
    # service/account get their own slots; explicit fields win over context
    service = fields.pop("service", None) or ctx.get("service")
    account = fields.pop("account", None) or ctx.get("account")
    extra_ctx = {k: v for k, v in ctx.items() if k not in ("service", "account")}
    return LogRecord(
        timestamp=timestamp,
        level=record.levelname,
        logger=logger_name,
        message=record.getMessage(),
        fields={**extra_ctx, **fields},
        service=service,
        account=account,
    )


class JSONFormatter(logging.Formatter):
    """JSON log formatter with structured field support."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = _build_record(
            record,
            datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            record.name,
        )
        if record.exc_info:
            log_record.exception = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else "Unknown",
                "message": str(record.exc_info[1]) if record.exc_info[1] else "",
                "traceback": self.formatException(record.exc_info),
            }
        return log_record.to_json()


class TextFormatter(logging.Formatter):
    """Human-readable text formatter with structured field support."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = _build_record(
            record,
            datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            record.name.split(".")[-1],
        )
        if record.exc_info:
            log_record.exception = {"traceback": self.formatException(record.exc_info)}
        return log_record.to_text()


class StructuredLogger:
    """
    Structured logger wrapper with automatic context propagation.

    Keyword arguments passed to the log methods are attached to the record
    and rendered by JSONFormatter/TextFormatter.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)
        self._name = name

    def _log(
        self,
        level: int,
        message: str,
        exc_info: bool = False,
        **fields: Any,
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, exc_info=exc_info, extra={"structured_fields": fields})

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **fields)

    def exception(self, message: str, **fields: Any) -> None:
        """Log at ERROR level with exception info."""
        self._log(logging.ERROR, message, exc_info=True, **fields)

    @property
    def name(self) -> str:
        return self._name

    def isEnabledFor(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)


class LogContext:
    """
    Context manager for setting log context fields.

    All logs within the context automatically include the given fields.
    Backed by a ContextVar, so concurrent tasks keep separate contexts.
    """

    def __init__(self, **fields: Any):
        self._fields = fields
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> LogContext:
        current = _log_context.get()
        self._token = _log_context.set({**current, **self._fields})
        return self

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _log_context.reset(self._token)


def set_context(**fields: Any) -> None:
    """Set log context fields for the current async context."""
    current = _log_context.get()
    _log_context.set({**current, **fields})


def get_context() -> Dict[str, Any]:
    return _log_context.get()


def clear_context() -> None:
    _log_context.set({})


# Logger cache (thread-safe)
_loggers: Dict[str, StructuredLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str) -> StructuredLogger:
    """
    Get or create a structured logger by name (thread-safe).

    Args:
        name: Logger name (typically __name__)
    """
    with _loggers_lock:
        if name not in _loggers:
            _loggers[name] = StructuredLogger(name)
        return _loggers[name]


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
    log_file: str | None = None,
    propagate: bool = True,
) -> None:
    """
    Configure logging for the application.

    Should be called once at application startup. Unset arguments fall back
    to the ACCOUNTRELOAD_LOG_* settings from :func:`accountreload.config.get_config`.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format; if False, text format
        log_file: Optional file path for log output
        propagate: Whether the accountreload logger propagates to root
    """
    from accountreload.config import get_config

    config = get_config()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)
    use_json = json_output if json_output is not None else (config.log_format == "json")
    file_path = log_file or config.log_file

    formatter: logging.Formatter = JSONFormatter() if use_json else TextFormatter()

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root.addHandler(console_handler)

    if file_path:
        file_handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root.addHandler(file_handler)

    package_logger = logging.getLogger("accountreload")
    package_logger.setLevel(log_level)
    package_logger.propagate = propagate


__all__ = [
    "LogRecord",
    "JSONFormatter",
    "TextFormatter",
    "StructuredLogger",
    "LogContext",
    "set_context",
    "get_context",
    "clear_context",
    "get_logger",
    "configure_logging",
]
