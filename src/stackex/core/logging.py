"""Logging helpers for stackex.

Request URLs carry the application key and access token as query
parameters, so every handler installed here runs a redaction filter.
"""

import atexit
import contextlib
import json
import logging
import os
import re
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from stackex.core.constants import LOG_FILE_BACKUP_COUNT, LOG_FILE_MAX_BYTES

_LOG_RECORD_RESERVED_FIELDS = set(logging.makeLogRecord({}).__dict__.keys()) | {"message", "asctime", "extra_fields"}
_REDACTION_FLAG_ATTR = "_stackex_redacted"
_REDACTION_MARKER = object()
_SENSITIVE_FIELD_NAMES = {
    "key",
    "api_key",
    "apikey",
    "access_token",
    "token",
    "secret",
    "client_secret",
    "password",
    "authorization",
}
_REDACTED_VALUE = "[REDACTED]"
_QUERY_PARAM_PATTERN = re.compile(r"(?i)(?P<prefix>[?&](?:key|access_token)=)(?P<value>[^&\s#]+)")
_SENSITIVE_KEY_VALUE_PATTERN = re.compile(
    r"""(?ix)
    (?P<full_key>["']?(?<![A-Za-z0-9_])(?:api[_-]?key|access[_-]?token|client[_-]?secret|secret|password)["']?)
    (?P<separator>\s*[:=]\s*)(?!["']?\[REDACTED\])
    (?P<value>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|[^,\s;}\]&]+)
    """
)


def _safe_record_message(record: logging.LogRecord) -> str:
    try:
        return record.getMessage()
    except Exception:
        # Keep logging resilient when message formatting fails.
        return f"{getattr(record, 'msg', '')!s} [log-message-format-error]"


def _is_record_redacted(record: logging.LogRecord) -> bool:
    return record.__dict__.get(_REDACTION_FLAG_ATTR) is _REDACTION_MARKER


def _is_reserved_or_private_record_key(key: object) -> bool:
    if not isinstance(key, str):
        return True
    return key in _LOG_RECORD_RESERVED_FIELDS or key.startswith("_")


def _is_sensitive_field(name: str) -> bool:
    return name.strip().lower().replace("-", "_") in _SENSITIVE_FIELD_NAMES


def _redact_captured_value(value: str) -> str:
    if len(value) >= 2 and value[0] in {"'", '"'} and value[-1] == value[0]:
        return f"{value[0]}{_REDACTED_VALUE}{value[0]}"
    return _REDACTED_VALUE


def redact_message(message: str) -> str:
    """Mask API keys and tokens in free text (URLs, key=value pairs)."""
    redacted = _QUERY_PARAM_PATTERN.sub(lambda m: f"{m.group('prefix')}{_REDACTED_VALUE}", message)
    return _SENSITIVE_KEY_VALUE_PATTERN.sub(
        lambda m: f"{m.group('full_key')}{m.group('separator')}{_redact_captured_value(m.group('value'))}",
        redacted,
    )


def _redact_value(value: object) -> object:
    if isinstance(value, dict):
        return {
            key: _REDACTED_VALUE if _is_sensitive_field(str(key)) else _redact_value(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(_redact_value(item) for item in value)
    if isinstance(value, str):
        return redact_message(value)
    return value


class SensitiveDataFilter(logging.Filter):
    """Best-effort redaction for API keys and tokens in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if _is_record_redacted(record):
            return True

        record.msg = redact_message(_safe_record_message(record))
        record.args = ()

        for key, value in list(record.__dict__.items()):
            if _is_reserved_or_private_record_key(key):
                continue
            if _is_sensitive_field(key):
                record.__dict__[key] = _REDACTED_VALUE
                continue
            with contextlib.suppress(Exception):
                record.__dict__[key] = _redact_value(value)
        record.__dict__[_REDACTION_FLAG_ATTR] = _REDACTION_MARKER
        return True


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging output.

    Each log record is a single JSON object on one line, including any
    fields passed through ``extra`` or a context adapter.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        message = _safe_record_message(record)
        if not _is_record_redacted(record):
            message = redact_message(message)

        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread_name": record.threadName,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if _is_reserved_or_private_record_key(key):
                continue
            log_entry.setdefault(key, _REDACTED_VALUE if _is_sensitive_field(key) else _redact_value(value))

        return json.dumps(log_entry, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges contextual fields into record extras."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra")
        merged_extra = dict(self.extra)
        if isinstance(extra, dict):
            merged_extra.update(extra)
        kwargs["extra"] = merged_extra
        return msg, kwargs


def with_log_context(logger: logging.Logger | logging.LoggerAdapter, **context: object) -> logging.LoggerAdapter:
    """Return a logger enriched with persistent contextual fields (e.g. route)."""
    base_logger = logger
    existing_context: dict[str, object] = {}
    while isinstance(base_logger, logging.LoggerAdapter):
        existing_context = {**dict(base_logger.extra or {}), **existing_context}
        base_logger = base_logger.logger

    existing_context.update({k: v for k, v in context.items() if v is not None})
    return ContextLoggerAdapter(base_logger, existing_context)


_atexit_registered = False


def setup_logging(
    log_level: str | None = None,
    log_format: str = "text",
    log_file: str | Path | None = None,
    max_bytes: int = LOG_FILE_MAX_BYTES,
    backup_count: int = LOG_FILE_BACKUP_COUNT,
) -> logging.Logger:
    """Setup logging to the console and, optionally, a rotating file.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format - "text" (default) or "json"
        log_file: Optional path of a rotating log file
        max_bytes: Maximum size per log file
        backup_count: Number of rotated files to keep

    Returns:
        The ``stackex`` package logger

    Priority: 1) Passed parameter, 2) Environment variable LOG_LEVEL, 3) Default INFO
    """
    global _atexit_registered

    if not _atexit_registered:
        atexit.register(logging.shutdown)
        _atexit_registered = True

    if log_level is None:
        log_level = os.environ.get("LOG_LEVEL", "INFO")

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if log_level.upper() not in valid_levels:
        print(f"Warning: Invalid log level '{log_level}', using INFO", file=sys.stderr)
        log_level = "INFO"
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    package_logger = logging.getLogger("stackex")
    for handler in package_logger.handlers[:]:
        handler.close()
        package_logger.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_path = Path(log_file)
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count))
        except OSError as e:
            print(f"Warning: Cannot open log file {log_path}: {e}. Logging to console only.", file=sys.stderr)

    if log_format.lower() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        handler.addFilter(SensitiveDataFilter())
        package_logger.addHandler(handler)

    package_logger.setLevel(numeric_level)
    package_logger.propagate = False

    package_logger.debug(f"Logging initialized at {log_level.upper()} ({log_format})")
    return package_logger
