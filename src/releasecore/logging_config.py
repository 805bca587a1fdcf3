"""
Structured logging configuration for releasecore.

Provides JSON-formatted structured logging with:
- Security filtering (no license keys, tokens or other secrets)
- Bounded extra fields (long lists are summarized, nesting is capped)

Usage:
    from releasecore.logging_config import setup_logging, get_logger

    setup_logging()  # Call once at startup
    logger = get_logger(__name__)
    logger.warning("message", extra={"release_id": "r1"})
"""

from __future__ import annotations

import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

import orjson

# Fields that should NEVER appear in logs
BLOCKED_FIELDS: frozenset[str] = frozenset(
    {
        "license_key",
        "api_key",
        "secret",
        "token",
        "password",
        "auth",
        "authorization",
        "credential",
        "signature",
    }
)

# License keys and bearer tokens that may leak into free-form messages
_SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"\b(license[_-]?key|api[_-]?key)[=:]\s*['\"]?[\w\-]+['\"]?", re.I),
        "[LICENSE_KEY]",
    ),
    (re.compile(r"\b(bearer|token)[=:\s]+['\"]?[\w\-\.]+['\"]?", re.I), "[TOKEN]"),
]

MAX_LIST_ITEMS = 10
MAX_DEPTH = 3

# Attributes every LogRecord carries; anything else came from `extra`
_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys() | {"message", "taskName"}
)


def _sanitize_text(text: str) -> str:
    """Redact secrets from free-form text (msg, exc)."""
    if not text:
        return text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _is_blocked(key: str) -> bool:
    key_lower = key.lower()
    return any(blocked in key_lower for blocked in BLOCKED_FIELDS)


def _filter_log_record(record: dict[str, Any], *, _depth: int = 0) -> dict[str, Any]:
    """Drop sensitive fields and bound the size of the rest.

    Recursively filters nested dicts up to MAX_DEPTH.
    """
    if _depth > MAX_DEPTH:
        return {"_truncated": "max depth exceeded"}

    filtered: dict[str, Any] = {}
    for key, value in record.items():
        if _is_blocked(key):
            continue

        if isinstance(value, (int, float, bool, type(None))):
            filtered[key] = value
        elif isinstance(value, str):
            filtered[key] = _sanitize_text(value)
        elif isinstance(value, (list, tuple, set, frozenset)):
            if len(value) <= MAX_LIST_ITEMS:
                filtered[key] = [v if isinstance(v, (int, float, bool)) else str(v) for v in value]
            else:
                filtered[key] = f"[list:{len(value)} items]"
        elif isinstance(value, dict):
            filtered[key] = _filter_log_record(value, _depth=_depth + 1)
        else:
            filtered[key] = _sanitize_text(str(value))

    return filtered


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Output format:
    {"ts":"2026-01-01T00:00:00.000+00:00","level":"INFO","logger":"module","msg":"...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_dict: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": _sanitize_text(record.getMessage()),
        }

        if record.levelno >= logging.WARNING:
            log_dict["file"] = record.filename
            log_dict["line"] = record.lineno

        if record.exc_info:
            log_dict["exc"] = _sanitize_text(self.formatException(record.exc_info))

        extra = _extra_fields(record)
        if extra:
            log_dict.update(_filter_log_record(extra))

        return orjson.dumps(log_dict, default=str).decode()


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for development/testing."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable string."""
        base = f"{record.levelname:8s} {record.name}: {_sanitize_text(record.getMessage())}"

        filtered = _filter_log_record(_extra_fields(record))
        if filtered:
            extra_str = " ".join(f"{k}={v}" for k, v in filtered.items())
            base = f"{base} | {extra_str}"

        return base


def setup_logging(
    *,
    level: int | str = logging.INFO,
    json_format: bool = True,
    stream: Any = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (default INFO).
        json_format: Use JSON formatter (default True for production).
        stream: Output stream (default stderr).
    """
    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter() if json_format else SimpleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
