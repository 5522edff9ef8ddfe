"""Centralized logging utilities for lookeracl.

This module provides:
- Logging configuration from AclConfig
- Safe preview utilities for remote payloads
- Secret redaction
- Structured logging with reconciliation context (trace_id per pass,
  object_address per tracked object)
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional
from uuid import UUID

from .config import AclConfig, LogLevel


# Patterns for detecting secrets (common patterns to redact)
SECRET_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token|key|api[_-]?key|client[_-]?secret|auth[_-]?token)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'(?i)(?:bearer|basic|token)\s+([a-zA-Z0-9+/=._-]{8,})',
    r'(?i)(?:x-api-key|x-auth-token|x-access-token)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'[a-f0-9]{32,}',  # Long hex strings (could be hashes or keys)
]

# LogRecord attributes that are never copied into structured output
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "trace_id", "object_address",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a safe, length-bounded, single-line preview of a value.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, set, frozenset, tuple)):
        try:
            s = json.dumps(
                sorted(value) if isinstance(value, (set, frozenset)) else value,
                default=str,
                ensure_ascii=False,
            )
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Redact secret patterns (API keys, client secrets, bearer tokens) from text.

    Non-string input is returned unchanged.
    """
    if not isinstance(text, str):
        return text

    result = text
    for pattern in SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE | re.DOTALL)

    return result


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Combine safe_preview() and redact_secrets() for a loggable value."""
    preview = safe_preview(value, limit=limit)
    if redact:
        preview = redact_secrets(preview)
    return preview


class AclLogFormatter(logging.Formatter):
    """Formatter emitting JSON (or plain text) with reconciliation context.

    Records carrying ``trace_id`` and ``object_address`` attributes (set by
    AclLoggerAdapter) get them as top-level fields. Any other ``extra``
    fields are previewed and redacted.
    """

    def __init__(
        self,
        include_context: bool = True,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_context = include_context
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        trace_id = getattr(record, "trace_id", None)
        object_address = getattr(record, "object_address", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            if trace_id:
                log_data["trace_id"] = str(trace_id) if isinstance(trace_id, UUID) else trace_id
            if object_address:
                log_data["object_address"] = object_address

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_log_value(value, redact=self.redact_secrets)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if self.include_context and trace_id:
            parts.append(f"trace_id={log_data.get('trace_id', '')}")
        if self.include_context and object_address:
            parts.append(f"object={object_address}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class AclLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds trace_id and object_address to log records.

    Usage:
        logger = get_acl_logger(__name__, trace_id=pass_id)
        logger.warning("Object vanished", object_address="group.analysts")
    """

    def __init__(
        self,
        logger: logging.Logger,
        trace_id: Optional[UUID | str] = None,
        object_address: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.trace_id = trace_id
        self.object_address = object_address

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        trace_id = kwargs.pop("trace_id", self.trace_id)
        object_address = kwargs.pop("object_address", self.object_address)

        extra = kwargs.get("extra", {})
        if trace_id:
            extra["trace_id"] = trace_id
        if object_address:
            extra["object_address"] = object_address
        kwargs["extra"] = extra

        return msg, kwargs

    def bind(self, **context: Any) -> "AclLoggerAdapter":
        """Return a copy of this adapter with trace_id/object_address replaced."""
        return AclLoggerAdapter(
            self.logger,
            trace_id=context.get("trace_id", self.trace_id),
            object_address=context.get("object_address", self.object_address),
        )


def setup_logging(
    config: Optional[AclConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
) -> None:
    """Configure the root logger for a lookeracl process.

    Args:
        config: AclConfig instance (if None, loads from environment)
        json_format: Override config.log_json
        redact_secrets: Whether to redact secrets (default: True)
    """
    if config is None:
        from .config import load_config_from_env
        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AclLogFormatter(
            include_context=True,
            json_format=config.log_json if json_format is None else json_format,
            redact_secrets=redact_secrets,
        )
    )
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_acl_logger(
    name: str,
    trace_id: Optional[UUID | str] = None,
    object_address: Optional[str] = None,
) -> AclLoggerAdapter:
    """Get a logger adapter carrying reconciliation context.

    Example:
        logger = get_acl_logger(__name__, trace_id=uuid4())
        logger.info("Applying", object_address="folder.finance")
    """
    return AclLoggerAdapter(logging.getLogger(name), trace_id=trace_id, object_address=object_address)


__all__ = [
    "safe_preview",
    "redact_secrets",
    "safe_log_value",
    "AclLogFormatter",
    "AclLoggerAdapter",
    "setup_logging",
    "get_acl_logger",
]
