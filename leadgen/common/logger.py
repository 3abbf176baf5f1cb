"""
Logging for the lead-generation assistant.

setup_logging() configures the root handler once per process (API import or
CLI start). get_logger() returns an adapter that tags every line with the
conversation it belongs to; bind() adds what only becomes known mid-request,
such as the classified intent or the prospect being e-mailed:

    2026-01-05 12:00:01 [INFO] leadgen.assistant.dispatcher: [session:1f0c9a2e] [dispatcher] [intent:search] Added 3 new prospect(s) to the session

In JSON format the same context is emitted as separate keys.
"""

import json
import logging
import sys
from typing import Any, Dict, Optional

# Prefix order in the plain-text format
CONTEXT_FIELDS = ("session_id", "component", "intent", "prospect_id")


def format_context(context: Dict[str, Any]) -> str:
    """
    Render request context as a log prefix.

    Examples:
        >>> format_context({"session_id": "1f0c9a2e-77aa", "component": "search"})
        '[session:1f0c9a2e] [search]'
        >>> format_context({"intent": "web_scrape", "prospect_id": None})
        '[intent:web_scrape]'
    """
    parts = []
    for key in CONTEXT_FIELDS:
        value = context.get(key)
        if not value:
            continue
        if key == "session_id":
            parts.append(f"[session:{str(value)[:8]}]")
        elif key == "component":
            parts.append(f"[{value}]")
        elif key == "prospect_id":
            parts.append(f"[prospect:{value}]")
        else:
            parts.append(f"[{key}:{value}]")
    return " ".join(parts)


class ContextFormatter(logging.Formatter):
    """Plain-text formatter that places the request context before the message."""

    def format(self, record: logging.LogRecord) -> str:
        prefix = format_context(getattr(record, "context", None) or {})
        record.context_prefix = f"{prefix} " if prefix else ""
        return super().format(record)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; context keys sit beside the message."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None) or {}
        entry.update({key: value for key, value in context.items() if value})
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class AssistantLogger(logging.LoggerAdapter):
    """LoggerAdapter carrying session, component, intent and prospect context."""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**self.extra, **(extra.get("context") or {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **context: Any) -> "AssistantLogger":
        """Return a logger with `context` added on top of the current one."""
        return AssistantLogger(self.logger, {**self.extra, **context})


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: "simple" for human-readable lines, "json" for log aggregators
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ContextFormatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(context_prefix)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))

    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Per-request lines from the HTTP client drown out the assistant's own
    if log_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(
    name: str,
    session_id: Optional[str] = None,
    component: Optional[str] = None,
    **context: Any,
) -> AssistantLogger:
    """Logger tagged with the session and component that own the work."""
    return AssistantLogger(
        logging.getLogger(name),
        {"session_id": session_id, "component": component, **context},
    )
