"""
Centralized error handling for the lead-generation assistant.

Provides the exception taxonomy shared by every component, a collector for
per-item failures inside multi-target operations, and the mapping from
exceptions to the chat text shown to the user.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Union


class LeadgenError(Exception):
    """Base class for all errors raised by the assistant."""


class RetryableError(LeadgenError):
    """Explicitly transient failure; the retrying caller will try again."""


class MalformedAIResponseError(LeadgenError):
    """The LLM returned output that does not match the expected shape."""

    def __init__(self, message: str = "AI returned malformed output", raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class ConfigurationError(LeadgenError):
    """Fatal configuration problem. Never retried."""


class MissingCredentialError(ConfigurationError):
    """A provider client was used without its API key configured."""

    def __init__(self, setting: str):
        super().__init__(f"{setting} is not configured. Please check your .env file.")
        self.setting = setting


def get_status_code(exc: BaseException) -> Optional[int]:
    """
    Read an HTTP status code from an exception, if it carries one.

    Covers httpx.HTTPStatusError (exc.response.status_code) and
    openai.APIStatusError (exc.status_code).
    """
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status
    return None


@dataclass
class FailureRecord:
    """One failed sub-operation: the input item and why it failed."""

    item: Any
    reason: str
    exception_type: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class FailureCollector:
    """
    Collects per-item failures during a multi-target operation.

    Each failure is logged as it is added so a partial result never hides
    what went wrong.
    """

    def __init__(
        self,
        logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
        operation: str = "operation",
    ):
        self.failures: List[FailureRecord] = []
        self._logger = logger or logging.getLogger(__name__)
        self._operation = operation

    def add(self, item: Any, exception: BaseException) -> FailureRecord:
        """Record a failure for `item` and log it."""
        record = FailureRecord(
            item=item,
            reason=str(exception) or type(exception).__name__,
            exception_type=type(exception).__name__,
        )
        self.failures.append(record)
        self._logger.warning(f"[{self._operation}] Failed for {item!r}: {record.reason}")
        return record


def log_on_exception(
    logger: logging.Logger,
    operation: str,
    level: int = logging.WARNING,
    include_traceback: bool = False,
):
    """
    Context manager for logging exceptions without swallowing them silently.

    Usage:
        with log_on_exception(logger, "ContactOut enrich", level=logging.ERROR):
            await client.enrich_profile(url)
    """

    class ExceptionLogger:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None:
                logger.log(level, f"[{operation}] Failed: {exc_val}", exc_info=include_traceback)
            # Return False to not suppress the exception
            return False

    return ExceptionLogger()


def friendly_error_message(exc: BaseException) -> str:
    """
    Map any exception raised while handling a prompt to chat text.

    403 means out of credits or no access, 404 means no match, malformed
    LLM output gets a retry hint, everything else echoes the message.
    """
    if isinstance(exc, MalformedAIResponseError):
        return "An error occurred: AI returned malformed output. Please try again."

    status = get_status_code(exc)
    if status == 403:
        return "An error occurred: You may be out of credits or do not have access to this endpoint."
    if status == 404:
        return "No match found for your request."

    message = str(exc) or type(exc).__name__
    return f"An error occurred: {message}"
