"""
Error taxonomy — exceptions and classification of probe failures.

Probe failures are never raised past the orchestrator; they are captured as
ErrorDetail evidence. These helpers decide the code recorded for each failure
and whether it is worth retrying:

    401/403/404/429/500 in text  → that code
    "timeout" in text            → TIMEOUT
    "forbidden" in text          → 403
    anything else                → UNKNOWN

Fatal (never retried): "404", "permanently", "deleted", "terminated".
"""
from __future__ import annotations

from account_validator.config.constants import (
    CODE_TIMEOUT,
    CODE_UNKNOWN,
    FATAL_ERROR_PATTERNS,
    REJECTION_CODES,
    TIMEOUT_MESSAGE,
)


class ProbeTimeoutError(Exception):
    """Raised when a remote call does not complete within its budget."""

    def __init__(self, message: str = TIMEOUT_MESSAGE) -> None:
        super().__init__(message)


class PluginRegistrationError(ValueError):
    """Raised when a plugin is missing its name or version."""


def error_message(error: BaseException) -> str:
    """Human-readable message for an exception, falling back to its type name."""
    return str(error) or type(error).__name__


def extract_error_code(error: BaseException) -> str:
    text = error_message(error)
    for code in REJECTION_CODES:
        if code in text:
            return code
    lowered = text.lower()
    if "timeout" in lowered:
        return CODE_TIMEOUT
    if "forbidden" in lowered:
        return "403"
    return CODE_UNKNOWN


def is_fatal_error(error: BaseException) -> bool:
    lowered = error_message(error).lower()
    return any(pattern in lowered for pattern in FATAL_ERROR_PATTERNS)


def is_timeout_error(error: BaseException) -> bool:
    return isinstance(error, ProbeTimeoutError) or extract_error_code(error) == CODE_TIMEOUT
