"""
Review options and result finalization.

Review options come from a fixed table keyed by ban kind; unbanned accounts
get the two "all clear" recommendations. The summary string depends only on
(is_registered, ban kind).
"""
from account_validator.config.constants import (
    ALL_CLEAR_RECOMMENDATIONS,
    REVIEW_OPTIONS,
    SUMMARIES,
    SUMMARY_NOT_REGISTERED,
)
from account_validator.models.validation_result import ReviewType, ValidationResult


def derive_review_options(result: ValidationResult) -> None:
    if not result.ban.is_banned:
        result.recommendations.extend(ALL_CLEAR_RECOMMENDATIONS)
        return

    options = REVIEW_OPTIONS.get(result.ban.type.value)
    if options is None:
        return

    result.review.available = options["available"]
    result.review.type = ReviewType(options["type"])
    result.review.estimated_time = options["time"]
    result.recommendations.extend(options["steps"])


def summarize(result: ValidationResult) -> str:
    if not result.is_registered:
        return SUMMARY_NOT_REGISTERED
    return SUMMARIES[result.ban.type.value]


def finalize_result(result: ValidationResult, elapsed_ms: int) -> None:
    """Stamp elapsed time and the summary string onto *result*."""
    result.diagnostics.response_time_ms = elapsed_ms
    result.summary = summarize(result)
