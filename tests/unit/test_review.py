"""
Unit tests for review options, summaries, and finalization.
"""
import pytest

from account_validator.models.validation_result import BanType, ReviewType
from account_validator.validation.review import derive_review_options, finalize_result, summarize


class TestDeriveReviewOptions:
    def test_unbanned_gets_all_clear(self, registered_result):
        derive_review_options(registered_result)

        assert registered_result.review.available is False
        assert registered_result.recommendations == [
            "Account is functioning normally",
            "Maintain natural usage patterns",
        ]

    def test_spam(self, registered_result):
        registered_result.ban.is_banned = True
        registered_result.ban.type = BanType.SPAM

        derive_review_options(registered_result)

        assert registered_result.review.available is True
        assert registered_result.review.type == ReviewType.SELF_APPEAL
        assert registered_result.review.estimated_time == "24-48 hours"
        assert registered_result.recommendations[0] == "Submit self-appeal through WhatsApp app"

    def test_violation(self, registered_result):
        registered_result.ban.is_banned = True
        registered_result.ban.type = BanType.VIOLATION

        derive_review_options(registered_result)

        assert registered_result.review.type == ReviewType.SUPPORT_REQUIRED
        assert registered_result.review.estimated_time == "3-7 days"
        assert len(registered_result.recommendations) == 3

    def test_permanent(self, registered_result):
        registered_result.ban.is_banned = True
        registered_result.ban.type = BanType.PERMANENT

        derive_review_options(registered_result)

        assert registered_result.review.available is False
        assert registered_result.review.type == ReviewType.NONE
        assert registered_result.review.estimated_time is None
        assert registered_result.recommendations == [
            "Ban is permanent - Consider new number",
            "Ensure compliance before new account",
        ]


class TestSummaries:
    @pytest.mark.parametrize("kind,expected", [
        (BanType.NONE, "Active and verified"),
        (BanType.SPAM, "Spam restrictions detected"),
        (BanType.VIOLATION, "Policy violation detected"),
        (BanType.PERMANENT, "Permanent ban confirmed"),
    ])
    def test_registered(self, registered_result, kind, expected):
        registered_result.ban.type = kind
        assert summarize(registered_result) == expected

    def test_unregistered_ignores_kind(self, registered_result):
        registered_result.is_registered = False
        registered_result.ban.type = BanType.SPAM
        assert summarize(registered_result) == "Not registered or permanently banned"

    def test_finalize_stamps_time_and_summary(self, registered_result):
        finalize_result(registered_result, 1234)

        assert registered_result.diagnostics.response_time_ms == 1234
        assert registered_result.summary == "Active and verified"
