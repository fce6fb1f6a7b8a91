"""
Unit tests for AnalyticsEngine.
"""
import pytest

from account_validator.models.validation_result import BanType, ValidationResult
from account_validator.validation.analytics import AnalyticsEngine


def make_result(registered=True, banned=False, kind=BanType.NONE, response_ms=100, methods=()):
    result = ValidationResult(number="1", jid="1@s.whatsapp.net")
    result.is_registered = registered
    result.ban.is_banned = banned
    result.ban.type = kind
    result.ban.detection_methods.extend(methods)
    result.diagnostics.response_time_ms = response_ms
    return result


class TestRecord:
    def test_counters(self):
        engine = AnalyticsEngine()
        engine.record(make_result())
        engine.record(make_result(banned=True, kind=BanType.SPAM, methods=["ml_pattern_detection"]))
        engine.record(make_result(registered=False, banned=True, kind=BanType.PERMANENT))

        m = engine.metrics
        assert m["total_validations"] == 3
        assert m["successful_validations"] == 2
        assert m["failed_validations"] == 1
        assert m["active_accounts"] == 1
        assert m["banned_accounts"] == 1
        assert m["ban_types"] == {"spam": 1}
        assert m["detection_methods"] == {"ml_pattern_detection": 1}

    def test_running_average(self):
        engine = AnalyticsEngine()
        engine.record(make_result(response_ms=100))
        engine.record(make_result(response_ms=300))
        assert engine.metrics["avg_response_time_ms"] == pytest.approx(200.0)

    def test_history_bounded(self):
        engine = AnalyticsEngine(max_history=3)
        for _ in range(5):
            engine.record(make_result())
        assert len(engine.history) == 3


class TestTrends:
    def test_insufficient_data(self):
        engine = AnalyticsEngine()
        engine.record(make_result())
        assert engine.trends() == {"status": "insufficient_data"}

    def test_high_ban_rate(self):
        engine = AnalyticsEngine()
        for _ in range(10):
            engine.record(make_result(banned=True, kind=BanType.SPAM))

        trends = engine.trends()

        assert trends["recent_ban_rate"] == pytest.approx(1.0)
        assert trends["trend"] == "high_ban_rate"
        assert any("High ban rate" in r for r in engine.recommendations())

    def test_failure_rate_recommendation(self):
        engine = AnalyticsEngine()
        engine.record(make_result(registered=False))
        assert engine.recommendations() == ["High failure rate - Check connection stability"]

    def test_report_and_reset(self):
        engine = AnalyticsEngine()
        engine.record(make_result())

        report = engine.report()
        assert set(report) == {"summary", "trends", "recommendations"}

        engine.reset()
        assert engine.metrics["total_validations"] == 0
        assert len(engine.history) == 0
