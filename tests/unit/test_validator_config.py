"""
Unit tests for ValidatorConfig.
"""
import pytest
from pydantic import ValidationError

from account_validator.config.validator_config import ValidatorConfig


class TestDefaults:
    def test_documented_defaults(self):
        cfg = ValidatorConfig()
        assert cfg.timeout_ms == 8000
        assert cfg.parallel_probes is True
        assert cfg.max_retries == 2
        assert cfg.cache_ttl_ms == 3_600_000
        assert cfg.cache_max_size == 1000
        assert cfg.rate_limit_max_requests == 10
        assert cfg.rate_limit_window_ms == 60_000
        assert cfg.batch_size == 5
        assert cfg.batch_delay_ms == 2000

    def test_presence_timeout_extends_base(self):
        assert ValidatorConfig().presence_timeout_ms == 11_000
        assert ValidatorConfig(timeout_ms=100, presence_timeout_margin_ms=50).presence_timeout_ms == 150


class TestValidation:
    @pytest.mark.parametrize("field", [
        "timeout_ms", "cache_ttl_ms", "cache_max_size",
        "rate_limit_max_requests", "rate_limit_window_ms", "batch_size",
    ])
    def test_non_positive_rejected(self, field):
        with pytest.raises(ValidationError):
            ValidatorConfig(**{field: 0})

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            ValidatorConfig(max_retries=-1)

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            ValidatorConfig(enable_turbo=True)

    def test_health_thresholds_ordered(self):
        with pytest.raises(ValidationError):
            ValidatorConfig(health_degraded_threshold=10, health_critical_threshold=5)

    def test_frozen(self):
        cfg = ValidatorConfig()
        with pytest.raises(ValidationError):
            cfg.timeout_ms = 1


class TestFromSettings:
    def test_reads_settings_module(self, monkeypatch):
        from account_validator.config import settings

        monkeypatch.setattr(settings, "VALIDATOR_TIMEOUT_MS", 1234)
        monkeypatch.setattr(settings, "BATCH_SIZE", 7)

        cfg = ValidatorConfig.from_settings()

        assert cfg.timeout_ms == 1234
        assert cfg.batch_size == 7
