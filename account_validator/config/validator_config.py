"""
ValidatorConfig — immutable pipeline configuration.

Every option is enumerated and defaulted here, once, at construction time.
Invalid combinations (empty rate window, non-positive capacity, ...) are
rejected with a pydantic ValidationError.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from account_validator.config import settings


class ValidatorConfig(BaseModel):
    """Frozen configuration for ValidationPipeline and its subsystems."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # --- Probing ---
    timeout_ms: int = Field(8000, gt=0, description="Per-probe timeout.")
    parallel_probes: bool = Field(True, description="Run probes concurrently instead of one at a time.")
    enable_presence_check: bool = True
    presence_timeout_margin_ms: int = Field(3000, ge=0, description="Extra time granted to the presence probe.")
    retry_on_failure: bool = True
    max_retries: int = Field(2, ge=0)
    retry_base_delay_ms: int = Field(1000, ge=0, description="Retry n waits n * retry_base_delay_ms.")
    profile_picture_kind: str = "image"

    # --- Cache ---
    enable_cache: bool = True
    cache_ttl_ms: int = Field(3_600_000, gt=0)
    cache_max_size: int = Field(1000, gt=0)

    # --- Rate limiting ---
    enable_rate_limiting: bool = True
    rate_limit_max_requests: int = Field(10, gt=0)
    rate_limit_window_ms: int = Field(60_000, gt=0)

    # --- Classification / analytics ---
    enable_classifier: bool = True
    enable_analytics: bool = True

    # --- Batch ---
    batch_size: int = Field(5, gt=0)
    batch_delay_ms: int = Field(2000, ge=0)

    # --- Health ---
    health_degraded_threshold: int = Field(5, gt=0)
    health_critical_threshold: int = Field(10, gt=0)

    @model_validator(mode="after")
    def check_health_thresholds(self) -> "ValidatorConfig":
        if self.health_critical_threshold < self.health_degraded_threshold:
            raise ValueError(
                "health_critical_threshold must be >= health_degraded_threshold"
            )
        return self

    @property
    def presence_timeout_ms(self) -> int:
        return self.timeout_ms + self.presence_timeout_margin_ms

    @classmethod
    def from_settings(cls) -> "ValidatorConfig":
        """Build a config from the environment-backed values in settings.py."""
        return cls(
            timeout_ms=settings.VALIDATOR_TIMEOUT_MS,
            parallel_probes=settings.VALIDATOR_PARALLEL_PROBES,
            enable_presence_check=settings.VALIDATOR_PRESENCE_CHECK,
            retry_on_failure=settings.VALIDATOR_RETRY_ON_FAILURE,
            max_retries=settings.VALIDATOR_MAX_RETRIES,
            retry_base_delay_ms=settings.VALIDATOR_RETRY_BASE_DELAY_MS,
            enable_cache=settings.CACHE_ENABLED,
            cache_ttl_ms=settings.CACHE_TTL_MS,
            cache_max_size=settings.CACHE_MAX_SIZE,
            enable_rate_limiting=settings.RATE_LIMIT_ENABLED,
            rate_limit_max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            rate_limit_window_ms=settings.RATE_LIMIT_WINDOW_MS,
            enable_classifier=settings.CLASSIFIER_ENABLED,
            enable_analytics=settings.ANALYTICS_ENABLED,
            batch_size=settings.BATCH_SIZE,
            batch_delay_ms=settings.BATCH_DELAY_MS,
        )
