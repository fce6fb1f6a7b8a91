"""
Health monitor — consecutive critical failures drive the validator status.

    0 … degraded-1 failures   → healthy
    ≥ degraded threshold (5)  → degraded   (+ health_degraded event)
    ≥ critical threshold (10) → unhealthy  (+ health_critical event)

Any successful validation resets the streak.
"""
from __future__ import annotations

import logging
import time
from typing import Optional

from account_validator.config.constants import (
    HEALTH_DEGRADED,
    HEALTH_HEALTHY,
    HEALTH_UNHEALTHY,
)
from account_validator.validation.events import EventBus, EventType
from account_validator.validation.metrics import set_health_status

logger = logging.getLogger(__name__)


class HealthMonitor:
    def __init__(
        self,
        degraded_threshold: int = 5,
        critical_threshold: int = 10,
        event_bus: Optional[EventBus] = None,
    ):
        self.degraded_threshold = degraded_threshold
        self.critical_threshold = critical_threshold
        self.event_bus = event_bus or EventBus()
        self.status = HEALTH_HEALTHY
        self.consecutive_failures = 0
        self.total_checks = 0
        self.last_check_ms = time.time() * 1000

    def update(self, success: bool) -> None:
        self.total_checks += 1

        if success:
            if self.status != HEALTH_HEALTHY:
                logger.info("Validator health recovered after %d failures", self.consecutive_failures)
            self.consecutive_failures = 0
            self.status = HEALTH_HEALTHY
        else:
            self.consecutive_failures += 1
            if self.consecutive_failures >= self.degraded_threshold:
                self.status = HEALTH_DEGRADED
                logger.warning("Validator health degraded (%d consecutive failures)", self.consecutive_failures)
                self.event_bus.emit(EventType.HEALTH_DEGRADED, **self.snapshot())
            if self.consecutive_failures >= self.critical_threshold:
                self.status = HEALTH_UNHEALTHY
                logger.error("Validator health critical (%d consecutive failures)", self.consecutive_failures)
                self.event_bus.emit(EventType.HEALTH_CRITICAL, **self.snapshot())

        set_health_status(self.status)
        self.last_check_ms = time.time() * 1000

    def snapshot(self) -> dict:
        return {
            "status": self.status,
            "consecutive_failures": self.consecutive_failures,
            "total_checks": self.total_checks,
            "last_check_ms": self.last_check_ms,
        }
