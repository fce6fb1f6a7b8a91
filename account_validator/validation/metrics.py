"""
Prometheus Metrics — validation pipeline observability.

Exposes counters, histograms, and gauges for:
- Validations per outcome (active / banned kind / not_registered / critical)
- Probe outcomes per probe name and status
- Probe retries
- Cache lookups (hit / miss)
- Rate limiter waits
- Validation latency
- Health status (0 healthy, 1 degraded, 2 unhealthy)

Usage
-----
    from account_validator.validation.metrics import timed_stage, record_cache_lookup

    with timed_stage("probes"):
        await orchestrator.run_probes(jid, result)

    record_cache_lookup(hit=True)
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Gauge, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

VALIDATIONS: Counter = Counter(
    "account_validations_total",
    "Completed validations by outcome",
    ["outcome"],
)

PROBE_OUTCOMES: Counter = Counter(
    "account_probe_outcomes_total",
    "Probe outcomes by probe name and status",
    ["probe", "status"],
)

PROBE_RETRIES: Counter = Counter(
    "account_probe_retries_total",
    "Retry attempts issued per probe",
    ["probe"],
)

CACHE_LOOKUPS: Counter = Counter(
    "account_cache_lookups_total",
    "Result cache lookups by result (hit / miss)",
    ["result"],
)

RATE_LIMIT_WAITS: Counter = Counter(
    "account_rate_limit_waits_total",
    "Times the rate limiter suspended a caller",
)

STAGE_LATENCY: Histogram = Histogram(
    "account_validation_stage_seconds",
    "Processing time per validation stage in seconds",
    ["stage"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

HEALTH_STATUS: Gauge = Gauge(
    "account_validator_health_status",
    "Validator health (0 healthy, 1 degraded, 2 unhealthy)",
)

_HEALTH_LEVELS = {"healthy": 0, "degraded": 1, "unhealthy": 2}


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------

def record_validation(outcome: str) -> None:
    """Increment the validation counter for *outcome*."""
    VALIDATIONS.labels(outcome=outcome).inc()


def record_probe_outcome(probe: str, status: str) -> None:
    PROBE_OUTCOMES.labels(probe=probe, status=status).inc()


def record_probe_retry(probe: str) -> None:
    PROBE_RETRIES.labels(probe=probe).inc()


def record_cache_lookup(hit: bool) -> None:
    CACHE_LOOKUPS.labels(result="hit" if hit else "miss").inc()


def record_rate_limit_wait() -> None:
    RATE_LIMIT_WAITS.inc()


def set_health_status(status: str) -> None:
    """Set the health gauge; unknown statuses are logged and ignored."""
    level = _HEALTH_LEVELS.get(status)
    if level is None:
        logger.warning("Unknown health status %r, gauge not updated", status)
        return
    HEALTH_STATUS.set(level)


@contextmanager
def timed_stage(stage: str) -> Generator[None, None, None]:
    """
    Context manager that records stage latency.

    Usage::

        with timed_stage("registration"):
            await orchestrator.check_registration(jid, result)
    """
    with STAGE_LATENCY.labels(stage=stage).time():
        yield
