"""
Validation Pipeline — main entry point for account validation.

Executes, per account:
    1. Rate-limit gate (may suspend)
    2. Cache lookup (skipped on force_refresh; a hit returns a copy immediately)
    3. Registration check (unregistered → PERMANENT, remaining stages skipped)
    4. Probes (status, profile picture, business profile, presence)
    5. Classification (weighted classifier, or keyword fallback when disabled)
    6. Review options + plugin post-validation hooks
    7. Finalization + cache store

validate() never raises for per-account failures: anything escaping the
stages or the bookkeeping that follows them (analytics, metrics, cache
store) is recorded as a single FATAL error and returned as a result with
summary "Critical validation error".
"""
from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

from account_validator.config.constants import (
    CODE_FATAL,
    JID_DOMAIN_SUFFIX,
    SUMMARY_CRITICAL_ERROR,
)
from account_validator.config.validator_config import ValidatorConfig
from account_validator.models.validation_result import (
    BanType,
    ErrorDetail,
    ValidationResult,
)
from account_validator.validation.analytics import AnalyticsEngine
from account_validator.validation.cache import ResultCache, cache_key
from account_validator.validation.classifier import BanClassifier, apply_keyword_fallback
from account_validator.validation.connection import RemoteConnection
from account_validator.validation.errors import error_message
from account_validator.validation.events import EventBus, EventType
from account_validator.validation.health import HealthMonitor
from account_validator.validation.metrics import record_validation, timed_stage
from account_validator.validation.orchestrator import ProbeOrchestrator
from account_validator.validation.plugins import PluginRegistry, ValidationPlugin
from account_validator.validation.rate_limiter import RateLimiter
from account_validator.validation.review import derive_review_options, finalize_result

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_jid(number: str) -> str:
    """Strip every non-digit character and append the account domain suffix."""
    return _NON_DIGITS.sub("", number) + JID_DOMAIN_SUFFIX


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _outcome(result: ValidationResult) -> str:
    if not result.is_registered:
        return "not_registered"
    return result.ban.type.value if result.ban.is_banned else "active"


class ValidationPipeline:
    """
    Account validator wired from a single immutable ValidatorConfig.

    Args:
        connection: Remote connection used by every probe.
        config: Pipeline configuration. Defaults to ValidatorConfig().
        plugins: Plugins registered at construction, in order.
        event_bus: Shared EventBus. A private one is created if omitted.
        classifier: BanClassifier override (ignored when the classifier is disabled).
        cache / rate_limiter: Overrides, mainly for tests with injected clocks.
        sleep: Coroutine used for inter-chunk and retry delays (seconds).
    """

    def __init__(
        self,
        connection: RemoteConnection,
        config: Optional[ValidatorConfig] = None,
        plugins: Optional[Iterable[ValidationPlugin]] = None,
        event_bus: Optional[EventBus] = None,
        classifier: Optional[BanClassifier] = None,
        cache: Optional[ResultCache] = None,
        rate_limiter: Optional[RateLimiter] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.config = config or ValidatorConfig()
        cfg = self.config
        self.events = event_bus or EventBus()
        self._sleep = sleep or asyncio.sleep

        self.orchestrator = ProbeOrchestrator(connection, cfg, sleep=self._sleep)

        self.cache: Optional[ResultCache] = None
        if cfg.enable_cache:
            self.cache = cache or ResultCache(ttl_ms=cfg.cache_ttl_ms, max_size=cfg.cache_max_size)

        self.rate_limiter: Optional[RateLimiter] = None
        if cfg.enable_rate_limiting:
            self.rate_limiter = rate_limiter or RateLimiter(
                max_requests=cfg.rate_limit_max_requests,
                window_ms=cfg.rate_limit_window_ms,
            )

        self.classifier: Optional[BanClassifier] = None
        if cfg.enable_classifier:
            self.classifier = classifier or BanClassifier()

        self.analytics: Optional[AnalyticsEngine] = AnalyticsEngine() if cfg.enable_analytics else None

        self.health_monitor = HealthMonitor(
            degraded_threshold=cfg.health_degraded_threshold,
            critical_threshold=cfg.health_critical_threshold,
            event_bus=self.events,
        )

        self.plugins = PluginRegistry(self.events)
        for plugin in plugins or ():
            self.register_plugin(plugin)

    # ==================================================================
    # Single account
    # ==================================================================

    async def validate(self, number: str, force_refresh: bool = False) -> ValidationResult:
        if self.rate_limiter is not None:
            await self.rate_limiter.acquire()

        jid = normalize_jid(number)
        key = cache_key(jid)

        if self.cache is not None and not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                # Keyed on the jid; echo the caller's own spelling of the number.
                cached.number = number
                self.events.emit(EventType.CACHE_HIT, number=number, jid=jid)
                return cached

        self.events.emit(EventType.VALIDATION_START, number=number, jid=jid)
        result = ValidationResult(number=number, jid=jid)
        started = time.monotonic()

        try:
            await self._execute_stages(jid, result, started)
            if self.analytics is not None:
                self.analytics.record(result)
            record_validation(_outcome(result))
            if self.cache is not None:
                self.cache.set(key, result)
        except Exception as exc:  # noqa: BLE001
            logger.error("Critical validation error for %s: %s", number, exc, exc_info=True)
            result.diagnostics.error_details.append(
                ErrorDetail(
                    stage="critical",
                    error=error_message(exc),
                    code=CODE_FATAL,
                    timestamp=time.time() * 1000,
                )
            )
            result.diagnostics.response_time_ms = _elapsed_ms(started)
            result.summary = SUMMARY_CRITICAL_ERROR
            self.health_monitor.update(False)
            record_validation("critical")
            self.events.emit(EventType.VALIDATION_ERROR, number=number, jid=jid, error=exc, result=result)
            return result

        self.health_monitor.update(True)

        logger.info(
            "Validated %s: %s (%dms, probes %d/%d)",
            jid, result.summary, result.diagnostics.response_time_ms or 0,
            result.diagnostics.probes_successful, result.diagnostics.probes_executed,
        )
        self.events.emit(EventType.VALIDATION_COMPLETE, number=number, jid=jid, result=result)
        return result

    async def _execute_stages(self, jid: str, result: ValidationResult, started: float) -> None:
        # ==============================================================
        # Stage 1: Registration
        # ==============================================================
        with timed_stage("registration"):
            await self.orchestrator.check_registration(jid, result)

        if not result.is_registered:
            result.ban.is_banned = True
            result.ban.type = BanType.PERMANENT
            finalize_result(result, _elapsed_ms(started))
            return

        # ==============================================================
        # Stage 2: Probes
        # ==============================================================
        with timed_stage("probes"):
            await self.orchestrator.run_probes(jid, result)

        # ==============================================================
        # Stage 3: Classification
        # ==============================================================
        self._classify(result)

        # ==============================================================
        # Stage 4: Review options + plugin hooks
        # ==============================================================
        derive_review_options(result)
        await self.plugins.run_post_validation(result)

        # ==============================================================
        # Stage 5: Finalize
        # ==============================================================
        finalize_result(result, _elapsed_ms(started))

    def _classify(self, result: ValidationResult) -> None:
        if self.classifier is None:
            apply_keyword_fallback(result)
            return

        prediction = self.classifier.analyze(
            result.diagnostics.error_details,
            result.diagnostics.success_rate,
        )
        if prediction.kind != BanType.NONE:
            result.ban.is_banned = True
            result.ban.type = prediction.kind
            result.ban.ml_confidence = prediction.confidence
            result.ban.detection_methods.append("ml_pattern_detection")

    # ==================================================================
    # Batch
    # ==================================================================

    async def validate_batch(
        self,
        numbers: Sequence[str],
        batch_size: Optional[int] = None,
        batch_delay_ms: Optional[int] = None,
        force_refresh: bool = False,
    ) -> List[ValidationResult]:
        """
        Validate *numbers* in sequential chunks; accounts inside a chunk run
        concurrently. Results are returned in input order.
        """
        size = batch_size if batch_size is not None else self.config.batch_size
        delay_ms = batch_delay_ms if batch_delay_ms is not None else self.config.batch_delay_ms
        if size <= 0:
            raise ValueError(f"batch_size must be positive, got {size}")

        numbers = list(numbers)
        total = len(numbers)
        results: List[ValidationResult] = []
        self.events.emit(EventType.BATCH_START, total=total)

        for offset in range(0, total, size):
            chunk = numbers[offset:offset + size]
            chunk_results = await asyncio.gather(
                *(self.validate(number, force_refresh=force_refresh) for number in chunk)
            )
            results.extend(chunk_results)

            completed = min(offset + size, total)
            logger.info("Batch progress: %d/%d", completed, total)
            self.events.emit(EventType.BATCH_PROGRESS, completed=completed, total=total)

            if offset + size < total:
                await self._sleep(delay_ms / 1000)

        self.events.emit(EventType.BATCH_COMPLETE, results=results)
        return results

    # ==================================================================
    # Plugins & introspection
    # ==================================================================

    def register_plugin(self, plugin: ValidationPlugin) -> None:
        self.plugins.register(plugin, self)

    def cache_stats(self) -> Optional[dict]:
        return self.cache.stats() if self.cache is not None else None

    def rate_limit_status(self) -> Optional[dict]:
        return self.rate_limiter.status() if self.rate_limiter is not None else None

    def health(self) -> Dict[str, object]:
        return self.health_monitor.snapshot()

    def analytics_report(self) -> Optional[dict]:
        return self.analytics.report() if self.analytics is not None else None

    def classifier_accuracy(self) -> Optional[dict]:
        return self.classifier.estimate_accuracy() if self.classifier is not None else None

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    def reset_analytics(self) -> None:
        if self.analytics is not None:
            self.analytics.reset()
