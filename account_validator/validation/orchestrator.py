"""
Probe Orchestrator — registration check and evidence-gathering probes.

Stages for one account (strictly in order, no backtracking):
    1. Registration   — existence lookup under its own timeout
    2. Probes         — status, profile picture, business profile and
                        (optionally) presence, sorted by priority and run
                        concurrently or one at a time
    3. Retry          — non-fatal failures are retried up to max_retries
                        times with a linearly growing delay

Every probe failure is captured as ErrorDetail evidence on the result;
nothing raised by the remote connection escapes this module.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional

from jsonschema import ValidationError, validate

from account_validator.config.constants import (
    AGE_MEDIUM_MAX_DAYS,
    AGE_NEW_MAX_DAYS,
    PROBE_PRIORITIES,
)
from account_validator.config.schemas import (
    EXISTENCE_RESPONSE_SCHEMA,
    STATUS_PAYLOAD_SCHEMA,
)
from account_validator.config.validator_config import ValidatorConfig
from account_validator.models.validation_result import (
    AccountAge,
    ErrorDetail,
    ProbeResult,
    ProbeStatus,
    ValidationResult,
)
from account_validator.validation.connection import RemoteConnection
from account_validator.validation.errors import (
    ProbeTimeoutError,
    error_message,
    extract_error_code,
    is_fatal_error,
    is_timeout_error,
)
from account_validator.validation.metrics import record_probe_outcome, record_probe_retry

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


@dataclass
class Probe:
    """One remote call used as evidence for account state."""

    name: str
    priority: int
    call: Callable[[], Awaitable[Any]]
    timeout_ms: int


def classify_account_age(set_at_s: float, now_s: Optional[float] = None) -> AccountAge:
    """Age class from the epoch-seconds timestamp at which the status was set."""
    now_s = time.time() if now_s is None else now_s
    age_days = (now_s - set_at_s) / SECONDS_PER_DAY
    if age_days < AGE_NEW_MAX_DAYS:
        return AccountAge.NEW
    if age_days < AGE_MEDIUM_MAX_DAYS:
        return AccountAge.MEDIUM
    return AccountAge.OLD


def record_error(stage: str, error: BaseException, result: ValidationResult) -> ErrorDetail:
    """Append error evidence for *stage* to the result diagnostics."""
    detail = ErrorDetail(
        stage=stage,
        error=error_message(error),
        code=extract_error_code(error),
        timestamp=time.time() * 1000,
    )
    result.diagnostics.error_details.append(detail)
    return detail


class ProbeOrchestrator:
    """Runs the registration check and the probe set for one account at a time."""

    def __init__(
        self,
        connection: RemoteConnection,
        config: Optional[ValidatorConfig] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.connection = connection
        self.config = config or ValidatorConfig()
        self._sleep = sleep or asyncio.sleep

    # ==================================================================
    # Stage 1: Registration
    # ==================================================================

    async def check_registration(self, jid: str, result: ValidationResult) -> None:
        """
        Mark the account registered/active when the lookup reports it exists.

        A failed lookup is recorded as evidence and tagged
        "registration_unreachable"; a lookup that succeeds but reports no
        account is tagged "registration_not_found". Both leave the account
        unregistered.
        """
        try:
            check = await self._with_timeout(
                lambda: self.connection.check_existence(jid),
                self.config.timeout_ms,
            )
            if check is not None:
                validate(instance=check, schema=EXISTENCE_RESPONSE_SCHEMA)
        except ValidationError as exc:
            logger.warning("Malformed registration payload for %s: %s", jid, exc.message)
            record_error("registration", ValueError(f"Malformed registration payload: {exc.message}"), result)
            result.ban.detection_methods.append("registration_unreachable")
            return
        except Exception as exc:  # noqa: BLE001
            logger.warning("Registration check failed for %s: %s", jid, exc)
            record_error("registration", exc, result)
            result.ban.detection_methods.append("registration_unreachable")
            return

        result.is_registered = bool(check) and bool(check[0]["exists"])
        result.is_active = result.is_registered

        if result.is_registered:
            result.ban.detection_methods.append("registration_verified")
            result.diagnostics.probes_executed += 1
            result.diagnostics.probes_successful += 1
        else:
            result.ban.detection_methods.append("registration_not_found")

    # ==================================================================
    # Stage 2: Probes
    # ==================================================================

    def build_probe_list(self, jid: str) -> List[Probe]:
        timeout = self.config.timeout_ms
        conn = self.connection
        probes = [
            Probe("status", PROBE_PRIORITIES["status"], lambda: conn.fetch_status(jid), timeout),
            Probe(
                "profile_picture",
                PROBE_PRIORITIES["profile_picture"],
                lambda: conn.fetch_profile_picture(jid, self.config.profile_picture_kind),
                timeout,
            ),
            Probe(
                "business_profile",
                PROBE_PRIORITIES["business_profile"],
                lambda: conn.fetch_business_profile(jid),
                timeout,
            ),
        ]

        if self.config.enable_presence_check:
            probes.append(
                Probe(
                    "presence",
                    PROBE_PRIORITIES["presence"],
                    lambda: conn.subscribe_presence(jid),
                    self.config.presence_timeout_ms,
                )
            )

        return sorted(probes, key=lambda p: p.priority)

    async def run_probes(self, jid: str, result: ValidationResult) -> None:
        probes = self.build_probe_list(jid)

        if not self.config.parallel_probes:
            for probe in probes:
                await self.execute_probe(probe, result)
            return

        # Siblings are never cancelled: every probe finishes or times out on its own.
        outcomes = await asyncio.gather(
            *(self.execute_probe(probe, result) for probe in probes),
            return_exceptions=True,
        )
        faults = [o for o in outcomes if isinstance(o, BaseException)]
        for fault in faults:
            logger.error("Probe task for %s crashed: %r", jid, fault)
        if faults:
            raise faults[0]

    # ==================================================================
    # Stage 3: Per-probe execution with retry
    # ==================================================================

    async def execute_probe(self, probe: Probe, result: ValidationResult) -> None:
        result.diagnostics.probes_executed += 1
        started = time.monotonic()

        try:
            payload = await self._with_timeout(probe.call, probe.timeout_ms)
        except Exception as exc:  # noqa: BLE001
            record_error(probe.name, exc, result)
            status = ProbeStatus.TIMEOUT if is_timeout_error(exc) else ProbeStatus.FAILED
            result.diagnostics.probe_results.append(
                ProbeResult(
                    name=probe.name,
                    status=status,
                    duration_ms=_elapsed_ms(started),
                    error=error_message(exc),
                )
            )
            record_probe_outcome(probe.name, status.value)
            logger.debug("Probe %s failed: %s", probe.name, exc)

            if self.config.retry_on_failure and not is_fatal_error(exc):
                await self._retry(probe, result)
            return

        self.process_probe_result(probe.name, payload, result)
        result.diagnostics.probes_successful += 1
        result.diagnostics.probe_results.append(
            ProbeResult(name=probe.name, status=ProbeStatus.SUCCESS, duration_ms=_elapsed_ms(started))
        )
        record_probe_outcome(probe.name, ProbeStatus.SUCCESS.value)

    async def _retry(self, probe: Probe, result: ValidationResult) -> None:
        max_retries = self.config.max_retries
        for attempt in range(1, max_retries + 1):
            result.diagnostics.fallbacks_used.append(f"{probe.name}_retry_{attempt}")
            record_probe_retry(probe.name)
            await self._sleep(self.config.retry_base_delay_ms * attempt / 1000)

            started = time.monotonic()
            try:
                payload = await self._with_timeout(probe.call, probe.timeout_ms)
            except Exception as exc:  # noqa: BLE001
                logger.debug("Retry %d/%d of %s failed: %s", attempt, max_retries, probe.name, exc)
                if attempt == max_retries:
                    record_error(f"{probe.name}_final_retry", exc, result)
                    logger.warning("Probe %s exhausted %d retries", probe.name, max_retries)
                continue

            self.process_probe_result(probe.name, payload, result)
            result.diagnostics.probes_successful += 1
            result.diagnostics.probe_results.append(
                ProbeResult(
                    name=f"{probe.name}_retry_{attempt}",
                    status=ProbeStatus.SUCCESS,
                    duration_ms=_elapsed_ms(started),
                )
            )
            record_probe_outcome(probe.name, ProbeStatus.SUCCESS.value)
            return

    def process_probe_result(self, probe_name: str, payload: Any, result: ValidationResult) -> None:
        """Interpret a successful probe payload into account flags and detection tags."""
        account = result.account
        methods = result.ban.detection_methods

        if probe_name == "status":
            if not payload:
                return
            try:
                validate(instance=payload, schema=STATUS_PAYLOAD_SCHEMA)
            except ValidationError as exc:
                logger.warning("Ignoring malformed status payload for %s: %s", result.jid, exc.message)
                return
            if payload.get("status"):
                account.has_status = True
                account.status_text = payload["status"]
                methods.append("status_accessible")
                if payload.get("setAt"):
                    account.age = classify_account_age(payload["setAt"])

        elif probe_name == "profile_picture":
            if payload:
                account.has_profile_picture = True
                methods.append("profile_picture_accessible")

        elif probe_name == "business_profile":
            if payload:
                account.is_business_account = True
                methods.append("business_account_verified")

        elif probe_name == "presence":
            if payload:
                account.presence_available = True
                methods.append("presence_available")

    # ------------------------------------------------------------------

    @staticmethod
    async def _with_timeout(call: Callable[[], Awaitable[Any]], timeout_ms: int) -> Any:
        try:
            return await asyncio.wait_for(call(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            raise ProbeTimeoutError() from None


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
