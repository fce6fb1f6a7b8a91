"""
Analytics — running counters over completed validations.

Keeps a bounded history of compact summaries for trend detection; nothing
is persisted.
"""
import logging
import time
from collections import deque
from typing import Deque, Dict, List

import numpy as np

from account_validator.config.constants import (
    ANALYTICS_HISTORY_SIZE,
    ANALYTICS_MIN_TREND_SAMPLES,
    ANALYTICS_TREND_WINDOW,
    HIGH_BAN_RATE_ALERT,
    HIGH_BAN_RATE_TREND,
    HIGH_FAILURE_RATE,
    SLOW_RESPONSE_MS,
)
from account_validator.models.validation_result import ValidationResult

logger = logging.getLogger(__name__)


def _empty_metrics() -> dict:
    return {
        "total_validations": 0,
        "successful_validations": 0,
        "failed_validations": 0,
        "banned_accounts": 0,
        "active_accounts": 0,
        "ban_types": {},
        "avg_response_time_ms": 0.0,
        "detection_methods": {},
    }


class AnalyticsEngine:
    def __init__(self, max_history: int = ANALYTICS_HISTORY_SIZE):
        self.metrics: dict = _empty_metrics()
        self.history: Deque[dict] = deque(maxlen=max_history)

    def record(self, result: ValidationResult) -> None:
        m = self.metrics
        m["total_validations"] += 1

        if result.is_registered:
            m["successful_validations"] += 1
            if result.ban.is_banned:
                m["banned_accounts"] += 1
                kind = result.ban.type.value
                m["ban_types"][kind] = m["ban_types"].get(kind, 0) + 1
            else:
                m["active_accounts"] += 1
        else:
            m["failed_validations"] += 1

        response_time = result.diagnostics.response_time_ms or 0
        n = m["total_validations"]
        m["avg_response_time_ms"] = (m["avg_response_time_ms"] * (n - 1) + response_time) / n

        methods: Dict[str, int] = m["detection_methods"]
        for method in result.ban.detection_methods:
            methods[method] = methods.get(method, 0) + 1

        self.history.append({
            "timestamp": time.time() * 1000,
            "is_banned": result.ban.is_banned,
            "ban_type": result.ban.type.value,
            "response_time_ms": response_time,
            "success_rate": result.diagnostics.success_rate,
        })

    def trends(self) -> dict:
        if len(self.history) < ANALYTICS_MIN_TREND_SAMPLES:
            return {"status": "insufficient_data"}

        recent = list(self.history)[-ANALYTICS_TREND_WINDOW:]
        ban_rate = float(np.mean([h["is_banned"] for h in recent]))
        avg_response = float(np.mean([h["response_time_ms"] for h in recent]))
        return {
            "recent_ban_rate": ban_rate,
            "avg_response_time_ms": avg_response,
            "trend": "high_ban_rate" if ban_rate > HIGH_BAN_RATE_TREND else "normal",
        }

    def recommendations(self) -> List[str]:
        recs: List[str] = []
        trends = self.trends()

        if trends.get("recent_ban_rate", 0.0) > HIGH_BAN_RATE_ALERT:
            recs.append("High ban rate detected - Consider reviewing account selection criteria")
        if trends.get("avg_response_time_ms", 0.0) > SLOW_RESPONSE_MS:
            recs.append("Slow response times - Consider optimizing network or reducing timeout values")

        total = self.metrics["total_validations"]
        if total and self.metrics["failed_validations"] / total > HIGH_FAILURE_RATE:
            recs.append("High failure rate - Check connection stability")
        return recs

    def report(self) -> dict:
        return {
            "summary": self.metrics,
            "trends": self.trends(),
            "recommendations": self.recommendations(),
        }

    def reset(self) -> None:
        self.metrics = _empty_metrics()
        self.history.clear()
