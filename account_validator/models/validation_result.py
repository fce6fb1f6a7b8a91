"""
ValidationResult — per-account accumulator filled in by the pipeline stages.

Created fresh by ValidationPipeline.validate(), mutated only by the stages of
that one call, and handed back to the caller once finalized.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class BanType(str, Enum):
    NONE = "none"
    SPAM = "spam"
    VIOLATION = "violation"
    PERMANENT = "permanent"


class ReviewType(str, Enum):
    NONE = "none"
    SELF_APPEAL = "self_appeal"
    SUPPORT_REQUIRED = "support_required"


class AccountAge(str, Enum):
    NEW = "new"
    MEDIUM = "medium"
    OLD = "old"
    UNKNOWN = "unknown"


class ProbeStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"


@dataclass
class BanInfo:
    is_banned: bool = False
    type: BanType = BanType.NONE
    detection_methods: List[str] = field(default_factory=list)
    ml_confidence: Optional[float] = None


@dataclass
class ReviewInfo:
    available: bool = False
    type: ReviewType = ReviewType.NONE
    estimated_time: Optional[str] = None


@dataclass
class AccountInfo:
    has_status: bool = False
    status_text: Optional[str] = None
    has_profile_picture: bool = False
    is_business_account: bool = False
    age: AccountAge = AccountAge.UNKNOWN
    presence_available: bool = False


@dataclass
class ErrorDetail:
    """One piece of error evidence captured from a failed stage or probe."""

    stage: str
    error: str
    code: str
    timestamp: Optional[float] = None     # epoch ms


@dataclass
class ProbeResult:
    name: str
    status: ProbeStatus
    duration_ms: int
    error: Optional[str] = None


@dataclass
class Diagnostics:
    response_time_ms: Optional[int] = None
    probes_executed: int = 0
    probes_successful: int = 0
    error_details: List[ErrorDetail] = field(default_factory=list)
    fallbacks_used: List[str] = field(default_factory=list)
    probe_results: List[ProbeResult] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.probes_executed == 0:
            return 0.0
        return self.probes_successful / self.probes_executed

    def all_probes_failed(self) -> bool:
        """True when at least one probe ran and none of them succeeded."""
        return bool(self.probe_results) and all(
            p.status != ProbeStatus.SUCCESS for p in self.probe_results
        )


@dataclass
class ValidationResult:
    """Verdict for a single account."""

    number: str
    jid: str
    timestamp: float = field(default_factory=lambda: time.time() * 1000)
    is_registered: bool = False
    is_active: bool = False
    ban: BanInfo = field(default_factory=BanInfo)
    review: ReviewInfo = field(default_factory=ReviewInfo)
    account: AccountInfo = field(default_factory=AccountInfo)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    recommendations: List[str] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "jid": self.jid,
            "timestamp": self.timestamp,
            "is_registered": self.is_registered,
            "is_active": self.is_active,
            "ban": {
                "is_banned": self.ban.is_banned,
                "type": self.ban.type.value,
                "detection_methods": list(self.ban.detection_methods),
                "ml_confidence": self.ban.ml_confidence,
            },
            "review": {
                "available": self.review.available,
                "type": self.review.type.value,
                "estimated_time": self.review.estimated_time,
            },
            "account": {
                "has_status": self.account.has_status,
                "status_text": self.account.status_text,
                "has_profile_picture": self.account.has_profile_picture,
                "is_business_account": self.account.is_business_account,
                "age": self.account.age.value,
                "presence_available": self.account.presence_available,
            },
            "diagnostics": {
                "response_time_ms": self.diagnostics.response_time_ms,
                "probes_executed": self.diagnostics.probes_executed,
                "probes_successful": self.diagnostics.probes_successful,
                "error_details": [
                    {
                        "stage": e.stage,
                        "error": e.error,
                        "code": e.code,
                        "timestamp": e.timestamp,
                    }
                    for e in self.diagnostics.error_details
                ],
                "fallbacks_used": list(self.diagnostics.fallbacks_used),
                "probe_results": [
                    {
                        "name": p.name,
                        "status": p.status.value,
                        "duration_ms": p.duration_ms,
                        "error": p.error,
                    }
                    for p in self.diagnostics.probe_results
                ],
            },
            "recommendations": list(self.recommendations),
            "summary": self.summary,
        }
