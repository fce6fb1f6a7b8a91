"""
Classifier feature set and prediction — transient per-call values.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from account_validator.models.validation_result import BanType


@dataclass
class TimingPattern:
    """Inter-error timing class: rapid_failures | delayed_failures | insufficient_data."""

    pattern: str
    avg_interval_ms: Optional[float] = None


@dataclass
class ClassifierFeatures:
    """Features extracted from the error evidence of one validation."""

    error_text: str
    error_codes: List[str]
    error_count: int
    success_rate: float
    failure_patterns: List[str] = field(default_factory=list)
    timing: TimingPattern = field(default_factory=lambda: TimingPattern("insufficient_data"))


@dataclass
class KindScore:
    raw: float
    normalized: float
    base_confidence: float
    match_count: int


@dataclass
class BanPrediction:
    """
    Classifier verdict.

    kind=NONE with confidence 0.5 means "no signal", not "confidently clean".
    """

    kind: BanType
    confidence: float
    match_count: Optional[int] = None
    base_confidence: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "confidence": self.confidence,
            "match_count": self.match_count,
            "base_confidence": self.base_confidence,
        }
