"""
Ban Classifier — weighted keyword scoring over accumulated error evidence.

Scores every ban kind in the pattern table by combining:
- Keyword hits in the concatenated, lowercased error text   (+weight each)
- Error codes that are themselves listed keywords           (+weight × 1.5 each)
- Low probe success rate (< 0.3)                            (+0.5 flat)
- More than two identified failure patterns                 (+0.3 × pattern count)

normalized = min(raw / 5, 1.0). The best normalized score wins (first kind in
table order on ties); below 0.3 the verdict is NONE with confidence 0.5.

A keyword that is also an error code (e.g. "429") is counted twice when both
the text and the code match.

Also hosts the keyword fallback used when the weighted classifier is disabled.
"""
import logging
import time
from collections import Counter, deque
from typing import Deque, Dict, List, Optional, Sequence

import numpy as np

from account_validator.config.constants import (
    ACCURACY_MIN_SAMPLES,
    ACCURACY_PLACEHOLDER,
    ACCURACY_SAMPLE_WINDOW,
    CLASSIFIER_HISTORY_SIZE,
    CODE_MATCH_MULTIPLIER,
    ERROR_PATTERNS,
    FAILURE_PATTERN_BONUS,
    FAILURE_PATTERN_MIN,
    LOW_SUCCESS_RATE,
    LOW_SUCCESS_RATE_BONUS,
    MIN_PREDICTION_SCORE,
    NO_SIGNAL_CONFIDENCE,
    RAPID_FAILURE_INTERVAL_MS,
    REPEATED_CODE_MIN,
    SCORE_NORMALIZER,
    SEQUENTIAL_FAILURE_MIN,
)
from account_validator.models.classification import (
    BanPrediction,
    ClassifierFeatures,
    KindScore,
    TimingPattern,
)
from account_validator.models.validation_result import (
    BanType,
    ErrorDetail,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class BanClassifier:
    """
    Pattern-table classifier with a bounded rolling history.

    The history only feeds estimate_accuracy(); no weights are ever learned.
    """

    def __init__(self, patterns: Optional[Dict[str, dict]] = None, max_history: int = CLASSIFIER_HISTORY_SIZE):
        self.patterns = patterns if patterns is not None else ERROR_PATTERNS
        self.history: Deque[dict] = deque(maxlen=max_history)

    def analyze(self, error_details: Sequence[ErrorDetail], success_rate: float = 0.0) -> BanPrediction:
        """
        Classify accumulated error evidence.

        Args:
            error_details: Error evidence in recording order.
            success_rate: probes_successful / probes_executed for the account.

        Returns:
            BanPrediction. kind=NONE/confidence=0.5 means no usable signal.
        """
        features = self.extract_features(error_details, success_rate)
        scores = self.score(features)
        prediction = self.predict(scores)

        self.history.append({
            "features": features,
            "prediction": prediction,
            "timestamp": time.time() * 1000,
        })
        logger.debug(
            "Classifier verdict: %s (confidence=%.2f, errors=%d)",
            prediction.kind.value, prediction.confidence, features.error_count,
        )
        return prediction

    # ------------------------------------------------------------------
    # Feature extraction
    # ------------------------------------------------------------------

    def extract_features(self, error_details: Sequence[ErrorDetail], success_rate: float) -> ClassifierFeatures:
        error_codes: List[str] = []
        for detail in error_details:
            if detail.code and detail.code not in error_codes:
                error_codes.append(detail.code)

        return ClassifierFeatures(
            error_text=" ".join(d.error.lower() for d in error_details),
            error_codes=error_codes,
            error_count=len(error_details),
            success_rate=success_rate,
            failure_patterns=identify_failure_patterns(error_details),
            timing=analyze_timing(error_details),
        )

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score(self, features: ClassifierFeatures) -> Dict[BanType, KindScore]:
        scores: Dict[BanType, KindScore] = {}
        pattern_count = len(features.failure_patterns)

        for kind_value, pattern in self.patterns.items():
            keywords: List[str] = pattern["keywords"]
            weight: float = pattern["weight"]
            raw = 0.0
            match_count = 0

            for keyword in keywords:
                if keyword in features.error_text:
                    raw += weight
                    match_count += 1

            for code in features.error_codes:
                if code.lower() in keywords:
                    raw += weight * CODE_MATCH_MULTIPLIER
                    match_count += 1

            if features.success_rate < LOW_SUCCESS_RATE:
                raw += LOW_SUCCESS_RATE_BONUS

            if pattern_count > FAILURE_PATTERN_MIN:
                raw += FAILURE_PATTERN_BONUS * pattern_count

            scores[BanType(kind_value)] = KindScore(
                raw=raw,
                normalized=float(np.minimum(raw / SCORE_NORMALIZER, 1.0)),
                base_confidence=pattern["confidence"] if match_count > 0 else 0.0,
                match_count=match_count,
            )

        return scores

    def predict(self, scores: Dict[BanType, KindScore]) -> BanPrediction:
        best_kind = BanType.NONE
        best: Optional[KindScore] = None

        for kind, kind_score in scores.items():
            if kind_score.normalized > (best.normalized if best else 0.0):
                best_kind, best = kind, kind_score

        if best is None or best.normalized < MIN_PREDICTION_SCORE:
            return BanPrediction(kind=BanType.NONE, confidence=NO_SIGNAL_CONFIDENCE)

        return BanPrediction(
            kind=best_kind,
            confidence=best.normalized,
            match_count=best.match_count,
            base_confidence=best.base_confidence,
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def estimate_accuracy(self) -> Optional[dict]:
        """
        Advisory only: there is no ground truth to compare against, so the
        estimate is a fixed placeholder once enough samples exist.
        """
        if len(self.history) < ACCURACY_MIN_SAMPLES:
            return None
        sample_size = min(len(self.history), ACCURACY_SAMPLE_WINDOW)
        return {
            "sample_size": sample_size,
            "estimated_accuracy": ACCURACY_PLACEHOLDER,
        }


def identify_failure_patterns(error_details: Sequence[ErrorDetail]) -> List[str]:
    patterns: List[str] = []
    if len(error_details) >= SEQUENTIAL_FAILURE_MIN:
        patterns.append("sequential_failures")

    code_counts = Counter(d.code for d in error_details)
    for code, count in code_counts.items():
        if count >= REPEATED_CODE_MIN:
            patterns.append(f"repeated_{code}")
    return patterns


def analyze_timing(error_details: Sequence[ErrorDetail]) -> TimingPattern:
    times = [d.timestamp for d in error_details if d.timestamp]
    if len(times) < 2:
        return TimingPattern(pattern="insufficient_data")

    avg = float(np.mean(np.diff(times)))
    return TimingPattern(
        pattern="rapid_failures" if avg < RAPID_FAILURE_INTERVAL_MS else "delayed_failures",
        avg_interval_ms=avg,
    )


def apply_keyword_fallback(result: ValidationResult, patterns: Optional[Dict[str, dict]] = None) -> None:
    """
    Two-rule heuristic used when the weighted classifier is disabled.

    1. First pattern-table kind with any keyword in the error text wins.
    2. A registered account whose probes all failed is a VIOLATION, unless
       rule 1 already set a kind.
    """
    patterns = patterns if patterns is not None else ERROR_PATTERNS
    error_text = " ".join(d.error.lower() for d in result.diagnostics.error_details)

    for kind_value, pattern in patterns.items():
        if any(keyword.lower() in error_text for keyword in pattern["keywords"]):
            result.ban.is_banned = True
            result.ban.type = BanType(kind_value)
            result.ban.detection_methods.append(f"pattern_match_{kind_value}")
            break

    if result.is_registered and result.diagnostics.all_probes_failed():
        result.ban.is_banned = True
        if result.ban.type == BanType.NONE:
            result.ban.type = BanType.VIOLATION
            result.ban.detection_methods.append("zero_successful_probes")
