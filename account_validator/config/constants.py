"""
Constants used across the validation pipeline.
Static tables only — nothing here is learned or persisted.
"""
from typing import Dict, List, Tuple

# =============================================================================
# Account identifiers
# =============================================================================
JID_DOMAIN_SUFFIX: str = "@s.whatsapp.net"
CACHE_KEY_NAMESPACE: str = "validate:"

# =============================================================================
# Ban kinds, review kinds, account age, probe status (closed enums)
# =============================================================================
BAN_NONE: str = "none"
BAN_SPAM: str = "spam"
BAN_VIOLATION: str = "violation"
BAN_PERMANENT: str = "permanent"

REVIEW_NONE: str = "none"
REVIEW_SELF_APPEAL: str = "self_appeal"
REVIEW_SUPPORT_REQUIRED: str = "support_required"

# =============================================================================
# Error pattern table (ordered: iteration order is the tie-break order)
# =============================================================================
ERROR_PATTERNS: Dict[str, dict] = {
    BAN_SPAM: {
        "keywords": ["spam", "rate limit", "too many", "blocked temporarily", "429", "rate_limit"],
        "weight": 1.0,
        "confidence": 0.85,
    },
    BAN_VIOLATION: {
        "keywords": ["violation", "terms", "policy", "forbidden", "403", "401", "unauthorized"],
        "weight": 1.2,
        "confidence": 0.90,
    },
    BAN_PERMANENT: {
        "keywords": ["permanently", "terminated", "deleted", "404", "banned from using", "account_deleted"],
        "weight": 1.5,
        "confidence": 0.95,
    },
}

# =============================================================================
# Error taxonomy
# =============================================================================
REJECTION_CODES: List[str] = ["403", "401", "404", "429", "500"]
FATAL_ERROR_PATTERNS: List[str] = ["404", "permanently", "deleted", "terminated"]

CODE_TIMEOUT: str = "TIMEOUT"
CODE_UNKNOWN: str = "UNKNOWN"
CODE_FATAL: str = "FATAL"

TIMEOUT_MESSAGE: str = "Operation timeout"

# =============================================================================
# Classifier thresholds
# =============================================================================
SEQUENTIAL_FAILURE_MIN: int = 3
REPEATED_CODE_MIN: int = 2
RAPID_FAILURE_INTERVAL_MS: float = 1000.0
LOW_SUCCESS_RATE: float = 0.3
LOW_SUCCESS_RATE_BONUS: float = 0.5
FAILURE_PATTERN_MIN: int = 2            # bonus applies strictly above this
FAILURE_PATTERN_BONUS: float = 0.3
CODE_MATCH_MULTIPLIER: float = 1.5
SCORE_NORMALIZER: float = 5.0
MIN_PREDICTION_SCORE: float = 0.3
NO_SIGNAL_CONFIDENCE: float = 0.5

CLASSIFIER_HISTORY_SIZE: int = 1000
ACCURACY_MIN_SAMPLES: int = 10
ACCURACY_SAMPLE_WINDOW: int = 100
ACCURACY_PLACEHOLDER: float = 0.87

# =============================================================================
# Account age (days since status was set)
# =============================================================================
AGE_NEW_MAX_DAYS: int = 30
AGE_MEDIUM_MAX_DAYS: int = 180

# =============================================================================
# Probe priorities (ascending = earlier)
# =============================================================================
PROBE_PRIORITIES: Dict[str, int] = {
    "status": 1,
    "profile_picture": 2,
    "business_profile": 3,
    "presence": 4,
}

# =============================================================================
# Review options per ban kind
# =============================================================================
REVIEW_OPTIONS: Dict[str, dict] = {
    BAN_SPAM: {
        "available": True,
        "type": REVIEW_SELF_APPEAL,
        "time": "24-48 hours",
        "steps": [
            "Submit self-appeal through WhatsApp app",
            "Avoid bulk messaging for one week",
            "Review WhatsApp business policies",
        ],
    },
    BAN_VIOLATION: {
        "available": True,
        "type": REVIEW_SUPPORT_REQUIRED,
        "time": "3-7 days",
        "steps": [
            "Contact WhatsApp support directly",
            "Prepare identity verification",
            "Review terms of service violations",
        ],
    },
    BAN_PERMANENT: {
        "available": False,
        "type": REVIEW_NONE,
        "time": None,
        "steps": [
            "Ban is permanent - Consider new number",
            "Ensure compliance before new account",
        ],
    },
}

ALL_CLEAR_RECOMMENDATIONS: Tuple[str, str] = (
    "Account is functioning normally",
    "Maintain natural usage patterns",
)

# =============================================================================
# Summaries
# =============================================================================
SUMMARIES: Dict[str, str] = {
    BAN_NONE: "Active and verified",
    BAN_SPAM: "Spam restrictions detected",
    BAN_VIOLATION: "Policy violation detected",
    BAN_PERMANENT: "Permanent ban confirmed",
}
SUMMARY_NOT_REGISTERED: str = "Not registered or permanently banned"
SUMMARY_CRITICAL_ERROR: str = "Critical validation error"

# =============================================================================
# Health
# =============================================================================
HEALTH_HEALTHY: str = "healthy"
HEALTH_DEGRADED: str = "degraded"
HEALTH_UNHEALTHY: str = "unhealthy"

# =============================================================================
# Analytics
# =============================================================================
ANALYTICS_HISTORY_SIZE: int = 1000
ANALYTICS_MIN_TREND_SAMPLES: int = 10
ANALYTICS_TREND_WINDOW: int = 50
HIGH_BAN_RATE_TREND: float = 0.3
HIGH_BAN_RATE_ALERT: float = 0.5
SLOW_RESPONSE_MS: float = 10_000.0
HIGH_FAILURE_RATE: float = 0.3
