"""
Environment settings loaded from .env file.
"""
import os
from dotenv import load_dotenv

load_dotenv()


# --- Probing ---
VALIDATOR_TIMEOUT_MS: int = int(os.getenv("VALIDATOR_TIMEOUT_MS", "8000"))
VALIDATOR_PARALLEL_PROBES: bool = os.getenv("VALIDATOR_PARALLEL_PROBES", "true").lower() == "true"
VALIDATOR_PRESENCE_CHECK: bool = os.getenv("VALIDATOR_PRESENCE_CHECK", "true").lower() == "true"
VALIDATOR_RETRY_ON_FAILURE: bool = os.getenv("VALIDATOR_RETRY_ON_FAILURE", "true").lower() == "true"
VALIDATOR_MAX_RETRIES: int = int(os.getenv("VALIDATOR_MAX_RETRIES", "2"))
VALIDATOR_RETRY_BASE_DELAY_MS: int = int(os.getenv("VALIDATOR_RETRY_BASE_DELAY_MS", "1000"))

# --- Cache ---
CACHE_ENABLED: bool = os.getenv("CACHE_ENABLED", "true").lower() == "true"
CACHE_TTL_MS: int = int(os.getenv("CACHE_TTL_MS", "3600000"))
CACHE_MAX_SIZE: int = int(os.getenv("CACHE_MAX_SIZE", "1000"))

# --- Rate limiting ---
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "10"))
RATE_LIMIT_WINDOW_MS: int = int(os.getenv("RATE_LIMIT_WINDOW_MS", "60000"))

# --- Classification ---
CLASSIFIER_ENABLED: bool = os.getenv("CLASSIFIER_ENABLED", "true").lower() == "true"
ANALYTICS_ENABLED: bool = os.getenv("ANALYTICS_ENABLED", "true").lower() == "true"

# --- Batch ---
BATCH_SIZE: int = int(os.getenv("BATCH_SIZE", "5"))
BATCH_DELAY_MS: int = int(os.getenv("BATCH_DELAY_MS", "2000"))

# --- Logging ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
