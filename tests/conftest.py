"""
Shared test fixtures for the validation test suite.
"""
import pytest

from account_validator.config.validator_config import ValidatorConfig
from account_validator.models.validation_result import ValidationResult
from account_validator.validation.connection import MockConnection


# ==========================================================================
# Clock & sleep doubles
# ==========================================================================

class FakeClock:
    """Manually advanced millisecond clock; sleep() advances it instead of waiting."""

    def __init__(self, start_ms: float = 0.0):
        self.now = start_ms
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds * 1000


class SleepRecorder:
    """Records requested delays without waiting."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


# ==========================================================================
# Configuration
# ==========================================================================

@pytest.fixture
def fast_config():
    """Short timeouts, no retry delay, no rate limiting."""
    return ValidatorConfig(
        timeout_ms=50,
        presence_timeout_margin_ms=20,
        retry_base_delay_ms=10,
        enable_rate_limiting=False,
        batch_delay_ms=10,
    )


# ==========================================================================
# Connections
# ==========================================================================

@pytest.fixture
def mock_connection():
    return MockConnection()


@pytest.fixture
def unregistered_connection():
    return MockConnection(responses={"check_existence": [{"exists": False}]})


# ==========================================================================
# Results
# ==========================================================================

@pytest.fixture
def registered_result():
    result = ValidationResult(number="+20 123-456-7890", jid="201234567890@s.whatsapp.net")
    result.is_registered = True
    result.is_active = True
    return result
