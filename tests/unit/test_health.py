"""
Unit tests for HealthMonitor.
"""
from account_validator.validation.events import EventBus, EventType
from account_validator.validation.health import HealthMonitor


def failures(monitor, n):
    for _ in range(n):
        monitor.update(False)


class TestHealthMonitor:
    def test_starts_healthy(self):
        snapshot = HealthMonitor().snapshot()
        assert snapshot["status"] == "healthy"
        assert snapshot["consecutive_failures"] == 0
        assert snapshot["total_checks"] == 0

    def test_below_threshold_stays_healthy(self):
        monitor = HealthMonitor()
        failures(monitor, 4)
        assert monitor.status == "healthy"

    def test_degraded_at_five(self):
        bus = EventBus()
        events = []
        bus.subscribe(EventType.HEALTH_DEGRADED, events.append)
        monitor = HealthMonitor(event_bus=bus)

        failures(monitor, 5)

        assert monitor.status == "degraded"
        assert len(events) == 1
        assert events[0].payload["consecutive_failures"] == 5

    def test_unhealthy_at_ten(self):
        bus = EventBus()
        critical = []
        bus.subscribe(EventType.HEALTH_CRITICAL, critical.append)
        monitor = HealthMonitor(event_bus=bus)

        failures(monitor, 10)

        assert monitor.status == "unhealthy"
        assert len(critical) == 1

    def test_success_resets(self):
        monitor = HealthMonitor()
        failures(monitor, 7)

        monitor.update(True)

        assert monitor.status == "healthy"
        assert monitor.consecutive_failures == 0
        assert monitor.total_checks == 8
