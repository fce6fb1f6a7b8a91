"""
Unit tests for the event bus and the plugin registry.
"""
import pytest

from account_validator.validation.errors import PluginRegistrationError
from account_validator.validation.events import EventBus, EventType, ValidationEvent
from account_validator.validation.plugins import PluginRegistry, ValidationPlugin


class Tagger(ValidationPlugin):
    name = "tagger"
    version = "1.0.0"

    def __init__(self):
        self.registered_with = None

    def on_register(self, pipeline):
        self.registered_with = pipeline

    async def on_post_validation(self, result):
        result.ban.detection_methods.append("tagged")


class Failing(ValidationPlugin):
    name = "failing"
    version = "0.0.1"

    async def on_post_validation(self, result):
        raise RuntimeError("plugin broke")


class TestEventBus:
    def test_emit_reaches_subscribers(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.CACHE_HIT, received.append)

        event = bus.emit(EventType.CACHE_HIT, jid="1@s.whatsapp.net")

        assert received == [event]
        assert isinstance(event, ValidationEvent)
        assert event.payload == {"jid": "1@s.whatsapp.net"}

    def test_other_types_not_delivered(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.BATCH_START, received.append)

        bus.emit(EventType.BATCH_COMPLETE, results=[])

        assert received == []

    def test_string_event_type_accepted(self):
        bus = EventBus()
        received = []
        bus.subscribe("batch_start", received.append)

        bus.emit(EventType.BATCH_START, total=3)

        assert received[0].type == EventType.BATCH_START

    def test_subscribe_all(self):
        bus = EventBus()
        received = []
        bus.subscribe_all(received.append)

        bus.emit(EventType.VALIDATION_START)
        bus.emit(EventType.HEALTH_DEGRADED)

        assert [e.type for e in received] == [EventType.VALIDATION_START, EventType.HEALTH_DEGRADED]

    def test_failing_listener_isolated(self):
        bus = EventBus()
        received = []

        def broken(event):
            raise ValueError("listener broke")

        bus.subscribe(EventType.VALIDATION_COMPLETE, broken)
        bus.subscribe(EventType.VALIDATION_COMPLETE, received.append)

        bus.emit(EventType.VALIDATION_COMPLETE)

        assert len(received) == 1

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.CACHE_HIT, received.append)

        assert bus.unsubscribe(EventType.CACHE_HIT, received.append) is True
        assert bus.unsubscribe(EventType.CACHE_HIT, received.append) is False
        bus.emit(EventType.CACHE_HIT)
        assert received == []


class TestPluginRegistry:
    def test_register_calls_hook_and_emits(self):
        bus = EventBus()
        events = []
        bus.subscribe(EventType.PLUGIN_REGISTERED, events.append)
        registry = PluginRegistry(bus)
        plugin = Tagger()
        owner = object()

        registry.register(plugin, owner)

        assert "tagger" in registry
        assert len(registry) == 1
        assert plugin.registered_with is owner
        assert events[0].payload == {"name": "tagger", "version": "1.0.0"}

    def test_missing_name_or_version_rejected(self):
        registry = PluginRegistry()

        class Nameless(ValidationPlugin):
            version = "1.0.0"

        class Unversioned(ValidationPlugin):
            name = "unversioned"

        with pytest.raises(PluginRegistrationError):
            registry.register(Nameless())
        with pytest.raises(PluginRegistrationError):
            registry.register(Unversioned())
        assert len(registry) == 0

    def test_same_name_replaces(self):
        registry = PluginRegistry()
        registry.register(Tagger())
        registry.register(Tagger())
        assert registry.names == ["tagger"]

    def test_unregister(self):
        registry = PluginRegistry()
        registry.register(Tagger())
        assert registry.unregister("tagger") is True
        assert registry.unregister("tagger") is False

    @pytest.mark.asyncio
    async def test_post_validation_runs_in_order(self, registered_result):
        registry = PluginRegistry()
        registry.register(Tagger())

        await registry.run_post_validation(registered_result)

        assert registered_result.ban.detection_methods == ["tagged"]

    @pytest.mark.asyncio
    async def test_failing_hook_reported_not_raised(self, registered_result):
        bus = EventBus()
        errors = []
        bus.subscribe(EventType.PLUGIN_ERROR, errors.append)
        registry = PluginRegistry(bus)
        registry.register(Failing())
        registry.register(Tagger())

        await registry.run_post_validation(registered_result)

        assert registered_result.ban.detection_methods == ["tagged"]
        assert errors[0].payload["plugin"] == "failing"
        assert errors[0].payload["hook"] == "on_post_validation"
