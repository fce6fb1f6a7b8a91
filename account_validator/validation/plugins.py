"""
Plugin registry — polymorphic handlers invoked at fixed lifecycle points.

Plugins subclass ValidationPlugin and override the hooks they need:
    on_register(pipeline)         — once, at registration
    on_post_validation(result)    — after review derivation, before finalization

A failing hook is reported as a plugin_error event; it never aborts the
validation.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from account_validator.models.validation_result import ValidationResult
from account_validator.validation.errors import PluginRegistrationError
from account_validator.validation.events import EventBus, EventType

logger = logging.getLogger(__name__)


class ValidationPlugin:
    """Base class for pipeline plugins."""

    name: str = ""
    version: str = ""

    def on_register(self, pipeline: Any) -> None:
        pass

    async def on_post_validation(self, result: ValidationResult) -> None:
        pass


class PluginRegistry:
    """Name-keyed plugin store; registration order is hook order."""

    def __init__(self, event_bus: Optional[EventBus] = None):
        self.event_bus = event_bus or EventBus()
        self._plugins: Dict[str, ValidationPlugin] = {}

    def __len__(self) -> int:
        return len(self._plugins)

    def __contains__(self, name: str) -> bool:
        return name in self._plugins

    @property
    def names(self) -> List[str]:
        return list(self._plugins)

    def register(self, plugin: ValidationPlugin, pipeline: Any = None) -> None:
        """
        Register *plugin*, replacing any plugin with the same name.

        Raises:
            PluginRegistrationError: If the plugin has no name or version.
        """
        if not getattr(plugin, "name", None) or not getattr(plugin, "version", None):
            raise PluginRegistrationError("Plugin must have name and version")

        self._plugins[plugin.name] = plugin
        try:
            plugin.on_register(pipeline)
        except Exception as exc:  # noqa: BLE001
            self._report_failure(plugin.name, "on_register", exc)

        logger.info("Plugin registered: %s v%s", plugin.name, plugin.version)
        self.event_bus.emit(EventType.PLUGIN_REGISTERED, name=plugin.name, version=plugin.version)

    def unregister(self, name: str) -> bool:
        return self._plugins.pop(name, None) is not None

    async def run_post_validation(self, result: ValidationResult) -> None:
        for name, plugin in list(self._plugins.items()):
            try:
                await plugin.on_post_validation(result)
            except Exception as exc:  # noqa: BLE001
                self._report_failure(name, "on_post_validation", exc)

    def _report_failure(self, name: str, hook: str, exc: Exception) -> None:
        logger.warning("Plugin %s failed in %s: %s", name, hook, exc)
        self.event_bus.emit(EventType.PLUGIN_ERROR, plugin=name, hook=hook, error=exc)
