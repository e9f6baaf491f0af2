"""Dependency injection container for services."""

import logging
from typing import Optional

from hub.core.bus import MessageBus
from hub.core.dispatcher import Dispatcher
from hub.plugins.registry import PluginRegistry
from hub.plugins.style import StyleRegistry

logger = logging.getLogger(__name__)

# ============================================================================
# Global service instances (exposed via functions for easier testing/mocking)
# ============================================================================

_plugin_registry_instance: Optional[PluginRegistry] = None
_style_registry_instance: Optional[StyleRegistry] = None
_message_bus_instance: Optional[MessageBus] = None
_dispatcher_instance: Optional[Dispatcher] = None


def get_plugin_registry() -> PluginRegistry:
    """Get plugin registry (singleton)."""
    global _plugin_registry_instance
    if _plugin_registry_instance is None:
        from hub.constants import PLUGINS_DIR

        _plugin_registry_instance = PluginRegistry(PLUGINS_DIR)
        logger.info(f"Created PluginRegistry at {PLUGINS_DIR}")
    return _plugin_registry_instance


def get_style_registry() -> StyleRegistry:
    """Get style registry (singleton)."""
    global _style_registry_instance
    if _style_registry_instance is None:
        from hub.constants import STYLE_FILE

        _style_registry_instance = StyleRegistry(STYLE_FILE)
        logger.info(f"Created StyleRegistry at {STYLE_FILE}")
    return _style_registry_instance


def get_message_bus() -> MessageBus:
    """Get message bus (singleton)."""
    global _message_bus_instance
    if _message_bus_instance is None:
        _message_bus_instance = MessageBus()
        logger.info("Created MessageBus instance")
    return _message_bus_instance


def get_dispatcher() -> Dispatcher:
    """Get dispatcher (singleton) wired to the other singletons."""
    global _dispatcher_instance
    if _dispatcher_instance is None:
        _dispatcher_instance = Dispatcher(
            plugins=get_plugin_registry(),
            styles=get_style_registry(),
            bus=get_message_bus(),
        )
        logger.info("Created Dispatcher instance")
    return _dispatcher_instance


# Test utility function (resets all singletons)
def reset_services():
    """Reset all service instances (only for testing)."""
    global _plugin_registry_instance, _style_registry_instance, _message_bus_instance, _dispatcher_instance

    _plugin_registry_instance = None
    _style_registry_instance = None
    _message_bus_instance = None
    _dispatcher_instance = None
    logger.info("Reset all service instances")
