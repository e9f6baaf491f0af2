"""Plugin and style registries backed by the filesystem store.

Imports are lazy so that importing the package does not pull in aiohttp
until a registry is actually needed.
"""

__all__ = [
    "PluginRegistry",
    "StyleRegistry",
    "PluginTransaction",
]


def __getattr__(name):
    if name == "PluginRegistry":
        from hub.plugins.registry import PluginRegistry
        return PluginRegistry
    if name == "StyleRegistry":
        from hub.plugins.style import StyleRegistry
        return StyleRegistry
    if name == "PluginTransaction":
        from hub.plugins.store import PluginTransaction
        return PluginTransaction
    raise AttributeError(f"module 'hub.plugins' has no attribute {name!r}")
