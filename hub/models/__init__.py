"""Wire and domain models."""

from .messages import Envelope, MessageType, Outcome, Scope, UnknownType
from .plugin import Config, ConfigValue, PluginMeta, Script, Style, is_safe_name

__all__ = [
    "Envelope",
    "MessageType",
    "UnknownType",
    "Outcome",
    "Scope",
    "Config",
    "ConfigValue",
    "PluginMeta",
    "Script",
    "Style",
    "is_safe_name",
]
