"""Connection management and message dispatch."""

from .bus import Connection, MessageBus
from .dispatcher import Dispatcher

__all__ = ["Connection", "MessageBus", "Dispatcher"]
