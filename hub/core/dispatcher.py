"""Dispatcher - decodes inbound frames and routes them to the registries."""

import logging
from typing import Any, Awaitable, Callable, Dict

from hub.core.bus import MessageBus
from hub.errors import HubError, ProtocolError, RequestError
from hub.models.messages import Envelope, MessageType, Outcome, Scope, UnknownType
from hub.plugins.registry import PluginRegistry
from hub.plugins.style import StyleRegistry

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[Outcome]]


class Dispatcher:
    """Routes each request to one registry operation and delivers the reply.

    Exactly one reply is produced per frame: queries and every error go to
    the requester only, successful mutations go to every open connection.
    """

    def __init__(self, plugins: PluginRegistry, styles: StyleRegistry, bus: MessageBus):
        self.plugins = plugins
        self.styles = styles
        self.bus = bus
        self._routes: Dict[MessageType, Handler] = {
            MessageType.LIST_PLUGINS: lambda data: plugins.list_plugins(),
            MessageType.ADD_PLUGIN: plugins.add_plugin,
            MessageType.REMOVE_PLUGIN: plugins.remove_plugin,
            MessageType.CONFIG_PLUGIN: plugins.config_plugin,
            MessageType.GET_STYLE: lambda data: styles.get_style(),
            MessageType.SET_STYLE: styles.set_style,
            MessageType.REMOVE_STYLE: lambda data: styles.remove_style(),
        }

    def handle_binary(self, conn_id: str) -> None:
        self.bus.send(conn_id, Envelope.error("Binary format is not supported."))

    async def handle_text(self, conn_id: str, text: str) -> None:
        try:
            envelope = Envelope.decode(text)
            await self.dispatch(conn_id, envelope)
        except HubError as e:
            logger.warning(f"[Dispatch] {e.kind} error for {conn_id[:8]}: {e}")
            self.bus.send(conn_id, Envelope.error(str(e)))
        except Exception:
            logger.exception(f"[Dispatch] Unexpected failure for {conn_id[:8]}")
            self.bus.send(conn_id, Envelope.error("Internal error."))

    async def dispatch(self, conn_id: str, envelope: Envelope) -> None:
        kind = envelope.kind
        logger.debug(f"[Dispatch] {conn_id[:8]} -> {envelope.type}")

        if kind == MessageType.BROADCAST:
            self._relay(envelope.data)
            return

        if isinstance(kind, UnknownType) or kind not in self._routes:
            raise ProtocolError("Unsupported type.")

        outcome = await self._routes[kind](envelope.data)
        self.deliver(conn_id, outcome)

    def deliver(self, conn_id: str, outcome: Outcome) -> None:
        if outcome.scope == Scope.BROADCAST:
            self.bus.broadcast(outcome.envelope)
        else:
            self.bus.send(conn_id, outcome.envelope)

    def _relay(self, data: Any) -> None:
        """Pass a plugin message through to every connection, unmodified."""
        if not isinstance(data, str):
            raise RequestError("Failed to parse the broadcast message.")
        self.bus.broadcast(data)
