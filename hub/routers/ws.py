"""WebSocket endpoint - one handler task per open connection."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from hub.core.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["hub"])


def _remote_address(ws: WebSocket):
    client = ws.client
    if client is None or not client.host:
        return None
    return f"{client.host}:{client.port}"


@router.websocket("/")
@router.websocket("/ws")
async def hub_socket(ws: WebSocket):
    """Hub socket used by display clients and the editor.

    Text frames carry ``{"type", "data"}`` envelopes; binary frames are
    rejected with an error reply and the connection stays open.
    """
    dispatcher: Dispatcher = ws.app.state.dispatcher
    bus = dispatcher.bus

    await ws.accept()
    remote = _remote_address(ws)
    if remote:
        logger.info(f"Connection opened from {remote}.")
    else:
        logger.error("Unable to obtain client's IP address.")

    conn = bus.register(ws, remote)
    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break

            text = message.get("text")
            if text is not None:
                await dispatcher.handle_text(conn.id, text)
            elif message.get("bytes") is not None:
                dispatcher.handle_binary(conn.id)
    except WebSocketDisconnect:
        pass
    finally:
        bus.unregister(conn.id)
        logger.info(f"Connection closed from {conn.label}.")
