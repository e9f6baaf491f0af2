"""Test helpers: meta builders, a local HTTP server and a recording bus."""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Tuple

from aiohttp import web

from hub.models.messages import Envelope

# An address nothing listens on
UNREACHABLE_URL = "http://127.0.0.1:9/script.js"


class RecordingBus:
    """Stands in for MessageBus and records what would have been delivered."""

    def __init__(self):
        self.sent = []        # (conn_id, text)
        self.broadcasts = []  # text

    def send(self, conn_id, payload):
        self.sent.append((conn_id, payload.encode() if isinstance(payload, Envelope) else payload))
        return True

    def broadcast(self, payload):
        self.broadcasts.append(payload.encode() if isinstance(payload, Envelope) else payload)
        return 1


def meta(name="foo", version="1", script=None, configs=None, **extra):
    """Build a plugin meta dict."""
    data = {
        "name": name,
        "version": version,
        "script": script if script is not None else {"inline": "x"},
    }
    if configs is not None:
        data["configs"] = configs
    data.update(extra)
    return data


@asynccontextmanager
async def serve(routes: Dict[str, Tuple[int, str]]):
    """Run a local HTTP server answering ``path -> (status, body)``.

    Yields:
        Base URL such as ``http://127.0.0.1:54321``
    """

    async def handle(request):
        status, body = routes.get(request.path, (404, "not found"))
        return web.Response(status=status, text=body)

    app = web.Application()
    app.router.add_get("/{tail:.*}", handle)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


async def settle(rounds: int = 10):
    """Let queued writer tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
