"""Tests for the message bus."""

import asyncio
import json

from helpers import settle
from hub.core.bus import MessageBus
from hub.models.messages import Envelope, MessageType


class FakeSocket:
    def __init__(self, fail=False):
        self.fail = fail
        self.frames = []

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(text)


class TestMessageBus:
    """Tests for register / send / broadcast / unregister."""

    def test_broadcast_reaches_every_connection(self):
        async def scenario():
            bus = MessageBus()
            a, b = FakeSocket(), FakeSocket()
            bus.register(a, "10.0.0.1:1")
            bus.register(b)
            delivered = bus.broadcast(Envelope.of(MessageType.REMOVE_PLUGIN, {"name": "foo"}))
            await settle()
            await bus.close_all()
            return delivered, a, b

        delivered, a, b = asyncio.run(scenario())

        assert delivered == 2
        assert [json.loads(f) for f in a.frames] == [{"type": "removePlugin", "data": {"name": "foo"}}]
        assert a.frames == b.frames

    def test_send_is_unicast(self):
        async def scenario():
            bus = MessageBus()
            a, b = FakeSocket(), FakeSocket()
            conn_a = bus.register(a)
            bus.register(b)
            bus.send(conn_a.id, Envelope.error("nope"))
            await settle()
            await bus.close_all()
            return a, b

        a, b = asyncio.run(scenario())

        assert len(a.frames) == 1
        assert b.frames == []

    def test_raw_text_is_sent_verbatim(self):
        async def scenario():
            bus = MessageBus()
            sock = FakeSocket()
            bus.register(sock)
            bus.broadcast('{"anything": true}')
            await settle()
            await bus.close_all()
            return sock

        assert asyncio.run(scenario()).frames == ['{"anything": true}']

    def test_order_is_preserved(self):
        async def scenario():
            bus = MessageBus()
            sock = FakeSocket()
            bus.register(sock)
            for i in range(5):
                bus.broadcast(str(i))
            await settle()
            await bus.close_all()
            return sock

        assert asyncio.run(scenario()).frames == ["0", "1", "2", "3", "4"]

    def test_failed_socket_is_dropped_without_error(self):
        async def scenario():
            bus = MessageBus()
            good, bad = FakeSocket(), FakeSocket(fail=True)
            bus.register(good)
            bus.register(bad)
            bus.broadcast("one")
            await settle()
            count_after_failure = bus.count()
            bus.broadcast("two")
            await settle()
            await bus.close_all()
            return count_after_failure, good

        count, good = asyncio.run(scenario())

        assert count == 1
        assert good.frames == ["one", "two"]

    def test_unregister_releases_connection(self):
        async def scenario():
            bus = MessageBus()
            conn = bus.register(FakeSocket())
            bus.unregister(conn.id)
            bus.unregister(conn.id)
            await settle()
            return bus.count(), bus.send(conn.id, "x"), bus.broadcast("y")

        assert asyncio.run(scenario()) == (0, False, 0)
