"""Tests for WebSocketChannel queueing and delivery."""
import asyncio
import threading

import pytest

from chat_relay.chat.channel import NEW_MESSAGE_SIGNAL, WebSocketChannel


class FakeWebSocket:
    """Collects text frames; optionally fails every send."""

    def __init__(self, fail: bool = False) -> None:
        self.sent = []
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


async def _finish(channel, writer):
    channel.close()
    await asyncio.wait_for(writer, timeout=1)


class TestDelivery:
    @pytest.mark.asyncio
    async def test_notify_sends_signal(self):
        ws = FakeWebSocket()
        channel = WebSocketChannel(ws, label="A")
        writer = asyncio.create_task(channel.run())

        channel.notify()
        channel.notify()
        await _finish(channel, writer)

        assert ws.sent == [NEW_MESSAGE_SIGNAL, NEW_MESSAGE_SIGNAL]
        assert channel.sent == 2

    @pytest.mark.asyncio
    async def test_custom_signal(self):
        ws = FakeWebSocket()
        channel = WebSocketChannel(ws, signal="ping")
        writer = asyncio.create_task(channel.run())

        channel.notify()
        await _finish(channel, writer)

        assert ws.sent == ["ping"]

    @pytest.mark.asyncio
    async def test_notify_from_another_thread(self):
        ws = FakeWebSocket()
        channel = WebSocketChannel(ws, label="A")
        writer = asyncio.create_task(channel.run())

        thread = threading.Thread(target=channel.notify)
        thread.start()
        thread.join()
        await asyncio.sleep(0.05)
        await _finish(channel, writer)

        assert ws.sent == [NEW_MESSAGE_SIGNAL]

    @pytest.mark.asyncio
    async def test_cross_thread_drop_is_recorded_on_loop(self):
        ws = FakeWebSocket()
        channel = WebSocketChannel(ws, label="A")
        writer = asyncio.create_task(channel.run())
        await _finish(channel, writer)

        thread = threading.Thread(target=channel.notify)
        thread.start()
        thread.join()
        # The drop is recorded by the loop callback, not the calling thread
        assert channel.dropped == 0
        await asyncio.sleep(0.05)

        assert channel.dropped == 1
        assert ws.sent == []


class TestBestEffort:
    @pytest.mark.asyncio
    async def test_full_queue_drops_extra_signals(self):
        ws = FakeWebSocket()
        channel = WebSocketChannel(ws, queue_size=2)

        for _ in range(5):
            channel.notify()
        assert channel.dropped == 3

        writer = asyncio.create_task(channel.run())
        await _finish(channel, writer)
        assert ws.sent == [NEW_MESSAGE_SIGNAL, NEW_MESSAGE_SIGNAL]

    @pytest.mark.asyncio
    async def test_notify_after_close_is_dropped(self):
        ws = FakeWebSocket()
        channel = WebSocketChannel(ws)
        writer = asyncio.create_task(channel.run())
        await _finish(channel, writer)

        channel.notify()

        assert channel.closed
        assert channel.dropped == 1
        assert ws.sent == []

    @pytest.mark.asyncio
    async def test_send_failure_closes_channel_quietly(self):
        ws = FakeWebSocket(fail=True)
        channel = WebSocketChannel(ws, label="A")
        writer = asyncio.create_task(channel.run())

        channel.notify()
        await asyncio.wait_for(writer, timeout=1)

        assert channel.closed
        channel.notify()
        channel.close()
        assert channel.sent == 0
        assert channel.dropped == 1
