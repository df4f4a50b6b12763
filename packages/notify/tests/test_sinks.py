"""Sink 测试 -- LogSink / WebhookSink / FallbackSink / NotificationHub"""

import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest
from ctfbot.notify import (
    DeliveryRejectedError,
    FallbackSink,
    LogSink,
    NotificationHub,
    NotifyError,
    WebhookSink,
    WebhookUnreachableError,
)


def _mock_sink(name: str = "mock", side_effect=None):
    sink = AsyncMock()
    sink.name = name
    sink.deliver = AsyncMock(side_effect=side_effect)
    return sink


class TestWebhookSink:
    async def test_posts_text_targets_and_notification(self, solved_notification):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["auth"] = request.headers.get("authorization")
            captured["body"] = json.loads(request.content)
            return httpx.Response(200)

        sink = WebhookSink(
            url="http://ops.local/hook",
            token="tok",
            targets=("-100123",),
            transport=httpx.MockTransport(handler),
        )
        await sink.deliver(solved_notification, "User @neo solved task warmup (+3)")
        await sink.aclose()

        assert captured["auth"] == "Bearer tok"
        body = captured["body"]
        assert body["text"] == "User @neo solved task warmup (+3)"
        assert body["targets"] == ["-100123"]
        assert body["notification"]["notification_id"] == solved_notification.notification_id
        assert body["notification"]["type"] == "SOLVED"

    async def test_connection_error_raises_unreachable(self, solved_notification):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        sink = WebhookSink(url="http://ops.local/hook", transport=httpx.MockTransport(handler))
        with pytest.raises(WebhookUnreachableError) as exc_info:
            await sink.deliver(solved_notification, "text")
        assert exc_info.value.recoverable is True
        await sink.aclose()

    @pytest.mark.parametrize("status_code,recoverable", [(400, False), (503, True)])
    async def test_non_2xx_rejected(self, solved_notification, status_code, recoverable):
        sink = WebhookSink(
            url="http://ops.local/hook",
            transport=httpx.MockTransport(lambda request: httpx.Response(status_code)),
        )
        with pytest.raises(DeliveryRejectedError) as exc_info:
            await sink.deliver(solved_notification, "text")
        assert exc_info.value.status_code == status_code
        assert exc_info.value.recoverable is recoverable
        await sink.aclose()


class TestFallbackSink:
    async def test_primary_success_no_fallback(self, solved_notification):
        primary, fallback = _mock_sink("primary"), _mock_sink("fallback")
        await FallbackSink(primary, fallback).deliver(solved_notification, "t")
        primary.deliver.assert_called_once()
        fallback.deliver.assert_not_called()

    async def test_primary_failure_uses_fallback(self, solved_notification):
        primary = _mock_sink(
            "primary",
            side_effect=WebhookUnreachableError("http://x", ConnectionError("down")),
        )
        fallback = _mock_sink("fallback")
        await FallbackSink(primary, fallback).deliver(solved_notification, "t")
        fallback.deliver.assert_called_once_with(solved_notification, "t")

    async def test_no_fallback_reraises(self, solved_notification):
        primary = _mock_sink("primary", side_effect=NotifyError("boom"))
        with pytest.raises(NotifyError):
            await FallbackSink(primary).deliver(solved_notification, "t")

    async def test_lazy_probe_recovers(self, solved_notification):
        """每次投递都先尝试 primary"""
        primary = _mock_sink("primary", side_effect=[NotifyError("boom"), None])
        fallback = _mock_sink("fallback")
        sink = FallbackSink(primary, fallback)

        await sink.deliver(solved_notification, "t")
        await sink.deliver(solved_notification, "t")
        assert primary.deliver.call_count == 2
        assert fallback.deliver.call_count == 1


class TestLogSink:
    async def test_log_sink_never_fails(self, solved_notification):
        await LogSink().deliver(solved_notification, "text")


class TestNotificationHub:
    async def test_fan_out_to_subscribers(self, solved_notification):
        hub = NotificationHub()
        q1 = await hub.subscribe()
        q2 = await hub.subscribe()

        await hub.deliver(solved_notification, "t")
        assert q1.get_nowait() is solved_notification
        assert q2.get_nowait() is solved_notification

        await hub.unsubscribe(q1)
        assert hub.subscriber_count == 1

    async def test_full_subscriber_dropped(self, solved_notification):
        hub = NotificationHub(queue_maxsize=1)
        slow = await hub.subscribe()
        await hub.deliver(solved_notification, "t")
        await hub.deliver(solved_notification, "t")

        assert hub.subscriber_count == 0
        assert slow.qsize() == 1

    async def test_no_subscribers_is_noop(self, solved_notification):
        await NotificationHub().deliver(solved_notification, "t")
        await asyncio.sleep(0)
