"""通知投递目标（Sink）

每个 Sink 实现 async deliver(notification, text)；失败时抛出 NotifyError。
"""

from typing import Protocol

import httpx
import structlog

from ctfbot.core.models import Notification

from .exceptions import DeliveryRejectedError, NotifyError, WebhookUnreachableError

log = structlog.get_logger()

# 连接类异常类型集合（触发 WebhookUnreachableError，进而触发 FallbackSink 降级）
_CONNECTION_ERROR_TYPES = (
    ConnectionError,
    OSError,
    TimeoutError,
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.TimeoutException,
)


class Sink(Protocol):
    """通知投递目标"""

    name: str

    async def deliver(self, notification: Notification, text: str) -> None: ...


class LogSink:
    """以结构化日志记录每条通知（始终可用）"""

    name = "log"

    async def deliver(self, notification: Notification, text: str) -> None:
        log.info(
            "notification_delivered",
            sink=self.name,
            notification_id=notification.notification_id,
            type=notification.type.value,
            user_id=notification.user_id,
            text=text,
        )


class WebhookSink:
    """通过 HTTP POST 投递到运营 Webhook

    请求体: {"text": ..., "targets": [...], "notification": {...}}
    """

    name = "webhook"

    def __init__(
        self,
        url: str,
        token: str = "",
        targets: tuple[str, ...] = (),
        timeout_s: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            url: Webhook 地址
            token: Bearer token（为空则不发送 Authorization 头）
            targets: 运营通知目标，原样转发给 transport 层
            timeout_s: 单次投递超时（秒）
            transport: 自定义 httpx transport（测试注入）
        """
        self._url = url
        self._targets = list(targets)
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    async def deliver(self, notification: Notification, text: str) -> None:
        body = {
            "text": text,
            "targets": self._targets,
            "notification": notification.model_dump(mode="json"),
        }
        try:
            resp = await self._client.post(self._url, json=body)
        except _CONNECTION_ERROR_TYPES as e:
            raise WebhookUnreachableError(self._url, e) from e
        if resp.status_code >= 300:
            raise DeliveryRejectedError(self._url, resp.status_code)

    async def aclose(self) -> None:
        await self._client.aclose()


class FallbackSink:
    """降级投递

    Lazy probe 策略：每次投递时先尝试 primary，失败则切换到 fallback。
    不维护显式的"降级状态"标记。
    """

    def __init__(self, primary: Sink, fallback: Sink | None = None) -> None:
        self._primary = primary
        self._fallback = fallback
        self.name = f"{primary.name}+fallback"

    async def deliver(self, notification: Notification, text: str) -> None:
        try:
            await self._primary.deliver(notification, text)
            return
        except NotifyError as primary_error:
            if self._fallback is None:
                raise
            log.warning(
                "primary_sink_failed_attempting_fallback",
                sink=self._primary.name,
                notification_id=notification.notification_id,
                error=str(primary_error),
            )

        await self._fallback.deliver(notification, text)
        log.info(
            "sink_fallback_activated",
            sink=self._fallback.name,
            notification_id=notification.notification_id,
        )

    async def aclose(self) -> None:
        for sink in (self._primary, self._fallback):
            if close := getattr(sink, "aclose", None):
                await close()
