"""NotificationDispatcher -- Notifier 的后台队列实现

announce() 同步入队立即返回；后台 asyncio task 按全局速率上限取出并投递到各 Sink。
单个 Sink 投递失败时重投一次，仍失败则记录日志并丢弃，不影响其他 Sink。
"""

import asyncio
import time

import structlog

from ctfbot.core.models import Notification

from .exceptions import NotifyError
from .render import render_notification
from .sinks import Sink

log = structlog.get_logger()

# 单个 Sink 的最大投递次数（首次 + 一次重投）
MAX_DELIVERY_ATTEMPTS = 2


class NotificationDispatcher:
    """后台通知投递器"""

    def __init__(
        self,
        sinks: list[Sink],
        rate_per_second: int = 30,
        queue_maxsize: int = 1000,
    ) -> None:
        """
        Args:
            sinks: 投递目标列表
            rate_per_second: 全局投递速率上限（条/秒）
            queue_maxsize: 待投递队列上限
        """
        self._sinks = list(sinks)
        self._min_interval = 1.0 / rate_per_second
        self._queue: asyncio.Queue[Notification] = asyncio.Queue(maxsize=queue_maxsize)
        self._worker: asyncio.Task | None = None
        self._last_sent = 0.0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def announce(self, notification: Notification) -> None:
        """入队通知（非阻塞，不抛异常）"""
        try:
            self._queue.put_nowait(notification)
        except asyncio.QueueFull:
            log.error(
                "notification_dropped_queue_full",
                notification_id=notification.notification_id,
                type=notification.type.value,
            )

    async def start(self) -> None:
        if self.running:
            return
        self._worker = asyncio.create_task(self._run())
        log.info("notification_dispatcher_started", sinks=[s.name for s in self._sinks])

    async def flush(self) -> None:
        """等待队列中已有通知全部处理完"""
        await self._queue.join()

    async def stop(self, drain_timeout: float = 5.0) -> None:
        """停止后台投递；先在 drain_timeout 内尽量投递剩余通知"""
        if self._worker is not None:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
            except TimeoutError:
                log.warning("notification_drain_timeout", pending=self._queue.qsize())

            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

        for sink in self._sinks:
            if close := getattr(sink, "aclose", None):
                await close()
        log.info("notification_dispatcher_stopped")

    async def _run(self) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self._throttle()
                await self._dispatch(notification)
            except Exception:
                # 单条通知处理失败不能终止后台任务
                log.exception(
                    "notification_dispatch_error",
                    notification_id=notification.notification_id,
                )
            finally:
                self._queue.task_done()

    async def _throttle(self) -> None:
        wait = self._last_sent + self._min_interval - time.monotonic()
        if wait > 0:
            await asyncio.sleep(wait)
        self._last_sent = time.monotonic()

    async def _dispatch(self, notification: Notification) -> None:
        text = render_notification(notification)
        for sink in self._sinks:
            await self._deliver_with_retry(sink, notification, text)

    async def _deliver_with_retry(
        self,
        sink: Sink,
        notification: Notification,
        text: str,
    ) -> None:
        for attempt in range(1, MAX_DELIVERY_ATTEMPTS + 1):
            try:
                await sink.deliver(notification, text)
                return
            except NotifyError as e:
                log.warning(
                    "notification_delivery_failed",
                    sink=sink.name,
                    notification_id=notification.notification_id,
                    attempt=attempt,
                    recoverable=e.recoverable,
                    error=str(e),
                )
                if not e.recoverable:
                    break

        log.error(
            "notification_delivery_abandoned",
            sink=sink.name,
            notification_id=notification.notification_id,
            type=notification.type.value,
        )
