"""NotificationHub -- 内存中通知广播器

每个订阅者（管理员 SSE 连接）持有一个 asyncio.Queue，支持 subscribe/unsubscribe。
作为 Sink 挂在 NotificationDispatcher 上。
"""

import asyncio

import structlog

from ctfbot.core.models import Notification

log = structlog.get_logger()


class NotificationHub:
    """SSE 通知广播器 -- 基于 asyncio.Queue 的发布/订阅模式"""

    name = "hub"

    def __init__(self, queue_maxsize: int = 100) -> None:
        self._subscribers: set[asyncio.Queue] = set()
        self._queue_maxsize = queue_maxsize

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self) -> asyncio.Queue:
        """订阅通知流

        Returns:
            asyncio.Queue 实例，新通知会被推送到此队列
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers.add(queue)
        return queue

    async def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    async def deliver(self, notification: Notification, text: str) -> None:
        """向所有订阅者广播通知；队列已满的订阅者被移除"""
        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(notification)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        # 清理已满的队列
        for q in dead_queues:
            self._subscribers.discard(q)
        if dead_queues:
            log.warning("hub_subscribers_dropped", count=len(dead_queues))
