"""Notifier 接口

announce 不阻塞、不抛异常：调用时相关状态已经提交，
投递失败不能回滚或阻塞提交路径。具体实现见 ctfbot.notify。
"""

from typing import Protocol

import structlog

from .models import Notification

log = structlog.get_logger()


class Notifier(Protocol):
    """运营通知接口"""

    def announce(self, notification: Notification) -> None:
        """投递通知（尽力而为，立即返回）"""
        ...


class NullNotifier:
    """不投递任何通知，仅记录日志"""

    def announce(self, notification: Notification) -> None:
        log.debug(
            "notification_dropped",
            notification_id=notification.notification_id,
            type=notification.type.value,
        )
