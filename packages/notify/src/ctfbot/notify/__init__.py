"""CtfBot Notify -- 运营通知投递层

packages/notify 的公开接口导出。
NotificationDispatcher 实现 ctfbot.core.notifier.Notifier 协议。
"""

# 配置
from .config import NotifyConfig, load_notify_config

# 核心组件
from .dispatcher import NotificationDispatcher

# 异常
from .exceptions import DeliveryRejectedError, NotifyError, WebhookUnreachableError
from .hub import NotificationHub
from .render import render_notification
from .sinks import FallbackSink, LogSink, Sink, WebhookSink

__all__ = [
    "NotificationDispatcher",
    "NotificationHub",
    "Sink",
    "LogSink",
    "WebhookSink",
    "FallbackSink",
    "render_notification",
    "NotifyConfig",
    "load_notify_config",
    "NotifyError",
    "WebhookUnreachableError",
    "DeliveryRejectedError",
]
