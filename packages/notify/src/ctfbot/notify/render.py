"""通知渲染 -- Notification -> 运营可读文本"""

from ctfbot.core.models import (
    BroadcastPayload,
    Notification,
    NotificationType,
    QuestionPayload,
    SolvedPayload,
)


def _who(display_name: str, user_id: str) -> str:
    return f"@{display_name}" if display_name else user_id


def render_notification(notification: Notification) -> str:
    """渲染通知文本"""
    if notification.type in (NotificationType.SOLVED, NotificationType.HIDDEN_SOLVED):
        p = SolvedPayload.model_validate(notification.payload)
        hidden = " hidden" if notification.type == NotificationType.HIDDEN_SOLVED else ""
        return (
            f"User {_who(p.display_name, notification.user_id)} solved{hidden} "
            f"task {p.task_name} (+{p.points})"
        )

    if notification.type == NotificationType.QUESTION:
        p = QuestionPayload.model_validate(notification.payload)
        about = f" about task {p.task_name or p.task_id}" if p.task_id else ""
        return f"Message from {_who(p.display_name, notification.user_id)}{about}:\n{p.text}"

    p = BroadcastPayload.model_validate(notification.payload)
    return p.text
