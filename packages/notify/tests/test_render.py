"""通知渲染测试"""

from ctfbot.core.models import (
    BroadcastPayload,
    Notification,
    NotificationType,
    QuestionPayload,
    SolvedPayload,
)
from ctfbot.notify import render_notification


class TestRenderNotification:
    def test_solved(self, solved_notification):
        assert render_notification(solved_notification) == "User @neo solved task warmup (+3)"

    def test_hidden_solved_without_display_name(self):
        notification = Notification(
            type=NotificationType.HIDDEN_SOLVED,
            user_id="u9",
            payload=SolvedPayload(task_id="t", task_name="egg", points=1).model_dump(),
        )
        assert render_notification(notification) == "User u9 solved hidden task egg (+1)"

    def test_question_with_task(self, question_notification):
        assert render_notification(question_notification) == (
            "Message from u2 about task warmup:\nis the server down?"
        )

    def test_question_without_task(self):
        notification = Notification(
            type=NotificationType.QUESTION,
            user_id="u2",
            payload=QuestionPayload(text="hi", display_name="trinity").model_dump(),
        )
        assert render_notification(notification) == "Message from @trinity:\nhi"

    def test_broadcast(self):
        notification = Notification(
            type=NotificationType.BROADCAST,
            user_id="admin",
            payload=BroadcastPayload(text="Event starts now", recipients=["u1"]).model_dump(),
        )
        assert render_notification(notification) == "Event starts now"
