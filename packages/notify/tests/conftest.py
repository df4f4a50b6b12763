"""Notify 包测试 fixtures"""

import pytest
from ctfbot.core.models import (
    Notification,
    NotificationType,
    QuestionPayload,
    SolvedPayload,
)


@pytest.fixture
def solved_notification() -> Notification:
    return Notification(
        type=NotificationType.SOLVED,
        user_id="u1",
        payload=SolvedPayload(
            task_id="abcd1234",
            task_name="warmup",
            points=3,
            display_name="neo",
        ).model_dump(),
    )


@pytest.fixture
def question_notification() -> Notification:
    return Notification(
        type=NotificationType.QUESTION,
        user_id="u2",
        payload=QuestionPayload(
            text="is the server down?",
            task_id="abcd1234",
            task_name="warmup",
        ).model_dump(),
    )
