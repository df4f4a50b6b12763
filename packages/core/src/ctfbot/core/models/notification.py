"""Notification Domain Model

核心操作提交之后（如 Solve 已持久化）才发出的运营通知。
payload 为结构化子类型 dump 后的 dict。
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field
from ulid import ULID

from .enums import NotificationType


class SolvedPayload(BaseModel):
    """SOLVED / HIDDEN_SOLVED 通知 payload"""

    task_id: str
    task_name: str
    points: int
    display_name: str = ""
    solved_at: datetime | None = Field(default=None, description="Solve 写入时刻")


class QuestionPayload(BaseModel):
    """QUESTION 通知 payload"""

    text: str
    display_name: str = ""
    task_id: str | None = Field(default=None, description="相关任务（可选）")
    task_name: str | None = None


class BroadcastPayload(BaseModel):
    """BROADCAST 通知 payload"""

    text: str
    recipients: list[str] = Field(default_factory=list)


class Notification(BaseModel):
    """通知事件"""

    notification_id: str = Field(
        default_factory=lambda: str(ULID()),
        description="唯一标识，ULID 格式，时间有序",
    )
    type: NotificationType
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC))
    user_id: str = Field(description="触发通知的用户")
    payload: dict[str, Any] = Field(default_factory=dict)
