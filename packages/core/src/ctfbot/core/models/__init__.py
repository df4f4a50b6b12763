"""CtfBot Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    VALID_TASK_TRANSITIONS,
    NotificationType,
    Role,
    SubmitOutcome,
    TaskState,
    WindowDecision,
    validate_task_transition,
)
from .notification import (
    BroadcastPayload,
    Notification,
    QuestionPayload,
    SolvedPayload,
)
from .solve import Actor, ScoreEntry, Solve, SubmitResult, UserRank
from .task import AdminTaskSummary, Task, TaskPatch, TaskSpec, TaskSummary

__all__ = [
    # 枚举
    "TaskState",
    "Role",
    "WindowDecision",
    "SubmitOutcome",
    "NotificationType",
    # 状态机
    "VALID_TASK_TRANSITIONS",
    "validate_task_transition",
    # Task
    "Task",
    "TaskSpec",
    "TaskPatch",
    "TaskSummary",
    "AdminTaskSummary",
    # Solve / Score
    "Actor",
    "Solve",
    "SubmitResult",
    "ScoreEntry",
    "UserRank",
    # Notification
    "Notification",
    "SolvedPayload",
    "QuestionPayload",
    "BroadcastPayload",
]
