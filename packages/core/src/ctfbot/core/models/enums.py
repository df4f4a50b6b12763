"""枚举定义

包含 TaskState 生命周期状态机、Role、WindowDecision、SubmitOutcome、
NotificationType 枚举，以及 VALID_TASK_TRANSITIONS 合法流转映射。
"""

from enum import StrEnum


class TaskState(StrEnum):
    """任务生命周期 -- draft -> active -> deleted"""

    # 预留：当前所有创建路径都直接进入 ACTIVE，DRAFT 只可能来自外部写入的记录
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    # 终态（tombstone）
    DELETED = "DELETED"


# 合法状态流转
VALID_TASK_TRANSITIONS: dict[TaskState, set[TaskState]] = {
    TaskState.DRAFT: {TaskState.ACTIVE, TaskState.DELETED},
    TaskState.ACTIVE: {TaskState.DELETED},
    # 终态不可再流转
    TaskState.DELETED: set(),
}


class Role(StrEnum):
    """请求者角色 -- 每次请求根据静态名单计算，不持久化"""

    PLAYER = "player"
    TESTER = "tester"
    ADMIN = "admin"


class WindowDecision(StrEnum):
    """时间窗口判定结果"""

    OPEN = "OPEN"
    NOT_STARTED = "NOT_STARTED"
    ENDED = "ENDED"


class SubmitOutcome(StrEnum):
    """flag 提交结果 -- 调用方必须分支处理的完整集合"""

    CORRECT = "CORRECT"
    ALREADY_SOLVED = "ALREADY_SOLVED"
    INCORRECT = "INCORRECT"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    TASK_DELETED = "TASK_DELETED"


class NotificationType(StrEnum):
    """运营通知类型"""

    SOLVED = "SOLVED"
    HIDDEN_SOLVED = "HIDDEN_SOLVED"
    QUESTION = "QUESTION"
    BROADCAST = "BROADCAST"


def validate_task_transition(from_state: TaskState, to_state: TaskState) -> bool:
    """验证任务状态流转是否合法

    Args:
        from_state: 当前状态
        to_state: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TASK_TRANSITIONS.get(from_state, set())
    return to_state in allowed
