"""CtfBot Core 异常体系

所有异常均可在调用方（transport 层）边界被捕获并翻译为用户可见消息，
任何一种都不会破坏核心状态。
"""


class CtfBotError(Exception):
    """Core 基础异常"""

    code = "CTFBOT_ERROR"

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 调用方是否可通过重试或修正输入恢复
        """
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class TaskValidationError(CtfBotError):
    """任务定义不合法（字段缺失/为空、分值为负等）"""

    code = "TASK_INVALID"


class TaskNotFoundError(CtfBotError):
    """任务不存在"""

    code = "TASK_NOT_FOUND"

    def __init__(self, task_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Task with id {task_id} does not exist")
        self.task_id = task_id


class TaskDeletedError(TaskNotFoundError):
    """对已删除（tombstone）任务执行操作"""

    code = "TASK_DELETED"

    def __init__(self, task_id: str) -> None:
        super().__init__(task_id, f"Task with id {task_id} has been deleted")


class TaskConflictError(CtfBotError):
    """并发修改冲突重试耗尽（或任务 ID 分配失败）"""

    code = "TASK_CONFLICT"

    def __init__(self, operation: str, task_id: str | None = None) -> None:
        target = f" task {task_id}" if task_id else ""
        super().__init__(f"Gave up on {operation}{target} after repeated conflicts")
        self.operation = operation
        self.task_id = task_id


class PermissionDeniedError(CtfBotError):
    """非管理员尝试执行管理操作"""

    code = "PERMISSION_DENIED"

    def __init__(self, user_id: str, operation: str) -> None:
        super().__init__(f"User {user_id} is not allowed to {operation}")
        self.user_id = user_id
        self.operation = operation


class WindowClosedError(CtfBotError):
    """比赛时间窗口之外的普通玩家操作"""

    code = "WINDOW_CLOSED"

    def __init__(self, decision: str) -> None:
        super().__init__(f"Event window is closed: {decision}")
        self.decision = decision


class StorageUnavailableError(CtfBotError):
    """存储不可达或读写失败

    调用方应重试或上报，绝不能把提交当作 "incorrect" 静默丢弃。
    """

    code = "STORAGE_UNAVAILABLE"

    def __init__(self, operation: str, original_error: Exception) -> None:
        """
        Args:
            operation: 失败的存储操作名称
            original_error: 原始异常
        """
        super().__init__(
            f"存储操作失败: {operation} -- {original_error}",
            recoverable=True,
        )
        self.operation = operation
        self.original_error = original_error
