"""Task Domain Model

任务只允许管理员修改；删除是 tombstone（state=DELETED），
不做物理删除，保证历史 Solve 仍能解析到任务身份。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import TaskState


class Task(BaseModel):
    """Task 数据模型 -- 存储于 task:<task_id>"""

    task_id: str = Field(description="唯一且稳定的任务 ID")
    name: str = Field(description="展示名称")
    description: str = Field(default="", description="任务描述")
    flags: list[str] = Field(description="可接受的 flag 列表（精确匹配，区分大小写）")
    points: int = Field(ge=0, description="当前分值")
    hidden: bool = Field(default=False, description="隐藏任务：不出现在列表中，但可提交")
    state: TaskState = Field(default=TaskState.ACTIVE, description="生命周期状态")
    revision: int = Field(default=1, description="修订号，每次修改 +1")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @property
    def is_deleted(self) -> bool:
        return self.state == TaskState.DELETED

    def accepts(self, candidate: str) -> bool:
        """精确比较候选 flag，不做任何规范化"""
        return any(candidate == flag for flag in self.flags)


class TaskSpec(BaseModel):
    """创建任务的输入"""

    name: str
    flags: list[str]
    description: str = ""
    points: int = 1
    hidden: bool = False


class TaskPatch(BaseModel):
    """编辑任务的输入 -- 只修改显式提供的字段"""

    name: str | None = None
    flags: list[str] | None = None
    description: str | None = None
    points: int | None = None
    hidden: bool | None = None


class TaskSummary(BaseModel):
    """任务列表项（玩家视图）"""

    task_id: str
    name: str
    description: str
    points: int
    solved: bool = False


class AdminTaskSummary(TaskSummary):
    """任务列表项（管理员视图）"""

    hidden: bool
    state: TaskState
    flags: list[str]
    revision: int
