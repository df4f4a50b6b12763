"""Solve / Score Domain Model

Solve 是 (user_id, task_id) 唯一的持久记录；points 为写入时刻任务分值的快照，
之后对任务的编辑不会追溯修改。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import SubmitOutcome


class Actor(BaseModel):
    """请求发起者（聊天身份）"""

    user_id: str = Field(min_length=1, description="稳定的用户 ID")
    display_name: str = Field(default="", description="展示名称")


class Solve(BaseModel):
    """Solve 记录 -- 存储于 solve:<user_id>:<task_id>"""

    solve_id: str = Field(description="唯一标识，ULID 格式")
    user_id: str
    task_id: str
    points: int = Field(ge=0, description="写入时刻的任务分值快照")
    task_revision: int = Field(description="写入时刻的任务修订号")
    solved_at: datetime


class SubmitResult(BaseModel):
    """flag 提交结果"""

    outcome: SubmitOutcome
    task_id: str | None = None
    task_name: str | None = None
    points_awarded: int = 0
    solved_at: datetime | None = None


class ScoreEntry(BaseModel):
    """排行榜条目"""

    position: int
    user_id: str
    display_name: str = ""
    total: int
    solve_count: int
    reached_at: datetime | None = Field(
        default=None,
        description="达到当前总分的那次 Solve 的时间",
    )


class UserRank(BaseModel):
    """单个用户的排名查询结果"""

    position: int | None = Field(description="名次；测试者/管理员为 None")
    total: int
    solve_count: int = 0
