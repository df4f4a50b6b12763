"""请求体模型 -- 各路由共享"""

from ctfbot.core.models import Actor, TaskPatch, TaskSpec
from pydantic import BaseModel, Field


class ActorRequest(BaseModel):
    """携带请求者身份的请求体基类"""

    user_id: str = Field(min_length=1, description="请求者 ID")
    display_name: str = Field(default="", description="请求者展示名称")

    def actor(self) -> Actor:
        return Actor(user_id=self.user_id, display_name=self.display_name)


class SubmitRequest(ActorRequest):
    """flag 提交请求体；task_id 为空时在所有任务中查找"""

    task_id: str | None = Field(default=None, description="目标任务 ID")
    flag: str = Field(description="候选 flag（原样比较）")


class ContactRequest(ActorRequest):
    """向组织者提问的请求体"""

    text: str = Field(min_length=1, description="消息文本")
    task_id: str | None = Field(default=None, description="相关任务 ID")


class CreateTaskRequest(ActorRequest):
    """创建任务请求体：结构化 spec，或管理员聊天文本格式 text"""

    spec: TaskSpec | None = None
    text: str | None = Field(default=None, description="管理员聊天文本格式")


class EditTaskRequest(ActorRequest):
    patch: TaskPatch


class BroadcastRequest(ActorRequest):
    text: str = Field(min_length=1, description="广播内容")
