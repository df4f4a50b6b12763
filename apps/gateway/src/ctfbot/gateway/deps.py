"""依赖注入模块 -- 通过 FastAPI Depends 注入服务实例

服务实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from ctfbot.core.models import Actor
from ctfbot.notify import NotificationHub
from fastapi import Query, Request

from .services.command_service import CommandService


def get_command_service(request: Request) -> CommandService:
    """从 app.state 获取 CommandService 实例"""
    return request.app.state.command_service


def get_notification_hub(request: Request) -> NotificationHub:
    """从 app.state 获取 NotificationHub 实例"""
    return request.app.state.notification_hub


def get_query_actor(
    user_id: str = Query(min_length=1, description="请求者 ID"),
    display_name: str = Query(default="", description="请求者展示名称"),
) -> Actor:
    """从查询参数构造 Actor（GET / DELETE 请求）"""
    return Actor(user_id=user_id, display_name=display_name)
