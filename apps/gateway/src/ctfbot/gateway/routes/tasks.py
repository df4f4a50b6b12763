"""任务列表路由

GET /api/tasks: 当前用户可见的任务列表（受时间窗口限制）。
"""

from ctfbot.core.models import Actor, TaskSummary
from fastapi import APIRouter, Depends, Query

from ..deps import get_command_service, get_query_actor
from ..services.command_service import CommandService

router = APIRouter()


@router.get("/api/tasks", response_model=list[TaskSummary])
async def list_tasks(
    include_solved: bool = Query(default=True, description="是否包含已解出的任务"),
    actor: Actor = Depends(get_query_actor),
    service: CommandService = Depends(get_command_service),
):
    """按名称排序的可见任务；隐藏任务与已删除任务不出现"""
    return await service.list_tasks(actor, include_solved=include_solved)
