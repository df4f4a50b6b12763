"""管理路由 -- 所有端点要求管理员身份，不受时间窗口限制

GET    /api/admin/board             排行榜（不含测试者/管理员）
GET    /api/admin/tasks             全部任务（含隐藏任务，可选已删除任务）
POST   /api/admin/tasks             创建任务（结构化 spec 或聊天文本格式）
GET    /api/admin/tasks/{task_id}   任务完整记录（含已删除任务）
PATCH  /api/admin/tasks/{task_id}   部分更新
DELETE /api/admin/tasks/{task_id}   删除（tombstone，幂等）
POST   /api/admin/broadcast         广播消息
"""

from ctfbot.core.models import Actor, AdminTaskSummary, ScoreEntry, Task
from ctfbot.core.textformat import format_task_text
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from starlette.responses import JSONResponse, Response

from ..deps import get_command_service, get_query_actor
from ..services.command_service import CommandService
from .schemas import BroadcastRequest, CreateTaskRequest, EditTaskRequest

router = APIRouter(prefix="/api/admin")


class CreateTaskResponse(BaseModel):
    task_id: str


class TaskDetailResponse(BaseModel):
    task: Task
    text: str


class BroadcastResponse(BaseModel):
    recipients: list[str]


@router.get("/board", response_model=list[ScoreEntry])
async def board(
    actor: Actor = Depends(get_query_actor),
    service: CommandService = Depends(get_command_service),
):
    return await service.board(actor)


@router.get("/tasks", response_model=list[AdminTaskSummary])
async def list_all_tasks(
    include_deleted: bool = Query(default=False, description="是否包含已删除任务"),
    actor: Actor = Depends(get_query_actor),
    service: CommandService = Depends(get_command_service),
):
    return await service.list_all_tasks(actor, include_deleted=include_deleted)


@router.post("/tasks", status_code=201)
async def create_task(
    body: CreateTaskRequest,
    service: CommandService = Depends(get_command_service),
):
    """创建任务；提供 spec 时忽略 text"""
    if body.spec is not None:
        task_id = await service.create_task(body.actor(), body.spec)
    else:
        task_id = await service.create_task_from_text(body.actor(), body.text or "")

    return JSONResponse(
        status_code=201,
        content=CreateTaskResponse(task_id=task_id).model_dump(),
    )


@router.get("/tasks/{task_id}", response_model=TaskDetailResponse)
async def get_task(
    task_id: str,
    actor: Actor = Depends(get_query_actor),
    service: CommandService = Depends(get_command_service),
):
    """任务完整记录，附带可编辑的聊天文本格式"""
    task = await service.get_task(actor, task_id)
    return TaskDetailResponse(task=task, text=format_task_text(task))


@router.patch("/tasks/{task_id}", response_model=Task)
async def edit_task(
    task_id: str,
    body: EditTaskRequest,
    service: CommandService = Depends(get_command_service),
):
    return await service.edit_task(body.actor(), task_id, body.patch)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    actor: Actor = Depends(get_query_actor),
    service: CommandService = Depends(get_command_service),
):
    await service.delete_task(actor, task_id)
    return Response(status_code=204)


@router.post("/broadcast", response_model=BroadcastResponse)
async def broadcast(
    body: BroadcastRequest,
    service: CommandService = Depends(get_command_service),
):
    recipients = await service.broadcast(body.actor(), body.text)
    return BroadcastResponse(recipients=recipients)
