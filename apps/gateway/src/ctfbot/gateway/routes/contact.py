"""联系组织者路由

POST /api/contact: 转发问题给运营通知目标。
- 202: 已入队
- 404: 关联任务不存在
"""

from fastapi import APIRouter, Depends
from starlette.responses import Response

from ..deps import get_command_service
from ..services.command_service import CommandService
from .schemas import ContactRequest

router = APIRouter()


@router.post("/api/contact", status_code=202)
async def contact(
    body: ContactRequest,
    service: CommandService = Depends(get_command_service),
):
    await service.contact(body.actor(), body.text, task_id=body.task_id)
    return Response(status_code=202)
