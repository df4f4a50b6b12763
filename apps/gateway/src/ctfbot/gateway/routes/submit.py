"""flag 提交路由

POST /api/submit: 提交 flag。
- 200: 返回 SubmitResult（CORRECT / ALREADY_SOLVED / INCORRECT / TASK_NOT_FOUND / TASK_DELETED）
- 423: 比赛时间窗口之外
- 503: 存储不可达（提交未被判定，调用方应重试）
"""

from ctfbot.core.models import SubmitResult
from fastapi import APIRouter, Depends

from ..deps import get_command_service
from ..services.command_service import CommandService
from .schemas import SubmitRequest

router = APIRouter()


@router.post("/api/submit", response_model=SubmitResult)
async def submit_flag(
    body: SubmitRequest,
    service: CommandService = Depends(get_command_service),
):
    if body.task_id is None:
        return await service.submit_flag(body.actor(), body.flag)
    return await service.submit(body.actor(), body.task_id, body.flag)
