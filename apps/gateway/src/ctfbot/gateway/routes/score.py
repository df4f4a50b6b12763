"""分数查询路由

GET /api/score: 当前用户的总分与名次；测试者与管理员 rank 为 null。
"""

from ctfbot.core.models import Actor
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..deps import get_command_service, get_query_actor
from ..services.command_service import CommandService

router = APIRouter()


class ScoreResponse(BaseModel):
    total: int
    rank: int | None
    solve_count: int


@router.get("/api/score", response_model=ScoreResponse)
async def get_score(
    actor: Actor = Depends(get_query_actor),
    service: CommandService = Depends(get_command_service),
):
    result = await service.score(actor)
    return ScoreResponse(
        total=result.total,
        rank=result.position,
        solve_count=result.solve_count,
    )
