"""运营通知 SSE 流路由

GET /api/admin/stream: 管理员实时接收通知（SOLVED / HIDDEN_SOLVED / QUESTION / BROADCAST）。
只推送连接建立之后产生的通知；空闲时发送心跳保活。
"""

import asyncio
import json

from ctfbot.core.config import SSE_HEARTBEAT_INTERVAL
from ctfbot.core.models import Notification
from ctfbot.core.roles import require_admin
from ctfbot.notify import NotificationHub, render_notification
from fastapi import APIRouter, Depends, Query
from sse_starlette.sse import EventSourceResponse

from ..deps import get_command_service, get_notification_hub
from ..services.command_service import CommandService

router = APIRouter()


def _notification_to_sse(notification: Notification) -> dict:
    data = notification.model_dump(mode="json")
    data["text"] = render_notification(notification)
    return {
        "id": notification.notification_id,
        "event": notification.type.value,
        "data": json.dumps(data, ensure_ascii=False),
    }


@router.get("/api/admin/stream")
async def stream_notifications(
    user_id: str = Query(min_length=1, description="管理员 ID"),
    service: CommandService = Depends(get_command_service),
    hub: NotificationHub = Depends(get_notification_hub),
):
    """SSE 通知流端点；非管理员返回 403"""
    require_admin(service.config, user_id, "stream notifications")

    async def event_generator():
        queue = await hub.subscribe()
        try:
            while True:
                try:
                    notification = await asyncio.wait_for(
                        queue.get(), timeout=SSE_HEARTBEAT_INTERVAL
                    )
                    yield _notification_to_sse(notification)
                except TimeoutError:
                    yield {"comment": "heartbeat"}
        finally:
            await hub.unsubscribe(queue)

    return EventSourceResponse(event_generator())
