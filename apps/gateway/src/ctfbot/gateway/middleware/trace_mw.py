"""TraceMiddleware -- 为请求绑定 user_id 与 task_id，贯穿命令处理日志

user_id 来自查询参数（GET）；task_id 来自 /tasks/{task_id} 路径。
请求体中的 user_id 由 CommandService 自行绑定。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response


class TraceMiddleware(BaseHTTPMiddleware):
    """命令级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if user_id := request.query_params.get("user_id"):
            structlog.contextvars.bind_contextvars(user_id=user_id)

        parts = request.url.path.rstrip("/").split("/")
        for i, part in enumerate(parts):
            if part == "tasks" and i + 1 < len(parts):
                structlog.contextvars.bind_contextvars(task_id=parts[i + 1])
                break

        return await call_next(request)
