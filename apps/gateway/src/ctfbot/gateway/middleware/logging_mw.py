"""LoggingMiddleware -- 为每个 HTTP 请求生成 request_id，绑定到 structlog contextvars"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

log = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件 -- request_id 通过 X-Request-ID 响应头返回给 transport 层"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(ULID())
        start = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)

        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            elapsed_ms=int((time.monotonic() - start) * 1000),
        )
        response.headers["X-Request-ID"] = request_id
        return response
