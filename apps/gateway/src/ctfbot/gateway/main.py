"""FastAPI 应用主文件

app 创建 + lifespan 管理：存储初始化/关闭 + 通知投递器启动/停止 + 路由注册。
CtfBotError 子类统一翻译为 {"error": {"code", "message"}} 响应体。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from ctfbot.core.config import EventConfig, get_db_path, load_event_config
from ctfbot.core.exceptions import (
    CtfBotError,
    PermissionDeniedError,
    StorageUnavailableError,
    TaskConflictError,
    TaskDeletedError,
    TaskNotFoundError,
    TaskValidationError,
    WindowClosedError,
)
from ctfbot.core.store import create_kv_store
from ctfbot.core.store.protocols import KVStore
from ctfbot.notify import (
    FallbackSink,
    LogSink,
    NotificationDispatcher,
    NotificationHub,
    NotifyConfig,
    Sink,
    WebhookSink,
    load_notify_config,
)
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import admin, contact, health, score, stream, submit, tasks
from .services.command_service import CommandService

log = structlog.get_logger()

# 异常 -> HTTP 状态码；子类在前
_ERROR_STATUS: list[tuple[type[CtfBotError], int]] = [
    (TaskValidationError, 422),
    (TaskDeletedError, 410),
    (TaskNotFoundError, 404),
    (PermissionDeniedError, 403),
    (TaskConflictError, 409),
    (WindowClosedError, 423),
    (StorageUnavailableError, 503),
]


def _status_for(exc: CtfBotError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 400


async def ctfbot_error_handler(request: Request, exc: CtfBotError) -> JSONResponse:
    """CtfBotError -> {"error": {"code", "message"}}"""
    status_code = _status_for(exc)
    if status_code >= 500:
        log.error("command_failed", code=exc.code, error=exc.message)
    else:
        log.info("command_rejected", code=exc.code, error=exc.message)
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
            }
        },
    )


def build_sinks(
    notify_config: NotifyConfig,
    event_config: EventConfig,
    hub: NotificationHub,
) -> list[Sink]:
    """组装投递目标：SSE hub 始终挂载；配置了 webhook 时以日志作为降级目标"""
    if notify_config.webhook_url:
        webhook = WebhookSink(
            url=notify_config.webhook_url,
            token=notify_config.webhook_token.get_secret_value(),
            targets=event_config.notify_targets,
            timeout_s=notify_config.timeout_s,
        )
        return [hub, FallbackSink(primary=webhook, fallback=LogSink())]
    return [hub, LogSink()]


def install_services(
    app: FastAPI,
    store: KVStore,
    event_config: EventConfig,
    notify_config: NotifyConfig | None = None,
) -> NotificationDispatcher:
    """把服务实例挂到 app.state；返回尚未启动的投递器"""
    notify_config = notify_config or NotifyConfig()
    hub = NotificationHub()
    dispatcher = NotificationDispatcher(
        sinks=build_sinks(notify_config, event_config, hub),
        rate_per_second=notify_config.rate_per_second,
        queue_maxsize=notify_config.queue_maxsize,
    )
    app.state.store = store
    app.state.event_config = event_config
    app.state.notification_hub = hub
    app.state.dispatcher = dispatcher
    app.state.command_service = CommandService(store, event_config, dispatcher)
    return dispatcher


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化存储和投递器，关闭时清理"""
    event_config = load_event_config()
    notify_config = load_notify_config()
    store = await create_kv_store(get_db_path())

    dispatcher = install_services(app, store, event_config, notify_config)
    await dispatcher.start()
    log.info(
        "gateway_started",
        event_start=event_config.event_start,
        event_end=event_config.event_end,
        admins=len(event_config.admin_ids),
        testers=len(event_config.tester_ids),
        webhook=bool(notify_config.webhook_url),
    )

    yield

    await dispatcher.stop()
    await store.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="CtfBot Gateway",
        version="0.1.0",
        description="CTF 比赛 bot 的命令层 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()

    app.add_exception_handler(CtfBotError, ctfbot_error_handler)

    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(submit.router, tags=["submit"])
    app.include_router(score.router, tags=["score"])
    app.include_router(contact.router, tags=["contact"])
    app.include_router(admin.router, tags=["admin"])
    app.include_router(stream.router, tags=["stream"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
