"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含存储连通性与通知投递器状态。
"""

import structlog
from ctfbot.core.store import SqliteKVStore
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查

    检查项：
    1. store: 存储连通性（SQLite 执行 SELECT 1）
    2. notifier: 后台投递任务是否在运行，及待投递数量
    """
    checks: dict = {}
    all_ok = True

    store = getattr(request.app.state, "store", None)
    if store is None:
        checks["store"] = "error: not initialized"
        all_ok = False
    elif isinstance(store, SqliteKVStore):
        try:
            cursor = await store.conn.execute("SELECT 1")
            await cursor.fetchone()
            checks["store"] = "ok"
        except Exception as e:
            log.warning("readiness_store_check_failed", error=str(e))
            checks["store"] = f"error: {e}"
            all_ok = False
    else:
        checks["store"] = "ok"

    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        checks["notifier"] = "skipped"
    elif dispatcher.running:
        checks["notifier"] = "ok"
        checks["notifications_pending"] = dispatcher.pending
    else:
        checks["notifier"] = "stopped"
        all_ok = False

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )
