"""apps/gateway 测试配置 -- httpx AsyncClient + 临时 SQLite 数据库"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from ctfbot.core.config import EventConfig
from httpx import ASGITransport, AsyncClient

# 覆盖当前时间的宽窗口
OPEN_WINDOW = {"event_start": 1, "event_end": 10**12}


@pytest.fixture
def event_config() -> EventConfig:
    """比赛进行中；admin=a1，tester=t1"""
    return EventConfig(
        **OPEN_WINDOW,
        tester_ids=frozenset({"t1"}),
        admin_ids=frozenset({"a1"}),
    )


@pytest_asyncio.fixture
async def app(tmp_path: Path, event_config: EventConfig, monkeypatch):
    """创建测试用 FastAPI app 实例（绕过 lifespan，手动挂载服务）"""
    monkeypatch.setenv("CTFBOT_LOG_FORMAT", "dev")

    from ctfbot.core.store import create_kv_store
    from ctfbot.gateway.main import create_app, install_services

    application = create_app()
    store = await create_kv_store(str(tmp_path / "sqlite" / "test.db"))
    dispatcher = install_services(application, store, event_config)
    await dispatcher.start()

    yield application

    await dispatcher.stop()
    await store.close()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_task(client: AsyncClient) -> str:
    """由管理员创建的一个 5 分任务"""
    resp = await client.post(
        "/api/admin/tasks",
        json={
            "user_id": "a1",
            "spec": {"name": "warmup", "flags": ["flag{w}"], "points": 5},
        },
    )
    assert resp.status_code == 201
    return resp.json()["task_id"]
