"""集成测试共享 fixture -- 完整 app（SQLite + 投递器 + 日志降级目标）"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from ctfbot.core.config import EventConfig
from httpx import ASGITransport, AsyncClient


@pytest_asyncio.fixture
async def integration_app(tmp_db_path: Path, monkeypatch):
    """集成测试用 FastAPI app；返回 (app, db_path)"""
    monkeypatch.setenv("CTFBOT_LOG_FORMAT", "dev")

    from ctfbot.core.store import create_kv_store
    from ctfbot.gateway.main import create_app, install_services

    config = EventConfig(
        event_start=1,
        event_end=10**12,
        tester_ids=frozenset({"tester"}),
        admin_ids=frozenset({"admin"}),
    )
    app = create_app()
    store = await create_kv_store(str(tmp_db_path))
    dispatcher = install_services(app, store, config)
    await dispatcher.start()

    yield app

    await dispatcher.stop()
    await store.close()


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
        base_url="http://test",
    ) as ac:
        yield ac
