"""持久性集成测试 -- 进程重启后任务、解题记录与得分完整"""

from pathlib import Path

from ctfbot.core.config import EventConfig
from ctfbot.core.scoreboard import Scoreboard
from ctfbot.core.store import create_kv_store
from ctfbot.core.store.keys import score_key
from ctfbot.gateway.main import create_app, install_services
from httpx import ASGITransport, AsyncClient

CONFIG = EventConfig(
    event_start=1,
    event_end=10**12,
    admin_ids=frozenset({"admin"}),
)


class TestRestartDurability:
    async def test_state_survives_restart(self, tmp_path: Path):
        db_path = str(tmp_path / "durable.db")

        # 第一次启动：建题并解题
        app1 = create_app()
        store1 = await create_kv_store(db_path)
        dispatcher1 = install_services(app1, store1, CONFIG)
        await dispatcher1.start()
        async with AsyncClient(transport=ASGITransport(app=app1), base_url="http://test") as c1:
            resp = await c1.post(
                "/api/admin/tasks",
                json={"user_id": "admin", "spec": {"name": "durable", "flags": ["f"], "points": 6}},
            )
            task_id = resp.json()["task_id"]
            resp = await c1.post(
                "/api/submit",
                json={"user_id": "neo", "display_name": "Neo", "task_id": task_id, "flag": "f"},
            )
            assert resp.json()["outcome"] == "CORRECT"
        await dispatcher1.stop()
        await store1.close()

        # 第二次启动：数据完整，重复提交仍被识别
        app2 = create_app()
        store2 = await create_kv_store(db_path)
        dispatcher2 = install_services(app2, store2, CONFIG)
        await dispatcher2.start()
        try:
            async with AsyncClient(transport=ASGITransport(app=app2), base_url="http://test") as c2:
                resp = await c2.post(
                    "/api/submit",
                    json={"user_id": "neo", "task_id": task_id, "flag": "f"},
                )
                assert resp.json()["outcome"] == "ALREADY_SOLVED"

                board = (await c2.get("/api/admin/board", params={"user_id": "admin"})).json()
                assert board[0]["user_id"] == "neo"
                assert board[0]["display_name"] == "Neo"
                assert board[0]["total"] == 6
        finally:
            await dispatcher2.stop()
            await store2.close()

    async def test_score_cache_rebuilt_from_solves(self, tmp_path: Path):
        db_path = str(tmp_path / "cache.db")
        app = create_app()
        store = await create_kv_store(db_path)
        dispatcher = install_services(app, store, CONFIG)
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
                resp = await c.post(
                    "/api/admin/tasks",
                    json={"user_id": "admin", "spec": {"name": "t", "flags": ["f"], "points": 3}},
                )
                await c.post(
                    "/api/submit",
                    json={"user_id": "neo", "task_id": resp.json()["task_id"], "flag": "f"},
                )

            # 缓存损坏（例如崩溃发生在 Solve 写入之后、缓存递增之前）
            await store.set(score_key("neo"), "0")
            await store.set(score_key("ghost"), "9")

            fixed = await Scoreboard(store).reconcile_cache()
            assert fixed == 2
            assert await store.get(score_key("neo")) == "3"
            assert await store.get(score_key("ghost")) == "0"
            assert await Scoreboard(store).reconcile_cache() == 0
        finally:
            await dispatcher.stop()
            await store.close()
