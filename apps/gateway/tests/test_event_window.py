"""比赛时间窗口之外的命令测试"""

import pytest
from ctfbot.core.config import EventConfig
from httpx import AsyncClient


@pytest.fixture
def event_config() -> EventConfig:
    """比赛已结束"""
    return EventConfig(
        event_start=1,
        event_end=2,
        tester_ids=frozenset({"t1"}),
        admin_ids=frozenset({"a1"}),
    )


class TestWindowClosed:
    async def test_player_submit_rejected_without_solve(self, client: AsyncClient, admin_task, app):
        resp = await client.post(
            "/api/submit",
            json={"user_id": "p1", "task_id": admin_task, "flag": "flag{w}"},
        )
        assert resp.status_code == 423
        assert resp.json()["error"]["code"] == "WINDOW_CLOSED"
        assert "ENDED" in resp.json()["error"]["message"]

        service = app.state.command_service
        assert await service.engine.all_solves() == []

    async def test_player_listing_rejected(self, client: AsyncClient):
        resp = await client.get("/api/tasks", params={"user_id": "p1"})
        assert resp.status_code == 423

    async def test_tester_bypasses_window(self, client: AsyncClient, admin_task):
        resp = await client.post(
            "/api/submit",
            json={"user_id": "t1", "task_id": admin_task, "flag": "flag{w}"},
        )
        assert resp.status_code == 200
        assert resp.json()["outcome"] == "CORRECT"

    async def test_admin_operations_ignore_window(self, client: AsyncClient, admin_task):
        resp = await client.patch(
            f"/api/admin/tasks/{admin_task}",
            json={"user_id": "a1", "patch": {"points": 2}},
        )
        assert resp.status_code == 200
        assert resp.json()["points"] == 2

    async def test_contact_allowed_after_event(self, client: AsyncClient, app):
        queue = await app.state.notification_hub.subscribe()

        resp = await client.post(
            "/api/contact", json={"user_id": "p1", "text": "login broken?"}
        )
        assert resp.status_code == 202

        await app.state.dispatcher.flush()
        notification = queue.get_nowait()
        assert notification.type == "QUESTION"
        assert notification.payload["text"] == "login broken?"

    async def test_contact_about_hidden_task_still_not_found(self, client: AsyncClient):
        created = await client.post(
            "/api/admin/tasks",
            json={"user_id": "a1", "text": "hidden: egg\nflag{egg}\nsecret"},
        )
        resp = await client.post(
            "/api/contact",
            json={"user_id": "p1", "text": "?", "task_id": created.json()["task_id"]},
        )
        assert resp.status_code == 404
