"""UserDirectory 测试"""

from ctfbot.core.models import Actor
from ctfbot.core.users import UserDirectory


class TestUserDirectory:
    async def test_touch_records_user_once(self, kv_store):
        users = UserDirectory(kv_store)
        await users.touch(Actor(user_id="u1", display_name="neo"))
        await users.touch(Actor(user_id="u1", display_name="neo"))
        await users.touch(Actor(user_id="u2"))

        assert await users.user_ids() == ["u1", "u2"]
        assert await users.display_names() == {"u1": "neo", "u2": ""}

    async def test_display_name_updates(self, kv_store):
        users = UserDirectory(kv_store)
        await users.touch(Actor(user_id="u1", display_name="neo"))
        await users.touch(Actor(user_id="u1", display_name="trinity"))
        # 空展示名称不覆盖已有名称
        await users.touch(Actor(user_id="u1"))
        assert (await users.display_names())["u1"] == "trinity"
