"""UserDirectory -- 与 bot 交互过的用户目录

用于广播收件人列表和排行榜展示名称。角色不存储在这里。
"""

from datetime import UTC, datetime

from pydantic import BaseModel

from .models import Actor
from .store.keys import USER_PREFIX, strip_prefix, user_key
from .store.protocols import KVStore


class UserRecord(BaseModel):
    """用户目录记录 -- 存储于 user:<user_id>"""

    user_id: str
    display_name: str = ""
    first_seen: datetime


class UserDirectory:
    """用户目录"""

    def __init__(self, store: KVStore) -> None:
        self._store = store

    async def touch(self, actor: Actor) -> None:
        """记录用户；首次出现时写入，展示名称变化时更新"""
        key = user_key(actor.user_id)
        raw = await self._store.get(key)
        if raw is None:
            record = UserRecord(
                user_id=actor.user_id,
                display_name=actor.display_name,
                first_seen=datetime.now(UTC),
            )
            await self._store.compare_and_set(key, None, record.model_dump_json())
            return

        record = UserRecord.model_validate_json(raw)
        if actor.display_name and actor.display_name != record.display_name:
            updated = record.model_copy(update={"display_name": actor.display_name})
            # 并发更新展示名称时以先写入者为准
            await self._store.compare_and_set(key, raw, updated.model_dump_json())

    async def user_ids(self) -> list[str]:
        rows = await self._store.scan(USER_PREFIX)
        return [strip_prefix(key, USER_PREFIX) for key, _ in rows]

    async def display_names(self) -> dict[str, str]:
        rows = await self._store.scan(USER_PREFIX)
        records = [UserRecord.model_validate_json(value) for _, value in rows]
        return {r.user_id: r.display_name for r in records}
