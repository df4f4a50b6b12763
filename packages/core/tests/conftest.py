"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from ctfbot.core.config import EventConfig
from ctfbot.core.models import Actor, TaskSpec


class RecordingNotifier:
    """记录所有 announce 调用的 Notifier"""

    def __init__(self) -> None:
        self.notifications = []

    def announce(self, notification) -> None:
        self.notifications.append(notification)


@pytest_asyncio.fixture
async def core_db_path(tmp_path: Path) -> Path:
    """核心层临时数据库路径"""
    return tmp_path / "sqlite" / "core_test.db"


@pytest_asyncio.fixture
async def kv_store(core_db_path: Path) -> AsyncGenerator:
    """已初始化的 SQLite KVStore"""
    from ctfbot.core.store import create_kv_store

    store = await create_kv_store(str(core_db_path))
    yield store
    await store.close()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def registry(kv_store):
    from ctfbot.core.registry import TaskRegistry

    return TaskRegistry(kv_store)


@pytest.fixture
def engine(kv_store, registry, notifier):
    from ctfbot.core.submission import SubmissionEngine

    return SubmissionEngine(kv_store, registry, notifier)


@pytest.fixture
def event_config() -> EventConfig:
    """比赛窗口 (1000, 2000)，tester=t1，admin=a1"""
    return EventConfig(
        event_start=1000,
        event_end=2000,
        tester_ids=frozenset({"t1"}),
        admin_ids=frozenset({"a1"}),
    )


@pytest.fixture
def alice() -> Actor:
    return Actor(user_id="u-alice", display_name="alice")


@pytest.fixture
def bob() -> Actor:
    return Actor(user_id="u-bob", display_name="bob")


@pytest.fixture
def make_spec():
    """构造 TaskSpec 的工厂"""

    def _make(name: str = "warmup", flags=None, points: int = 1, **kwargs) -> TaskSpec:
        return TaskSpec(
            name=name,
            flags=flags if flags is not None else ["flag{warmup}"],
            points=points,
            **kwargs,
        )

    return _make
