"""CtfBot Core Store -- 键值存储适配层

提供工厂函数创建 SQLite 持久化的 KVStore 实例。
"""

from pathlib import Path

import aiosqlite

from .memory_kv import MemoryKVStore
from .protocols import KVStore
from .sqlite_init import init_db
from .sqlite_kv import SqliteKVStore


async def create_kv_store(db_path: str) -> SqliteKVStore:
    """创建 SQLite KVStore

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        SqliteKVStore 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    await init_db(conn)

    return SqliteKVStore(conn)


__all__ = [
    "KVStore",
    "SqliteKVStore",
    "MemoryKVStore",
    "create_kv_store",
    "init_db",
]
