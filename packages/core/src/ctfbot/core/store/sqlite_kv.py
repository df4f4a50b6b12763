"""KVStore SQLite 实现

单个 kv 表；每个写操作是一条语句 + 提交，语句本身在 SQLite 中原子执行。
同一连接上的写操作由 _write_lock 串行化，避免一个协程的 rollback
回滚掉另一个协程尚未提交的写入。
所有 aiosqlite 异常包装为 StorageUnavailableError。
"""

import asyncio

import aiosqlite

from ..exceptions import StorageUnavailableError


class SqliteKVStore:
    """KVStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn
        self._write_lock = asyncio.Lock()

    @property
    def conn(self) -> aiosqlite.Connection:
        return self._conn

    async def get(self, key: str) -> str | None:
        """读取 key，不存在返回 None"""
        try:
            cursor = await self._conn.execute(
                "SELECT value FROM kv WHERE key = ?",
                (key,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageUnavailableError("get", e) from e
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        """无条件覆盖写"""
        await self._write(
            "set",
            """
            INSERT INTO kv (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            (key, value),
        )

    async def compare_and_set(
        self,
        key: str,
        expected: str | None,
        new_value: str,
    ) -> bool:
        """原子比较并写入

        - expected 为 None：INSERT OR IGNORE，仅在 key 不存在时成功
        - 否则：UPDATE ... WHERE value = expected
        """
        if expected is None:
            rowcount = await self._write(
                "compare_and_set",
                "INSERT OR IGNORE INTO kv (key, value) VALUES (?, ?)",
                (key, new_value),
            )
        else:
            rowcount = await self._write(
                "compare_and_set",
                "UPDATE kv SET value = ? WHERE key = ? AND value = ?",
                (new_value, key, expected),
            )
        return rowcount == 1

    async def increment(self, key: str, delta: int) -> int:
        """原子自增计数器，返回新值"""
        async with self._write_lock:
            try:
                await self._conn.execute(
                    """
                    INSERT INTO kv (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE
                    SET value = CAST(value AS INTEGER) + ?
                    """,
                    (key, str(delta), delta),
                )
                cursor = await self._conn.execute(
                    "SELECT value FROM kv WHERE key = ?",
                    (key,),
                )
                row = await cursor.fetchone()
                await self._conn.commit()
            except aiosqlite.Error as e:
                await self._conn.rollback()
                raise StorageUnavailableError("increment", e) from e
        return int(row[0])

    async def scan(self, prefix: str) -> list[tuple[str, str]]:
        """按 key 字典序返回指定前缀下的所有 (key, value)"""
        try:
            cursor = await self._conn.execute(
                "SELECT key, value FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageUnavailableError("scan", e) from e
        return [(row[0], row[1]) for row in rows]

    async def close(self) -> None:
        await self._conn.close()

    async def _write(self, operation: str, sql: str, params: tuple) -> int:
        """执行单条写语句并提交，返回受影响行数"""
        async with self._write_lock:
            try:
                cursor = await self._conn.execute(sql, params)
                rowcount = cursor.rowcount
                await self._conn.commit()
            except aiosqlite.Error as e:
                await self._conn.rollback()
                raise StorageUnavailableError(operation, e) from e
        return rowcount
