"""任务级锁 -- 同一任务的修改与计分串行化，不同任务互不阻塞"""

import asyncio


class TaskLocks:
    """task_id -> asyncio.Lock 的惰性映射"""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._guard = asyncio.Lock()

    async def get(self, task_id: str) -> asyncio.Lock:
        """获取 task 级别锁"""
        async with self._guard:
            lock = self._locks.get(task_id)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[task_id] = lock
            return lock

    async def discard(self, task_id: str) -> None:
        """任务删除后清理 lock，避免字典无限增长"""
        async with self._guard:
            lock = self._locks.get(task_id)
            if lock is not None and not lock.locked():
                self._locks.pop(task_id, None)
