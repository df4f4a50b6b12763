"""KVStore 内存实现

单进程事件循环内使用；每个方法在返回前没有 await 点，因此天然原子。
"""


class MemoryKVStore:
    """KVStore 的内存实现"""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def compare_and_set(
        self,
        key: str,
        expected: str | None,
        new_value: str,
    ) -> bool:
        if self._data.get(key) != expected:
            return False
        self._data[key] = new_value
        return True

    async def increment(self, key: str, delta: int) -> int:
        value = int(self._data.get(key, "0")) + delta
        self._data[key] = str(value)
        return value

    async def scan(self, prefix: str) -> list[tuple[str, str]]:
        return sorted(
            (key, value) for key, value in self._data.items() if key.startswith(prefix)
        )

    async def close(self) -> None:
        self._data.clear()
