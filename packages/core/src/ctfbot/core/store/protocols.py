"""Store Protocol 接口定义

定义核心与外部键值存储之间的窄接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol


class KVStore(Protocol):
    """原子键值存储接口

    所有值均为字符串（JSON 或十进制整数）。
    单 key 上的 compare_and_set / increment 必须原子执行，
    这是 Solve 唯一性与计分正确性的基础。
    """

    async def get(self, key: str) -> str | None:
        """读取 key，不存在返回 None"""
        ...

    async def set(self, key: str, value: str) -> None:
        """无条件覆盖写"""
        ...

    async def compare_and_set(
        self,
        key: str,
        expected: str | None,
        new_value: str,
    ) -> bool:
        """原子比较并写入

        expected 为 None 表示仅当 key 不存在时写入。

        Returns:
            True 如果写入成功，否则 False
        """
        ...

    async def increment(self, key: str, delta: int) -> int:
        """原子自增计数器（不存在时视为 0），返回新值"""
        ...

    async def scan(self, prefix: str) -> list[tuple[str, str]]:
        """按 key 字典序返回指定前缀下的所有 (key, value)"""
        ...

    async def close(self) -> None:
        """释放底层连接"""
        ...
