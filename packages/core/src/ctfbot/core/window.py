"""Window Gate -- 比赛时间窗口判定

纯函数：结果只取决于配置、当前时间和角色。
测试者与管理员不受时间窗口限制。
"""

import time

from .config import EventConfig
from .exceptions import WindowClosedError
from .models.enums import Role, WindowDecision

# 不受时间窗口限制的角色
BYPASS_ROLES: frozenset[Role] = frozenset({Role.TESTER, Role.ADMIN})


class WindowGate:
    """比赛时间窗口判定器"""

    def __init__(self, config: EventConfig) -> None:
        self._config = config

    def decide(self, now: float, role: Role) -> WindowDecision:
        """判定当前时刻该角色能否进行玩家操作

        窗口为开区间 (event_start, event_end)。

        Args:
            now: 当前时间（epoch 秒）
            role: 请求者角色

        Returns:
            WindowDecision
        """
        if role in BYPASS_ROLES:
            return WindowDecision.OPEN
        if now <= self._config.event_start:
            return WindowDecision.NOT_STARTED
        if now >= self._config.event_end:
            return WindowDecision.ENDED
        return WindowDecision.OPEN

    def require_open(self, role: Role, now: float | None = None) -> None:
        """要求窗口开放

        Raises:
            WindowClosedError: 窗口未开始或已结束
        """
        decision = self.decide(time.time() if now is None else now, role)
        if decision != WindowDecision.OPEN:
            raise WindowClosedError(decision.value)
