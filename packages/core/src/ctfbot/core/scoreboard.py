"""Scoreboard -- 基于 Solve 集合的只读排名投影

排序：总分降序 -> 达到当前总分的时间升序（先达到者靠前）-> user_id。
score:<user> 缓存只是优化，rebuild 以 Solve 集合为准。
"""

import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

import structlog

from .models import ScoreEntry, Solve, UserRank
from .store.keys import SCORE_PREFIX, score_key, strip_prefix
from .store.protocols import KVStore
from .submission import list_solves
from .users import UserDirectory

log = structlog.get_logger()


@dataclass
class Tally:
    """单个用户的累计结果"""

    user_id: str
    total: int = 0
    solve_count: int = 0
    reached_at: datetime | None = None

    def sort_key(self) -> tuple:
        # reached_at 为 None 仅出现在 0 分用户上，排在同分用户之后
        reached = self.reached_at.timestamp() if self.reached_at else float("inf")
        return (-self.total, reached, self.user_id)


def apply_solve(tallies: dict[str, Tally], solve: Solve) -> None:
    """将单个 Solve 计入累计表（就地修改）

    调用方需按 solved_at 顺序应用；0 分 Solve 不改变达到时间。
    """
    tally = tallies.setdefault(solve.user_id, Tally(user_id=solve.user_id))
    tally.total += solve.points
    tally.solve_count += 1
    if solve.points > 0 or tally.reached_at is None:
        tally.reached_at = solve.solved_at


def tally_solves(
    solves: Iterable[Solve],
    as_of: datetime | None = None,
    exclude: Iterable[str] = (),
) -> list[Tally]:
    """累计 Solve 并排序"""
    excluded = set(exclude)
    tallies: dict[str, Tally] = {}
    for solve in sorted(solves, key=lambda s: (s.solved_at, s.solve_id)):
        if solve.user_id in excluded:
            continue
        if as_of is not None and solve.solved_at > as_of:
            continue
        apply_solve(tallies, solve)
    return sorted(tallies.values(), key=Tally.sort_key)


class Scoreboard:
    """排行榜"""

    def __init__(self, store: KVStore, users: UserDirectory | None = None) -> None:
        self._store = store
        self._users = users or UserDirectory(store)

    async def rank(
        self,
        as_of: datetime | None = None,
        exclude: Iterable[str] = (),
    ) -> list[ScoreEntry]:
        """完整排名

        Args:
            as_of: 只统计 solved_at <= as_of 的 Solve
            exclude: 不参与排名的用户（测试者/管理员）
        """
        tallies = tally_solves(await list_solves(self._store), as_of, exclude)
        names = await self._users.display_names()
        return [
            ScoreEntry(
                position=position,
                user_id=t.user_id,
                display_name=names.get(t.user_id, ""),
                total=t.total,
                solve_count=t.solve_count,
                reached_at=t.reached_at,
            )
            for position, t in enumerate(tallies, start=1)
        ]

    async def user_rank(
        self,
        user_id: str,
        exclude: Iterable[str] = (),
    ) -> UserRank:
        """单个用户的名次：统计排在其前面的用户数，不对全表排序

        被排除的用户返回 position=None；没有 Solve 的用户排在所有已排名用户之后。
        """
        excluded = set(exclude)
        tallies: dict[str, Tally] = {}
        for solve in sorted(
            await list_solves(self._store),
            key=lambda s: (s.solved_at, s.solve_id),
        ):
            apply_solve(tallies, solve)

        mine = tallies.get(user_id, Tally(user_id=user_id))
        if user_id in excluded:
            return UserRank(position=None, total=mine.total, solve_count=mine.solve_count)

        others = [t for uid, t in tallies.items() if uid not in excluded and uid != user_id]
        if mine.solve_count == 0:
            return UserRank(position=len(others) + 1, total=0, solve_count=0)

        my_key = mine.sort_key()
        ahead = sum(1 for t in others if t.sort_key() < my_key)
        return UserRank(position=ahead + 1, total=mine.total, solve_count=mine.solve_count)

    async def reconcile_cache(self) -> int:
        """以 Solve 集合重建所有 score:<user> 缓存

        Returns:
            修正的缓存条目数
        """
        start_time = time.monotonic()
        solves = await list_solves(self._store)
        totals: dict[str, int] = {}
        for solve in solves:
            totals[solve.user_id] = totals.get(solve.user_id, 0) + solve.points

        # 存在缓存但已没有 Solve 的用户归零
        for key, _ in await self._store.scan(SCORE_PREFIX):
            totals.setdefault(strip_prefix(key, SCORE_PREFIX), 0)

        fixed = 0
        for user_id, total in sorted(totals.items()):
            key = score_key(user_id)
            cached = await self._store.get(key)
            if cached is None or int(cached) != total:
                await self._store.set(key, str(total))
                fixed += 1
                log.warning(
                    "score_cache_corrected",
                    user_id=user_id,
                    cached=cached,
                    total=total,
                )

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        log.info(
            "score_cache_rebuilt",
            solve_count=len(solves),
            user_count=len(totals),
            fixed=fixed,
            elapsed_ms=elapsed_ms,
        )
        return fixed
