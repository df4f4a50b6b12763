"""SubmissionEngine -- flag 校验与 Solve 写入

正确性关键区只有一处：compare_and_set(solve:<user>:<task>, absent, solve)。
分值在 task 级别锁内读取，编辑操作持有同一把锁，因此读取与写入之间不会插入编辑。
通知在锁释放、Solve 持久化之后发出。
"""

from datetime import UTC, datetime

import structlog
from ulid import ULID

from .exceptions import StorageUnavailableError, TaskNotFoundError
from .models import (
    Actor,
    Notification,
    NotificationType,
    Solve,
    SolvedPayload,
    SubmitOutcome,
    SubmitResult,
    Task,
)
from .notifier import Notifier, NullNotifier
from .registry import TaskRegistry
from .store.keys import SOLVE_PREFIX, score_key, solve_key, user_solve_prefix
from .store.protocols import KVStore

log = structlog.get_logger()


async def list_solves(store: KVStore, user_id: str | None = None) -> list[Solve]:
    """读取 Solve 记录；指定 user_id 时只读取该用户的

    前缀扫描会同时命中以 "<user_id>:" 开头的其他用户，按记录中的 user_id 精确过滤。
    """
    if user_id is None:
        rows = await store.scan(SOLVE_PREFIX)
        return [Solve.model_validate_json(value) for _, value in rows]

    rows = await store.scan(user_solve_prefix(user_id))
    solves = [Solve.model_validate_json(value) for _, value in rows]
    return [s for s in solves if s.user_id == user_id]


def _log_outcome(actor: Actor, task_id: str | None, outcome: SubmitOutcome) -> None:
    # 不记录 flag 内容
    log.info(
        "flag_submitted",
        user_id=actor.user_id,
        task_id=task_id,
        outcome=outcome.value,
    )


class SubmissionEngine:
    """flag 提交引擎"""

    def __init__(
        self,
        store: KVStore,
        registry: TaskRegistry,
        notifier: Notifier | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._notifier = notifier or NullNotifier()

    async def submit(
        self,
        actor: Actor,
        task_id: str,
        candidate: str,
    ) -> SubmitResult:
        """提交指定任务的 flag

        Raises:
            StorageUnavailableError: 存储不可达（绝不作为 INCORRECT 返回）
        """
        # 无锁预检：未知 ID 不创建锁
        try:
            await self._registry.resolve(task_id)
        except TaskNotFoundError:
            _log_outcome(actor, task_id, SubmitOutcome.TASK_NOT_FOUND)
            return SubmitResult(outcome=SubmitOutcome.TASK_NOT_FOUND, task_id=task_id)

        lock = await self._registry.locks.get(task_id)
        async with lock:
            task = await self._registry.resolve(task_id)
            result, solve = await self._record(actor, task, candidate)

        if solve is not None:
            self._announce(actor, task, solve)
        return result

    async def submit_flag(self, actor: Actor, candidate: str) -> SubmitResult:
        """不指定任务提交 flag，在所有 ACTIVE 任务（含隐藏任务）中查找"""
        task = await self._registry.find_by_flag(candidate)
        if task is None:
            _log_outcome(actor, None, SubmitOutcome.INCORRECT)
            return SubmitResult(outcome=SubmitOutcome.INCORRECT)
        return await self.submit(actor, task.task_id, candidate)

    async def solves_for_user(self, user_id: str) -> list[Solve]:
        return await list_solves(self._store, user_id)

    async def all_solves(self) -> list[Solve]:
        return await list_solves(self._store)

    async def solved_task_ids(self, user_id: str) -> frozenset[str]:
        return frozenset(s.task_id for s in await self.solves_for_user(user_id))

    async def _record(
        self,
        actor: Actor,
        task: Task,
        candidate: str,
    ) -> tuple[SubmitResult, Solve | None]:
        """在 task 锁内执行：校验 flag 并写入 Solve"""
        if task.is_deleted:
            outcome = SubmitOutcome.TASK_DELETED
        elif not task.accepts(candidate):
            outcome = SubmitOutcome.INCORRECT
        else:
            outcome = None

        if outcome is not None:
            _log_outcome(actor, task.task_id, outcome)
            return SubmitResult(
                outcome=outcome,
                task_id=task.task_id,
                task_name=task.name,
            ), None

        solve = Solve(
            solve_id=str(ULID()),
            user_id=actor.user_id,
            task_id=task.task_id,
            points=task.points,
            task_revision=task.revision,
            solved_at=datetime.now(UTC),
        )
        key = solve_key(actor.user_id, task.task_id)
        if not await self._store.compare_and_set(key, None, solve.model_dump_json()):
            existing = await self._store.get(key)
            solved_at = Solve.model_validate_json(existing).solved_at if existing else None
            _log_outcome(actor, task.task_id, SubmitOutcome.ALREADY_SOLVED)
            return SubmitResult(
                outcome=SubmitOutcome.ALREADY_SOLVED,
                task_id=task.task_id,
                task_name=task.name,
                solved_at=solved_at,
            ), None

        log.info(
            "solve_recorded",
            user_id=actor.user_id,
            task_id=task.task_id,
            points=solve.points,
            solve_id=solve.solve_id,
        )

        try:
            await self._store.increment(score_key(actor.user_id), solve.points)
        except StorageUnavailableError as e:
            # 总分缓存是派生值，可通过 rebuild-scores 重建
            log.warning(
                "score_cache_update_failed",
                user_id=actor.user_id,
                task_id=task.task_id,
                error=str(e),
            )

        return SubmitResult(
            outcome=SubmitOutcome.CORRECT,
            task_id=task.task_id,
            task_name=task.name,
            points_awarded=solve.points,
            solved_at=solve.solved_at,
        ), solve

    def _announce(self, actor: Actor, task: Task, solve: Solve) -> None:
        notification_type = (
            NotificationType.HIDDEN_SOLVED if task.hidden else NotificationType.SOLVED
        )
        payload = SolvedPayload(
            task_id=task.task_id,
            task_name=task.name,
            points=solve.points,
            display_name=actor.display_name,
            solved_at=solve.solved_at,
        )
        self._notifier.announce(
            Notification(
                type=notification_type,
                user_id=actor.user_id,
                payload=payload.model_dump(),
            )
        )
