"""TaskRegistry -- 任务定义的唯一权威来源

- 创建：随机短 ID + compare_and_set(absent) 分配，冲突时重试
- 编辑/删除：持有 task 级别锁，并以 revision 乐观并发（compare_and_set 原值）提交，
  多进程共享同一存储时由存储仲裁并发写入者
- 删除是 tombstone，resolve 仍可解析已删除任务
"""

import uuid
from datetime import UTC, datetime

import structlog

from .config import TASK_ID_MAX_ATTEMPTS
from .exceptions import (
    TaskConflictError,
    TaskDeletedError,
    TaskNotFoundError,
    TaskValidationError,
)
from .locks import TaskLocks
from .models import (
    AdminTaskSummary,
    Role,
    Task,
    TaskPatch,
    TaskSpec,
    TaskState,
    TaskSummary,
    validate_task_transition,
)
from .store.keys import TASK_PREFIX, task_key
from .store.protocols import KVStore

log = structlog.get_logger()

# revision 冲突时的最大重试次数
_MAX_REVISION_RETRIES = 5


def _new_task_id() -> str:
    return uuid.uuid4().hex[:8]


def validate_task_fields(
    name: str,
    flags: list[str],
    points: int,
) -> tuple[str, list[str]]:
    """校验任务字段，返回规整后的 (name, flags)

    flags 去重但保持原值（提交时精确匹配，不做规范化）。

    Raises:
        TaskValidationError: 名称为空、没有 flag、flag 为空白或分值为负
    """
    name = name.strip()
    if not name:
        raise TaskValidationError("Task name must not be empty")
    if not flags:
        raise TaskValidationError("Task must have at least one flag")
    unique_flags: list[str] = []
    for flag in flags:
        if not flag.strip():
            raise TaskValidationError("Flags must not be blank")
        if flag not in unique_flags:
            unique_flags.append(flag)
    if isinstance(points, bool) or points < 0:
        raise TaskValidationError("Task points must be a non-negative integer")
    return name, unique_flags


class TaskRegistry:
    """任务注册表"""

    def __init__(self, store: KVStore, locks: TaskLocks | None = None) -> None:
        self._store = store
        self._locks = locks or TaskLocks()

    @property
    def locks(self) -> TaskLocks:
        """与 SubmissionEngine 共享的 task 级别锁"""
        return self._locks

    async def create(self, spec: TaskSpec) -> str:
        """创建任务，直接进入 ACTIVE 状态

        Returns:
            新分配的 task_id

        Raises:
            TaskValidationError: 字段非法
        """
        name, flags = validate_task_fields(spec.name, spec.flags, spec.points)
        now = datetime.now(UTC)

        for attempt in range(1, TASK_ID_MAX_ATTEMPTS + 1):
            task_id = _new_task_id()
            task = Task(
                task_id=task_id,
                name=name,
                description=spec.description.strip(),
                flags=flags,
                points=spec.points,
                hidden=spec.hidden,
                state=TaskState.ACTIVE,
                created_at=now,
                updated_at=now,
            )
            if await self._store.compare_and_set(
                task_key(task_id), None, task.model_dump_json()
            ):
                log.info(
                    "task_created",
                    task_id=task_id,
                    points=task.points,
                    hidden=task.hidden,
                )
                return task_id
            log.warning("task_id_collision_retry", task_id=task_id, attempt=attempt)

        raise TaskConflictError("allocate task id")

    async def edit(self, task_id: str, patch: TaskPatch) -> Task:
        """部分更新未删除的任务

        Raises:
            TaskNotFoundError: 任务不存在
            TaskDeletedError: 任务已删除
            TaskValidationError: 更新后的字段非法
            TaskConflictError: revision 冲突重试耗尽
        """
        updates = patch.model_dump(exclude_none=True)
        # 锁外预检：未知或已删除的任务不登记锁
        _, current = await self._load(task_id)
        if current.is_deleted:
            raise TaskDeletedError(task_id)

        lock = await self._locks.get(task_id)
        async with lock:
            for attempt in range(1, _MAX_REVISION_RETRIES + 1):
                raw, task = await self._load(task_id)
                if task.is_deleted:
                    raise TaskDeletedError(task_id)

                merged = {**task.model_dump(), **updates}
                name, flags = validate_task_fields(
                    merged["name"], merged["flags"], merged["points"]
                )
                updated = task.model_copy(
                    update={
                        **updates,
                        "name": name,
                        "flags": flags,
                        "description": merged["description"].strip(),
                        "revision": task.revision + 1,
                        "updated_at": datetime.now(UTC),
                    }
                )
                if await self._store.compare_and_set(
                    task_key(task_id), raw, updated.model_dump_json()
                ):
                    log.info(
                        "task_edited",
                        task_id=task_id,
                        revision=updated.revision,
                        fields=sorted(updates),
                    )
                    return updated
                log.warning(
                    "task_revision_conflict_retry",
                    task_id=task_id,
                    attempt=attempt,
                )

        raise TaskConflictError("edit", task_id)

    async def delete(self, task_id: str) -> None:
        """删除任务（tombstone），对已删除任务幂等

        Raises:
            TaskNotFoundError: 任务不存在
            TaskConflictError: revision 冲突重试耗尽
        """
        await self._load(task_id)
        lock = await self._locks.get(task_id)
        async with lock:
            for attempt in range(1, _MAX_REVISION_RETRIES + 1):
                raw, task = await self._load(task_id)
                if task.is_deleted:
                    log.info("task_delete_noop", task_id=task_id)
                    break
                if not validate_task_transition(task.state, TaskState.DELETED):
                    raise TaskValidationError(
                        f"Cannot transition from {task.state} to DELETED"
                    )

                tombstone = task.model_copy(
                    update={
                        "state": TaskState.DELETED,
                        "revision": task.revision + 1,
                        "updated_at": datetime.now(UTC),
                    }
                )
                if await self._store.compare_and_set(
                    task_key(task_id), raw, tombstone.model_dump_json()
                ):
                    log.info("task_deleted", task_id=task_id)
                    break
                log.warning(
                    "task_revision_conflict_retry",
                    task_id=task_id,
                    attempt=attempt,
                )
            else:
                raise TaskConflictError("delete", task_id)

        await self._locks.discard(task_id)

    async def resolve(self, task_id: str) -> Task:
        """按 ID 解析任务，包括已删除任务（调用方检查 task.is_deleted）

        Raises:
            TaskNotFoundError: 任务不存在
        """
        _, task = await self._load(task_id)
        return task

    async def all_tasks(self) -> list[Task]:
        """所有任务记录（含隐藏和已删除）"""
        rows = await self._store.scan(TASK_PREFIX)
        return [Task.model_validate_json(value) for _, value in rows]

    async def list_tasks(
        self,
        role: Role,
        include_hidden: bool = False,
        include_deleted: bool = False,
        solved: frozenset[str] = frozenset(),
    ) -> list[TaskSummary]:
        """按可见性过滤的任务列表，按名称排序

        非管理员只能看到 ACTIVE 且非隐藏的任务，忽略 include_* 参数。
        管理员视图始终包含 DRAFT，按需包含隐藏/已删除任务。
        """
        is_admin = role == Role.ADMIN
        tasks = []
        for task in await self.all_tasks():
            if task.hidden and not (is_admin and include_hidden):
                continue
            if task.state == TaskState.DELETED and not (is_admin and include_deleted):
                continue
            if task.state == TaskState.DRAFT and not is_admin:
                continue
            tasks.append(task)
        tasks.sort(key=lambda t: (t.name, t.task_id))

        if is_admin:
            return [
                AdminTaskSummary(
                    task_id=t.task_id,
                    name=t.name,
                    description=t.description,
                    points=t.points,
                    solved=t.task_id in solved,
                    hidden=t.hidden,
                    state=t.state,
                    flags=t.flags,
                    revision=t.revision,
                )
                for t in tasks
            ]
        return [
            TaskSummary(
                task_id=t.task_id,
                name=t.name,
                description=t.description,
                points=t.points,
                solved=t.task_id in solved,
            )
            for t in tasks
        ]

    async def find_by_flag(self, candidate: str) -> Task | None:
        """在 ACTIVE 任务（含隐藏任务）中查找接受该 flag 的任务"""
        for task in await self.all_tasks():
            if task.state == TaskState.ACTIVE and task.accepts(candidate):
                return task
        return None

    async def _load(self, task_id: str) -> tuple[str, Task]:
        raw = await self._store.get(task_key(task_id))
        if raw is None:
            raise TaskNotFoundError(task_id)
        return raw, Task.model_validate_json(raw)
