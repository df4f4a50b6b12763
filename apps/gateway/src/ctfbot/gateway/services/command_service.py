"""CommandService -- 每个命令一个处理函数

处理流程：记录用户 -> 计算角色 -> 时间窗口（玩家操作）或管理员检查（管理操作）
-> Registry / SubmissionEngine / Scoreboard -> Store -> Notifier（提交后，非阻塞）。
所有异常均为 CtfBotError 子类，由路由层的异常处理器翻译为 HTTP 响应。
"""

import time

import structlog
from ctfbot.core.config import EventConfig
from ctfbot.core.exceptions import TaskNotFoundError
from ctfbot.core.models import (
    Actor,
    AdminTaskSummary,
    BroadcastPayload,
    Notification,
    NotificationType,
    QuestionPayload,
    Role,
    ScoreEntry,
    SubmitResult,
    Task,
    TaskPatch,
    TaskSpec,
    TaskSummary,
    UserRank,
)
from ctfbot.core.notifier import Notifier, NullNotifier
from ctfbot.core.registry import TaskRegistry
from ctfbot.core.roles import require_admin, resolve_role
from ctfbot.core.scoreboard import Scoreboard
from ctfbot.core.store.protocols import KVStore
from ctfbot.core.submission import SubmissionEngine
from ctfbot.core.textformat import parse_task_text
from ctfbot.core.users import UserDirectory
from ctfbot.core.window import WindowGate

log = structlog.get_logger()


class CommandService:
    """命令层业务服务"""

    def __init__(
        self,
        store: KVStore,
        config: EventConfig,
        notifier: Notifier | None = None,
        clock=time.time,
    ) -> None:
        """
        Args:
            store: KVStore 实例
            config: 比赛配置（不可变）
            notifier: 通知投递器，None 表示不投递
            clock: 返回当前 epoch 秒的函数（测试注入）
        """
        self._config = config
        self._notifier = notifier or NullNotifier()
        self._clock = clock
        self._gate = WindowGate(config)
        self.users = UserDirectory(store)
        self.registry = TaskRegistry(store)
        self.engine = SubmissionEngine(store, self.registry, self._notifier)
        self.scoreboard = Scoreboard(store, self.users)

    @property
    def config(self) -> EventConfig:
        return self._config

    @property
    def unranked(self) -> frozenset[str]:
        """不参与公开排名的用户（测试者与管理员）"""
        return self._config.tester_ids | self._config.admin_ids

    # ============================================================
    # 玩家操作（除 contact 外受时间窗口限制，测试者与管理员豁免）
    # ============================================================

    async def list_tasks(
        self,
        actor: Actor,
        include_solved: bool = True,
    ) -> list[TaskSummary]:
        """可见任务列表；include_solved=False 时隐藏已解出的任务"""
        role = await self._enter_player(actor)
        solved = await self.engine.solved_task_ids(actor.user_id)
        tasks = await self.registry.list_tasks(role, solved=solved)
        if not include_solved:
            tasks = [t for t in tasks if not t.solved]
        return tasks

    async def submit(self, actor: Actor, task_id: str, flag: str) -> SubmitResult:
        await self._enter_player(actor)
        return await self.engine.submit(actor, task_id, flag)

    async def submit_flag(self, actor: Actor, flag: str) -> SubmitResult:
        await self._enter_player(actor)
        return await self.engine.submit_flag(actor, flag)

    async def score(self, actor: Actor) -> UserRank:
        """用户总分与名次；测试者与管理员 position 为 None"""
        await self._enter_player(actor)
        return await self.scoreboard.user_rank(actor.user_id, exclude=self.unranked)

    async def contact(
        self,
        actor: Actor,
        text: str,
        task_id: str | None = None,
    ) -> None:
        """向组织者发送问题；不受时间窗口限制，比赛前后也可联系组织者

        Raises:
            TaskNotFoundError: task_id 不存在或不可见
        """
        role = await self._enter(actor)
        task_name = None
        if task_id is not None:
            task = await self.registry.resolve(task_id)
            if role != Role.ADMIN and (task.hidden or task.is_deleted):
                # 不泄露隐藏/已删除任务的存在
                raise TaskNotFoundError(task_id)
            task_name = task.name

        payload = QuestionPayload(
            text=text,
            display_name=actor.display_name,
            task_id=task_id,
            task_name=task_name,
        )
        self._notifier.announce(
            Notification(
                type=NotificationType.QUESTION,
                user_id=actor.user_id,
                payload=payload.model_dump(),
            )
        )
        log.info("contact_forwarded", user_id=actor.user_id, task_id=task_id)

    # ============================================================
    # 管理操作（不受时间窗口限制）
    # ============================================================

    async def board(self, admin: Actor) -> list[ScoreEntry]:
        await self._enter_admin(admin, "view the scoreboard")
        return await self.scoreboard.rank(exclude=self.unranked)

    async def create_task(self, admin: Actor, spec: TaskSpec) -> str:
        await self._enter_admin(admin, "create tasks")
        return await self.registry.create(spec)

    async def create_task_from_text(self, admin: Actor, text: str) -> str:
        """以管理员聊天文本格式创建任务"""
        await self._enter_admin(admin, "create tasks")
        return await self.registry.create(parse_task_text(text))

    async def edit_task(self, admin: Actor, task_id: str, patch: TaskPatch) -> Task:
        await self._enter_admin(admin, "edit tasks")
        return await self.registry.edit(task_id, patch)

    async def delete_task(self, admin: Actor, task_id: str) -> None:
        await self._enter_admin(admin, "delete tasks")
        await self.registry.delete(task_id)

    async def list_all_tasks(
        self,
        admin: Actor,
        include_deleted: bool = False,
    ) -> list[AdminTaskSummary]:
        """管理员任务列表（含隐藏任务与 flag）"""
        await self._enter_admin(admin, "list all tasks")
        return await self.registry.list_tasks(
            Role.ADMIN,
            include_hidden=True,
            include_deleted=include_deleted,
        )

    async def get_task(self, admin: Actor, task_id: str) -> Task:
        """读取任务完整记录（含已删除任务）"""
        await self._enter_admin(admin, "read tasks")
        return await self.registry.resolve(task_id)

    async def broadcast(self, admin: Actor, text: str) -> list[str]:
        """向所有与 bot 交互过的用户广播消息

        Returns:
            收件人 user_id 列表
        """
        await self._enter_admin(admin, "broadcast")
        recipients = await self.users.user_ids()
        payload = BroadcastPayload(text=text, recipients=recipients)
        self._notifier.announce(
            Notification(
                type=NotificationType.BROADCAST,
                user_id=admin.user_id,
                payload=payload.model_dump(),
            )
        )
        log.info("broadcast_queued", user_id=admin.user_id, recipients=len(recipients))
        return recipients

    # ============================================================
    # 内部
    # ============================================================

    async def _enter(self, actor: Actor) -> Role:
        structlog.contextvars.bind_contextvars(user_id=actor.user_id)
        await self.users.touch(actor)
        return resolve_role(self._config, actor.user_id)

    async def _enter_player(self, actor: Actor) -> Role:
        role = await self._enter(actor)
        self._gate.require_open(role, self._clock())
        return role

    async def _enter_admin(self, actor: Actor, operation: str) -> None:
        await self._enter(actor)
        require_admin(self._config, actor.user_id, operation)
