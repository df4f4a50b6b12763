"""配置模块 -- 可通过环境变量覆盖

包含数据库路径、比赛时间窗口、管理员/测试者名单等配置。
EventConfig 在进程启动时构建一次，之后只读，显式传入各调用点。
"""

import json
import os
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

log = structlog.get_logger()


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("CTFBOT_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "CTFBOT_DB_PATH",
        str(_get_base_dir() / "sqlite" / "ctfbot.db"),
    )


def get_config_path() -> Path:
    """获取比赛配置 JSON 文件路径"""
    return Path(os.environ.get("CTFBOT_CONFIG", "config.json"))


# 新建任务未指定分值时的默认分值（每个 flag 1 分）
DEFAULT_TASK_POINTS: int = int(os.environ.get("CTFBOT_DEFAULT_TASK_POINTS", "1"))

# 任务 ID 冲突时的最大重试次数
TASK_ID_MAX_ATTEMPTS: int = 16

# SSE 心跳间隔（秒）
SSE_HEARTBEAT_INTERVAL: int = int(
    os.environ.get("CTFBOT_SSE_HEARTBEAT_INTERVAL", "15")
)


class EventConfig(BaseModel):
    """比赛配置 -- 不可变

    JSON 文件字段（兼容旧配置命名）:
        event_start / event_end: 比赛起止时间（epoch 秒）
        test_group: 测试者 ID 列表（不受时间窗口限制）
        admin_group: 管理员 ID 列表
        notify_group: 运营通知目标列表
    """

    model_config = ConfigDict(frozen=True)

    event_start: int = Field(default=0, ge=0, description="比赛开始时间（epoch 秒）")
    event_end: int = Field(default=0, ge=0, description="比赛结束时间（epoch 秒）")
    tester_ids: frozenset[str] = Field(
        default_factory=frozenset,
        description="测试者 ID 集合",
    )
    admin_ids: frozenset[str] = Field(
        default_factory=frozenset,
        description="管理员 ID 集合",
    )
    notify_targets: tuple[str, ...] = Field(
        default=(),
        description="运营通知目标（由 transport 层解释）",
    )


def _id_set(values) -> frozenset[str]:
    return frozenset(str(v).strip() for v in values if str(v).strip())


def _split_env_list(value: str) -> frozenset[str]:
    return _id_set(value.split(","))


def load_event_config(path: str | Path | None = None) -> EventConfig:
    """加载比赛配置：先读 JSON 文件（如存在），再应用环境变量覆盖

    环境变量映射:
        CTFBOT_EVENT_START -> event_start
        CTFBOT_EVENT_END -> event_end
        CTFBOT_ADMINS -> admin_ids（逗号分隔）
        CTFBOT_TESTERS -> tester_ids（逗号分隔）

    Returns:
        EventConfig 实例
    """
    config_path = Path(path) if path is not None else get_config_path()
    kwargs: dict = {}

    if config_path.exists():
        data = json.loads(config_path.read_text(encoding="utf-8"))
        if "event_start" in data:
            kwargs["event_start"] = int(data["event_start"])
        if "event_end" in data:
            kwargs["event_end"] = int(data["event_end"])
        kwargs["tester_ids"] = _id_set(data.get("test_group", []))
        kwargs["admin_ids"] = _id_set(data.get("admin_group", []))
        kwargs["notify_targets"] = tuple(
            str(t) for t in data.get("notify_group", [])
        )
    else:
        log.info("event_config_file_missing", path=str(config_path))

    for env_var, field in (
        ("CTFBOT_EVENT_START", "event_start"),
        ("CTFBOT_EVENT_END", "event_end"),
    ):
        if val := os.environ.get(env_var):
            try:
                kwargs[field] = int(val)
            except ValueError:
                log.warning(
                    "invalid_window_config",
                    env_var=env_var,
                    value=val,
                )
                # 忽略非法值，不阻塞启动

    if val := os.environ.get("CTFBOT_ADMINS"):
        kwargs["admin_ids"] = _split_env_list(val)

    if val := os.environ.get("CTFBOT_TESTERS"):
        kwargs["tester_ids"] = _split_env_list(val)

    return EventConfig(**kwargs)
