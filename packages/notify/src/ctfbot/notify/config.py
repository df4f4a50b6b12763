"""NotifyConfig -- 通知投递配置加载

从环境变量加载配置；未配置 webhook_url 时只使用日志与 SSE 投递。
"""

import os

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()


class NotifyConfig(BaseModel):
    """Notify 包配置 -- 从环境变量加载

    环境变量:
        CTFBOT_NOTIFY_WEBHOOK_URL: 运营通知 Webhook 地址（为空表示不启用）
        CTFBOT_NOTIFY_WEBHOOK_TOKEN: Webhook Bearer token
        CTFBOT_NOTIFY_TIMEOUT_S: 投递超时（秒，默认 10）
        CTFBOT_NOTIFY_QUEUE_MAXSIZE: 待投递队列上限（默认 1000）
        CTFBOT_NOTIFY_RATE: 全局投递速率上限（条/秒，默认 30）
    """

    webhook_url: str = Field(
        default="",
        description="运营通知 Webhook 地址",
    )
    webhook_token: SecretStr = Field(
        default=SecretStr(""),
        description="Webhook Bearer token",
    )
    timeout_s: int = Field(
        default=10,
        ge=1,
        description="单次投递超时（秒）",
    )
    queue_maxsize: int = Field(
        default=1000,
        ge=1,
        description="待投递队列上限，满时丢弃新通知",
    )
    rate_per_second: int = Field(
        default=30,
        ge=1,
        description="全局投递速率上限（条/秒）",
    )


def _int_env(env_var: str, field: str, fallback: int, kwargs: dict) -> None:
    if val := os.environ.get(env_var):
        try:
            kwargs[field] = int(val)
        except ValueError:
            log.warning(
                "invalid_notify_config",
                env_var=env_var,
                value=val,
                fallback=fallback,
            )
            # 使用默认值，不阻塞启动


def load_notify_config() -> NotifyConfig:
    """从环境变量加载 Notify 配置

    Returns:
        NotifyConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("CTFBOT_NOTIFY_WEBHOOK_URL"):
        kwargs["webhook_url"] = val

    if val := os.environ.get("CTFBOT_NOTIFY_WEBHOOK_TOKEN"):
        kwargs["webhook_token"] = SecretStr(val)

    _int_env("CTFBOT_NOTIFY_TIMEOUT_S", "timeout_s", 10, kwargs)
    _int_env("CTFBOT_NOTIFY_QUEUE_MAXSIZE", "queue_maxsize", 1000, kwargs)
    _int_env("CTFBOT_NOTIFY_RATE", "rate_per_second", 30, kwargs)

    return NotifyConfig(**kwargs)
