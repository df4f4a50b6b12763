"""角色解析 -- 每次请求从静态名单计算一次

管理员名单优先于测试者名单。
"""

from .config import EventConfig
from .exceptions import PermissionDeniedError
from .models.enums import Role


def resolve_role(config: EventConfig, user_id: str) -> Role:
    """根据配置名单计算用户角色"""
    if user_id in config.admin_ids:
        return Role.ADMIN
    if user_id in config.tester_ids:
        return Role.TESTER
    return Role.PLAYER


def require_admin(config: EventConfig, user_id: str, operation: str) -> None:
    """管理操作的权限检查

    Raises:
        PermissionDeniedError: 用户不是管理员
    """
    if resolve_role(config, user_id) != Role.ADMIN:
        raise PermissionDeniedError(user_id, operation)
