"""Key 空间约定

task:<task_id>               任务记录（JSON）
solve:<user_id>:<task_id>    Solve 记录（JSON），唯一性由 compare_and_set 保证
score:<user_id>              用户总分缓存（派生值，可由 Solve 集合重建）
user:<user_id>               用户目录（广播收件人）
"""

TASK_PREFIX = "task:"
SOLVE_PREFIX = "solve:"
SCORE_PREFIX = "score:"
USER_PREFIX = "user:"


def task_key(task_id: str) -> str:
    return f"{TASK_PREFIX}{task_id}"


def solve_key(user_id: str, task_id: str) -> str:
    return f"{SOLVE_PREFIX}{user_id}:{task_id}"


def user_solve_prefix(user_id: str) -> str:
    return f"{SOLVE_PREFIX}{user_id}:"


def score_key(user_id: str) -> str:
    return f"{SCORE_PREFIX}{user_id}"


def user_key(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def strip_prefix(key: str, prefix: str) -> str:
    return key[len(prefix):] if key.startswith(prefix) else key
