"""管理员聊天文本格式 <-> TaskSpec 转换

格式（一条消息，至少 3 行）：
    1. 名称（可选 "hidden:" 前缀，区分大小写，转换为 hidden=True）
    2. 逗号分隔的 flag 列表，每个 flag 去除首尾空白
    3+. 描述；可选的最后一行 "points: N" 指定分值

文本格式无法表示含 "," 或首尾空白的 flag：这类任务经文本往返后 flag 会被拆分或裁剪，
需要精确保留时使用结构化的 TaskSpec / TaskPatch。
"""

from .config import DEFAULT_TASK_POINTS
from .exceptions import TaskValidationError
from .models import Task, TaskSpec

HIDDEN_PREFIX = "hidden:"
POINTS_PREFIX = "points:"


def parse_task_text(text: str, default_points: int = DEFAULT_TASK_POINTS) -> TaskSpec:
    """解析管理员发送的任务文本

    Raises:
        TaskValidationError: 行数不足或分值格式错误
    """
    lines = [line.strip() for line in text.strip().splitlines()]
    if len(lines) < 3:
        raise TaskValidationError(
            "Task text needs 3 or more lines: name, flags, description"
        )

    name = lines[0]
    hidden = False
    if name.startswith(HIDDEN_PREFIX):
        name = name[len(HIDDEN_PREFIX):].strip()
        hidden = True

    flags = [flag.strip() for flag in lines[1].split(",") if flag.strip()]

    body = lines[2:]
    points = default_points
    if len(body) > 1 and body[-1].lower().startswith(POINTS_PREFIX):
        raw_points = body.pop()[len(POINTS_PREFIX):].strip()
        try:
            points = int(raw_points)
        except ValueError:
            raise TaskValidationError(f"Invalid points value: {raw_points}") from None

    return TaskSpec(
        name=name,
        flags=flags,
        description="\n".join(body).strip(),
        points=points,
        hidden=hidden,
    )


def format_task_text(task: Task) -> str:
    """将任务渲染为可编辑的文本格式（parse_task_text 的逆操作）

    flag 含 "," 或首尾空白时渲染结果不可无损解析回原任务，见模块说明。
    """
    prefix = HIDDEN_PREFIX if task.hidden else ""
    lines = [
        f"{prefix}{task.name}",
        ",".join(task.flags),
        task.description,
        f"{POINTS_PREFIX} {task.points}",
    ]
    return "\n".join(lines)
