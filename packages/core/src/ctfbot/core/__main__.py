"""CLI 入口模块 -- python -m ctfbot.core <command>

支持的命令：
  rebuild-scores  以 Solve 集合重建 score:<user> 缓存
  board           打印当前排行榜（不含测试者/管理员）
"""

import asyncio
import sys

from .config import get_db_path, load_event_config


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m ctfbot.core <command>")
        print("命令:")
        print("  rebuild-scores  以 Solve 集合重建总分缓存")
        print("  board           打印当前排行榜")
        sys.exit(1)

    command = sys.argv[1]

    if command == "rebuild-scores":
        asyncio.run(rebuild_scores())
    elif command == "board":
        asyncio.run(print_board())
    else:
        print(f"未知命令: {command}")
        print("可用命令: rebuild-scores, board")
        sys.exit(1)


async def rebuild_scores() -> None:
    """执行总分缓存重建"""
    from .scoreboard import Scoreboard
    from .store import create_kv_store

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")
    print("开始重建总分缓存...")

    store = await create_kv_store(db_path)
    try:
        fixed = await Scoreboard(store).reconcile_cache()
        print(f"重建完成，修正 {fixed} 条缓存")
    finally:
        await store.close()


async def print_board() -> None:
    """打印排行榜"""
    from .scoreboard import Scoreboard
    from .store import create_kv_store

    config = load_event_config()
    store = await create_kv_store(get_db_path())
    try:
        entries = await Scoreboard(store).rank(
            exclude=config.tester_ids | config.admin_ids
        )
    finally:
        await store.close()

    if not entries:
        print("暂无得分")
        return
    for entry in entries:
        name = entry.display_name or entry.user_id
        print(f"{entry.position:>3}. {name} -- {entry.total}")


if __name__ == "__main__":
    main()
