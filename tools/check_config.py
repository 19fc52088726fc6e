#!/usr/bin/env python3
"""
检查 UnwrapCommands 配置：
- 打印配置 lint 结果
- 用示例玩家/物品展开每条命令，检查是否能通过安全校验
"""
import argparse
import random
import sys
import time
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from unwrap_commands.reactor.config import ReactorConfig
from unwrap_commands.reactor.errors import ConfigError
from unwrap_commands.reactor.placeholders import PlaceholderEngine, iter_placeholders
from unwrap_commands.reactor.safety import is_safe
from unwrap_commands.schemas.event import Actor, Position, TriggerItem


SAMPLE_ACTOR = Actor(actor_id=76561198000000001, display_name="SamplePlayer", position=Position(0.0, 0.0, 0.0))


def check(path: Path) -> int:
    """返回发现的问题数"""
    try:
        cfg = ReactorConfig.from_yaml(path)
    except ConfigError as e:
        print(f"✗ {e}")
        return 1

    problems = 0
    print(f"config version: {cfg.version or '<none>'}, profiles: {len(cfg.profiles)}")
    for issue in cfg.lint():
        print(f"  ! {issue}")
        problems += 1

    engine = PlaceholderEngine(random.Random(0), world_size=cfg.world_size)
    now = time.time()
    for idx, profile in enumerate(cfg.profiles):
        item = TriggerItem(
            shortname=profile.item_shortname,
            skin_id=profile.match_skin_id,
            custom_name=profile.match_display_name or None,
            default_name=profile.item_shortname,
        )
        print(f"[{idx}] {profile.item_shortname} mode={profile.selection_mode.value} cooldown={profile.cooldown_seconds}s")
        for action in profile.actions:
            expanded = engine.expand(action.command, SAMPLE_ACTOR, item, now=now)
            used = ", ".join(iter_placeholders(action.command)) or "-"
            if is_safe(expanded):
                print(f"    ✓ [{action.channel.value}] {expanded}  (placeholders: {used})")
            else:
                print(f"    ✗ [{action.channel.value}] {expanded}  <- blocked by safety validator")
                problems += 1
    return problems


def main() -> None:
    parser = argparse.ArgumentParser(description="UnwrapCommands 配置检查")
    parser.add_argument(
        "-c", "--config",
        default="config/unwrap_commands.yaml",
        help="配置文件路径（default: config/unwrap_commands.yaml）",
    )
    args = parser.parse_args()
    problems = check(Path(args.config))
    sys.exit(1 if problems else 0)


if __name__ == "__main__":
    main()
