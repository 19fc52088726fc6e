import argparse
import logging
import os
import random

from dotenv import load_dotenv

from unwrap_commands.host import LoggingCommandExecutor, LoggingMessenger
from unwrap_commands.logging_config import setup_logging
from unwrap_commands.permissions import PermissionRegistry
from unwrap_commands.plugin import UnwrapCommandsPlugin
from unwrap_commands.schemas.event import Actor, Position, TriggerItem


logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="UnwrapCommands 离线演示")
    parser.add_argument(
        "-c", "--config",
        default=os.getenv("UNWRAP_CONFIG", "config/unwrap_commands.yaml"),
        help="配置文件路径（default: config/unwrap_commands.yaml）",
    )
    parser.add_argument(
        "-d", "--data",
        default=os.getenv("UNWRAP_DATA", "data/unwrap_commands.json"),
        help="冷却状态文件路径（default: data/unwrap_commands.json）",
    )
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"))
    parser.add_argument("--log-file", default=os.getenv("LOG_FILE"), help="可选：滚动日志文件路径")
    parser.add_argument("--seed", type=int, default=None, help="固定随机种子")
    return parser.parse_args()


def main() -> None:
    """
    演示入口：
    - 加载配置与冷却状态
    - 模拟几次拆包（含冷却命中）
    - 退出前落盘
    """
    load_dotenv()
    args = parse_args()
    setup_logging(level=args.log_level, log_file=args.log_file)

    permissions = PermissionRegistry()
    plugin = UnwrapCommandsPlugin(
        config_path=args.config,
        data_path=args.data,
        executor=LoggingCommandExecutor(),
        messenger=LoggingMessenger(),
        permissions=permissions,
        rng=random.Random(args.seed),
    )
    plugin.init()

    alice = Actor(actor_id=76561198000000001, display_name="Alice", position=Position(120.5, 10.0, -340.25))
    bob = Actor(actor_id=76561198000000002, display_name='Bob"; quit', position=Position(-1500.0, 3.0, 900.0))
    permissions.grant(bob.id_string, "unwrapcommands.vip")

    small = TriggerItem(shortname="xmas.present.small", item_id=-722241321, uid=1001, default_name="Small Present")
    large = TriggerItem(
        shortname="xmas.present.large",
        item_id=-1732475823,
        uid=1002,
        custom_name="Admin Gift",
        default_name="Large Present",
    )

    try:
        for actor, item in ((alice, small), (bob, large), (bob, large), (alice, large)):
            result = plugin.on_item_unwrap(item, actor)
            logger.info(f"{actor.display_name} unwrapped {item.display_name}: {result.value}")
    finally:
        plugin.unload()
        logger.info(f"Metrics: {plugin.metrics}")


if __name__ == "__main__":
    main()
