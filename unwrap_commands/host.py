"""宿主侧出站接口的日志实现（演示 / 离线运行用）。"""

from __future__ import annotations

from typing import List, Tuple

from loguru import logger

from .schemas.event import Actor


class LoggingCommandExecutor:
    """不连接真实服务器，只记录将要执行的命令"""

    def __init__(self) -> None:
        self.history: List[Tuple[str, str]] = []

    def server_command(self, command: str) -> None:
        self.history.append(("server", command))
        logger.info(f"[server] {command}")

    def chat_command(self, actor: Actor, command: str) -> None:
        line = f'chat.say "/{command}"'
        self.history.append(("chat", line))
        logger.info(f"[chat:{actor.actor_id}] {line}")

    def client_command(self, actor: Actor, command: str) -> None:
        self.history.append(("client", command))
        logger.info(f"[client:{actor.actor_id}] {command}")


class LoggingMessenger:
    """Output channel for player replies, prefixed with the player name."""

    def __init__(self) -> None:
        self.sent: List[Tuple[int, str]] = []

    def reply(self, actor: Actor, message: str) -> None:
        self.sent.append((actor.actor_id, message))
        logger.info(f"[{actor.display_name or actor.actor_id}] {message}")
