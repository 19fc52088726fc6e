"""展开后命令的安全校验（黑名单 + 前缀 + 链式分隔符）。"""

from __future__ import annotations

BLOCKED_COMMANDS = frozenset({
    "quit",
    "exit",
    "shutdown",
    "server.stop",
    "server.restart",
    "rcon.password",
    "server.hostname",
    "server.seed",
    "oxide.unload",
    "oxide.reload",
    "o.unload",
    "o.reload",
})

BLOCKED_PREFIXES = (
    "rcon.",
    "server.writecfg",
    "oxide.grant",
    "oxide.revoke",
    "o.grant",
    "o.revoke",
)

CHAIN_SEPARATORS = (";", "&&", "||")


def is_safe(command: str) -> bool:
    """
    校验最终发送给执行器的命令字符串（必须在占位符展开之后调用）。
    """
    if not command or not command.strip():
        return False

    lowered = command.strip().lower()
    name = lowered.split()[0]
    if name in BLOCKED_COMMANDS:
        return False

    if lowered.startswith(BLOCKED_PREFIXES):
        return False

    if any(sep in command for sep in CHAIN_SEPARATORS):
        return False

    return True
