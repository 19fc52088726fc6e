from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Protocol, TYPE_CHECKING

from ..schemas.event import Actor, TriggerItem


class UnwrapResult(str, Enum):
    """拆包钩子的返回信号：是否拦截默认掉落"""
    ALLOW = "allow"
    SUPPRESS = "suppress"


class SelectionMode(str, Enum):
    ALL = "all"
    RANDOM = "random"
    WEIGHTED = "weighted"

    @classmethod
    def parse(cls, value: Any) -> "SelectionMode":
        if isinstance(value, SelectionMode):
            return value
        if isinstance(value, str):
            val = value.strip().lower()
            for mode in cls:
                if mode.value == val:
                    return mode
        return cls.WEIGHTED


class CommandChannel(str, Enum):
    SERVER = "server"
    CHAT = "chat"
    CLIENT = "client"

    @classmethod
    def parse(cls, value: Any) -> "CommandChannel":
        if isinstance(value, CommandChannel):
            return value
        if isinstance(value, str):
            val = value.strip().lower()
            for channel in cls:
                if channel.value == val:
                    return channel
        return cls.SERVER


class ProfileKey(NamedTuple):
    """冷却计时的结构化 key：(物品, 皮肤过滤, 名称过滤)"""
    item_shortname: str
    skin_id: int
    display_name: str


# ========== Host 协作者接口 ==========

class RandomSource(Protocol):
    def random(self) -> float: ...

    def randrange(self, stop: int) -> int: ...

    def randint(self, a: int, b: int) -> int: ...


class CommandExecutor(Protocol):
    def server_command(self, command: str) -> None: ...

    def chat_command(self, actor: Actor, command: str) -> None: ...

    def client_command(self, actor: Actor, command: str) -> None: ...


class Messenger(Protocol):
    def reply(self, actor: Actor, message: str) -> None: ...


class PermissionService(Protocol):
    def register(self, name: str) -> None: ...

    def has(self, actor_id: str, name: str) -> bool: ...


@dataclass
class ReactorContext:
    """单次事件处理所需的全部依赖（显式传入，不使用全局单例）"""
    now: float
    config: "ReactorConfig"
    cooldowns: "CooldownStore"
    permissions: PermissionService
    executor: CommandExecutor
    messenger: Messenger
    rng: RandomSource
    localizer: Optional["Localizer"] = None
    metrics: Optional["ReactorMetrics"] = None


@dataclass
class ReactionWip:
    actor: Actor
    item: TriggerItem
    profile: Optional["Profile"] = None
    profile_key: Optional[ProfileKey] = None
    result: Optional[UnwrapResult] = None
    executed: List[str] = field(default_factory=list)
    blocked: List[str] = field(default_factory=list)
    reasons: List[str] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)

    def finish(self, result: UnwrapResult, reason: str) -> None:
        self.result = result
        self.reasons.append(reason)

    @property
    def done(self) -> bool:
        return self.result is not None


class ReactionStage(Protocol):
    def apply(self, ctx: ReactorContext, wip: ReactionWip) -> None: ...


if TYPE_CHECKING:
    from .config import ReactorConfig, Profile
    from .cooldowns import CooldownStore
    from .metrics import ReactorMetrics
    from ..lang import Localizer
