from .reactor import DefaultReactor
from .types import (
    CommandChannel,
    ProfileKey,
    ReactionWip,
    ReactorContext,
    SelectionMode,
    UnwrapResult,
)
from .config import ActionEntry, Profile, ReactorConfig
from .cooldowns import CooldownStore
from .metrics import ReactorMetrics

__all__ = [
    "DefaultReactor",
    "CommandChannel",
    "ProfileKey",
    "ReactionWip",
    "ReactorContext",
    "SelectionMode",
    "UnwrapResult",
    "ActionEntry",
    "Profile",
    "ReactorConfig",
    "CooldownStore",
    "ReactorMetrics",
]
