# event.py
# =========================
# 拆包事件模型（Actor / TriggerItem）
# Unwrap event model: who unwrapped what, and where
# =========================

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# 平台身份下限：低于此值的 id 是临时/机器人身份
# Platform identity floor: ids at or below it are transient/bot identities
STEAM_ID_BASE = 76561197960265728


@dataclass(frozen=True)
class Position:
    """
    世界坐标（仅用于占位符替换）
    World position (used only for placeholder substitution)
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __str__(self) -> str:
        return f"{self.x:.2f} {self.y:.2f} {self.z:.2f}"


@dataclass(frozen=True)
class Actor:
    """
    触发拆包的玩家
    The player who unwrapped the item
    """
    actor_id: int
    display_name: str = ""
    position: Position = Position()
    locale: Optional[str] = None            # 玩家语言，None 表示默认语言

    @property
    def id_string(self) -> str:
        return str(self.actor_id)

    @property
    def is_platform_identity(self) -> bool:
        return self.actor_id > STEAM_ID_BASE


@dataclass(frozen=True)
class TriggerItem:
    """
    被拆开的物品
    The item being unwrapped
    """
    shortname: str
    item_id: int = 0                        # 物品类型数值 id
    amount: int = 1
    uid: int = 0                            # 实例唯一 id
    skin_id: int = 0
    custom_name: Optional[str] = None       # 玩家自定义名称
    default_name: str = ""                  # 物品类型的默认显示名

    @property
    def display_name(self) -> str:
        """自定义名称优先，否则回退到物品类型默认名称。"""
        if self.custom_name:
            return self.custom_name
        return self.default_name
