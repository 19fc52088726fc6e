from .event import Actor, Position, TriggerItem, STEAM_ID_BASE

__all__ = [
    "Actor",
    "Position",
    "TriggerItem",
    "STEAM_ID_BASE",
]
