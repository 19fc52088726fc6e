from __future__ import annotations

from typing import List

from ..types import ReactionStage, ReactorContext, ReactionWip
from .actions import ActionStage
from .cooldown import CooldownGate
from .finalize import FinalizeStage
from .guard import ActorGuard, ProfilePermissionGate
from .match import MatchStage


class DefaultReactionPipeline:
    """固定的拆包处理流程；任一 stage 给出结果后停止"""

    def __init__(self) -> None:
        self.stages: List[ReactionStage] = [
            ActorGuard(),
            MatchStage(),
            ProfilePermissionGate(),
            CooldownGate(),
            ActionStage(),
            FinalizeStage(),
        ]

    def run(self, ctx: ReactorContext, wip: ReactionWip) -> None:
        for stage in self.stages:
            if wip.done:
                break
            stage.apply(ctx, wip)
