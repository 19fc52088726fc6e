from __future__ import annotations

from typing import List, Sequence

from .config import ActionEntry
from .types import RandomSource, SelectionMode


class ActionSelector:
    """
    按 All / Random / Weighted 策略挑选要执行的动作

    每个动作先独立过一次 execute_chance 判定（>=100 时不抽随机数），
    之后的挑选只在通过判定的动作之间进行。
    """

    def __init__(self, rng: RandomSource) -> None:
        self.rng = rng

    def is_eligible(self, action: ActionEntry) -> bool:
        if action.execute_chance >= 100.0:
            return True
        return self.rng.random() * 100.0 <= action.execute_chance

    def eligible(self, actions: Sequence[ActionEntry]) -> List[ActionEntry]:
        return [a for a in actions if self.is_eligible(a)]

    def select(self, mode: SelectionMode, actions: Sequence[ActionEntry]) -> List[ActionEntry]:
        candidates = self.eligible(actions)
        if not candidates:
            return []

        if mode == SelectionMode.ALL:
            return candidates
        if mode == SelectionMode.RANDOM:
            return [candidates[self.rng.randrange(len(candidates))]]
        return [self._weighted_pick(candidates)]

    def _weighted_pick(self, candidates: List[ActionEntry]) -> ActionEntry:
        total = sum(a.effective_weight for a in candidates)
        draw = self.rng.randrange(total)

        cumulative = 0
        for action in candidates:
            cumulative += action.effective_weight
            if draw < cumulative:
                return action
        return candidates[-1]
