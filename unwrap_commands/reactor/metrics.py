from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class ReactorMetrics:
    processed_total: int = 0
    matched_total: int = 0
    suppressed_total: int = 0
    allowed_total: int = 0
    cooldown_blocked_total: int = 0
    actions_executed_total: int = 0
    actions_blocked_total: int = 0
    errors_total: int = 0

    by_profile: Dict[str, int] = field(default_factory=dict)
    by_reason: Dict[str, int] = field(default_factory=dict)

    def inc_profile(self, profile: str) -> None:
        self.by_profile[profile] = self.by_profile.get(profile, 0) + 1

    def inc_reason(self, reason: str) -> None:
        self.by_reason[reason] = self.by_reason.get(reason, 0) + 1
