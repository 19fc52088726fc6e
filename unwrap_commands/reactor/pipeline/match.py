from __future__ import annotations

from typing import Iterable, Optional

from ..config import Profile
from ..types import ReactorContext, ReactionWip, UnwrapResult
from ...schemas.event import TriggerItem


def is_candidate(profile: Profile, item: TriggerItem) -> bool:
    if profile.item_shortname != item.shortname:
        return False
    if profile.match_skin_id != 0 and profile.match_skin_id != item.skin_id:
        return False
    if profile.match_display_name and profile.match_display_name.casefold() != item.display_name.casefold():
        return False
    return True


def find_matching_profile(profiles: Iterable[Profile], item: TriggerItem) -> Optional[Profile]:
    """
    取特异性得分最高的候选 profile（皮肤 +2，名称 +1）。

    同分时保留配置中先出现的那个。
    """
    best: Optional[Profile] = None
    best_score = -1
    for profile in profiles:
        if not is_candidate(profile, item):
            continue
        score = profile.specificity
        if score > best_score:
            best, best_score = profile, score
    return best


class MatchStage:
    def apply(self, ctx: ReactorContext, wip: ReactionWip) -> None:
        profile = find_matching_profile(ctx.config.profiles, wip.item)
        if profile is None:
            wip.finish(UnwrapResult.ALLOW, "no_profile")
            return

        wip.profile = profile
        wip.profile_key = profile.key
        wip.tags["profile"] = profile.item_shortname

        # 最佳匹配被禁用时不回退到次优 profile
        if not profile.enabled:
            wip.finish(UnwrapResult.ALLOW, "profile_disabled")
