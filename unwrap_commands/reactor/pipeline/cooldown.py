from __future__ import annotations

from ..config import PERMISSION_BYPASS_COOLDOWN
from ..types import ReactorContext, ReactionWip, UnwrapResult
from ...lang import ERROR_COOLDOWN, Localizer, format_duration


class CooldownGate:
    """
    冷却判定：
    - 冷却中：提示剩余时间，按 block_while_on_cooldown 决定是否拦截，不消耗冷却
    - 未冷却：立即写入本次使用时间（即使 profile 没有动作）
    """

    def __init__(self, localizer: Localizer | None = None) -> None:
        self.localizer = localizer or Localizer.with_defaults()

    def apply(self, ctx: ReactorContext, wip: ReactionWip) -> None:
        profile = wip.profile
        key = wip.profile_key
        if profile is None or key is None:
            return

        actor = wip.actor
        bypass = profile.cooldown_seconds > 0 and ctx.permissions.has(
            actor.id_string, PERMISSION_BYPASS_COOLDOWN
        )

        with ctx.cooldowns.locked() as store:
            if store.check(actor.actor_id, key, profile.cooldown_seconds, now=ctx.now, bypass=bypass):
                store.update(actor.actor_id, key, now=ctx.now)
                return
            remaining = store.remaining(actor.actor_id, key, profile.cooldown_seconds, now=ctx.now)

        localizer = ctx.localizer or self.localizer
        message = localizer.get_message(
            ERROR_COOLDOWN,
            actor.locale,
            format_duration(remaining),
            wip.item.display_name,
        )
        if message.strip():
            ctx.messenger.reply(actor, message)

        wip.tags["cooldown"] = "active"
        if profile.block_while_on_cooldown:
            wip.finish(UnwrapResult.SUPPRESS, "cooldown_blocked")
        else:
            wip.finish(UnwrapResult.ALLOW, "cooldown_active")
