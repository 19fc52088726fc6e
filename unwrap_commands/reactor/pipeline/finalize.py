from __future__ import annotations

from ..placeholders import PlaceholderEngine
from ..types import ReactorContext, ReactionWip, UnwrapResult


class FinalizeStage:
    """发送通知并根据 block_default_loot 给出最终结果"""

    def apply(self, ctx: ReactorContext, wip: ReactionWip) -> None:
        profile = wip.profile
        if profile is None:
            wip.finish(UnwrapResult.ALLOW, "no_profile")
            return

        if profile.send_notification and profile.notification_message:
            engine = PlaceholderEngine(ctx.rng, world_size=ctx.config.world_size)
            message = engine.expand(profile.notification_message, wip.actor, wip.item, now=ctx.now)
            ctx.messenger.reply(wip.actor, message)
            wip.tags["notified"] = "yes"

        if profile.block_default_loot:
            wip.finish(UnwrapResult.SUPPRESS, "block_default_loot")
        else:
            wip.finish(UnwrapResult.ALLOW, "default_loot")
