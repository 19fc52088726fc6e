from __future__ import annotations

from loguru import logger

from ..config import ActionEntry
from ..placeholders import PlaceholderEngine
from ..safety import is_safe
from ..selector import ActionSelector
from ..types import CommandChannel, ReactorContext, ReactionWip, UnwrapResult


class ActionStage:
    """挑选并执行动作；每条命令展开后必须通过安全校验"""

    def apply(self, ctx: ReactorContext, wip: ReactionWip) -> None:
        profile = wip.profile
        if profile is None:
            return

        if not profile.actions:
            wip.finish(
                UnwrapResult.SUPPRESS if profile.block_default_loot else UnwrapResult.ALLOW,
                "no_actions",
            )
            return

        engine = PlaceholderEngine(ctx.rng, world_size=ctx.config.world_size)
        selector = ActionSelector(ctx.rng)
        for action in selector.select(profile.selection_mode, profile.actions):
            self._run(ctx, wip, engine, action)

    def _run(
        self,
        ctx: ReactorContext,
        wip: ReactionWip,
        engine: PlaceholderEngine,
        action: ActionEntry,
    ) -> None:
        actor = wip.actor
        try:
            command = engine.expand(action.command, actor, wip.item, now=ctx.now)
        except Exception:
            logger.exception(f"Command template expansion failed: {action.command}")
            wip.reasons.append("expand_error")
            return

        if not is_safe(command):
            logger.warning(f"Command blocked due to security validation: {command}")
            wip.blocked.append(command)
            return

        try:
            if action.channel == CommandChannel.CHAT:
                ctx.executor.chat_command(actor, command)
            elif action.channel == CommandChannel.CLIENT:
                ctx.executor.client_command(actor, command)
            else:
                ctx.executor.server_command(command)
        except Exception:
            logger.exception(f"Command execution failed: {command}")
            wip.reasons.append("execute_error")
            return

        wip.executed.append(command)
        if ctx.config.log_executed_commands:
            logger.info(f"Executed: {command} for player {actor.display_name}")
