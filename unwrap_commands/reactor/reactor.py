from __future__ import annotations

from typing import Optional

from loguru import logger

from .metrics import ReactorMetrics
from .pipeline.base import DefaultReactionPipeline
from .types import ReactorContext, ReactionWip, UnwrapResult
from ..schemas.event import Actor, TriggerItem


class DefaultReactor:
    """
    拆包事件入口

    使用示例（在宿主的拆包钩子中）：

        ctx = ReactorContext(
            now=time.time(),
            config=provider.snapshot(),
            cooldowns=store,
            permissions=permissions,
            executor=executor,
            messenger=messenger,
            rng=random.Random(),
        )
        if reactor.handle(actor, item, ctx) == UnwrapResult.SUPPRESS:
            ...  # 拦截默认掉落

    handle 永远不抛异常，任何意外都按 ALLOW 处理。
    """

    def __init__(self, metrics: Optional[ReactorMetrics] = None) -> None:
        self.metrics = metrics or ReactorMetrics()
        self.pipeline = DefaultReactionPipeline()

    def handle(
        self,
        actor: Optional[Actor],
        item: Optional[TriggerItem],
        ctx: ReactorContext,
    ) -> UnwrapResult:
        if actor is None or item is None:
            return UnwrapResult.ALLOW

        metrics = ctx.metrics or self.metrics
        wip = ReactionWip(actor=actor, item=item)
        try:
            self.pipeline.run(ctx, wip)
        except Exception:
            logger.exception(f"Unwrap handling failed for {item.shortname} / {actor.actor_id}")
            metrics.errors_total += 1
            wip.finish(UnwrapResult.ALLOW, "error")

        result = wip.result or UnwrapResult.ALLOW
        self._record(metrics, wip, result)
        return result

    @staticmethod
    def _record(metrics: ReactorMetrics, wip: ReactionWip, result: UnwrapResult) -> None:
        metrics.processed_total += 1
        if wip.profile is not None:
            metrics.matched_total += 1
            metrics.inc_profile(wip.profile.item_shortname)
        if result == UnwrapResult.SUPPRESS:
            metrics.suppressed_total += 1
        else:
            metrics.allowed_total += 1
        if wip.tags.get("cooldown") == "active":
            metrics.cooldown_blocked_total += 1
        metrics.actions_executed_total += len(wip.executed)
        metrics.actions_blocked_total += len(wip.blocked)
        if wip.reasons:
            metrics.inc_reason(wip.reasons[-1])
