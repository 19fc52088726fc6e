from __future__ import annotations

from ..config import PERMISSION_USE
from ..types import ReactorContext, ReactionWip, UnwrapResult


class ActorGuard:
    """非平台身份 / 缺少全局使用权限时直接放行默认行为"""

    def apply(self, ctx: ReactorContext, wip: ReactionWip) -> None:
        if not wip.actor.is_platform_identity:
            wip.finish(UnwrapResult.ALLOW, "not_platform_identity")
            return

        if ctx.config.require_permission_to_use and not ctx.permissions.has(
            wip.actor.id_string, PERMISSION_USE
        ):
            wip.finish(UnwrapResult.ALLOW, "missing_use_permission")


class ProfilePermissionGate:
    """profile 自身要求的权限"""

    def apply(self, ctx: ReactorContext, wip: ReactionWip) -> None:
        profile = wip.profile
        if profile is None or not profile.required_permission:
            return
        if not ctx.permissions.has(wip.actor.id_string, profile.required_permission):
            wip.finish(UnwrapResult.ALLOW, "missing_profile_permission")
