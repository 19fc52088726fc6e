# plugin.py
# =========================
# 插件生命周期：加载配置 → 注册权限 → 载入冷却状态 → 处理拆包 → 定期保存 → 卸载
# Plugin lifecycle: config → permissions → state → unwrap events → save → unload
# =========================

from __future__ import annotations

import logging
import random
import time
from pathlib import Path
from typing import Callable, Optional

from .config_provider import ReactorConfigProvider
from .lang import Localizer
from .reactor.cooldowns import CooldownStore
from .reactor.errors import StateFileError
from .reactor.metrics import ReactorMetrics
from .reactor.reactor import DefaultReactor
from .reactor.types import (
    CommandExecutor,
    Messenger,
    PermissionService,
    RandomSource,
    ReactorContext,
    UnwrapResult,
)
from .schemas.event import Actor, TriggerItem

logger = logging.getLogger(__name__)


class UnwrapCommandsPlugin:
    """
    拆包命令插件

    职责 / Responsibilities:
    - 持有配置快照提供者与冷却存储（不使用全局单例）
    - 启动时注册配置中引用的全部权限
    - 为每次拆包构造 ReactorContext 并交给 DefaultReactor
    - 定期 / 卸载时落盘冷却状态，失败只记录并在下次重试

    非职责 / Non-responsibilities:
    - 真实的命令执行、消息发送、权限存储（由宿主注入）
    """

    def __init__(
        self,
        *,
        config_path: str | Path,
        data_path: str | Path,
        executor: CommandExecutor,
        messenger: Messenger,
        permissions: PermissionService,
        rng: Optional[RandomSource] = None,
        clock: Callable[[], float] = time.time,
        localizer: Optional[Localizer] = None,
    ) -> None:
        self.config_path = Path(config_path)
        self.data_path = Path(data_path)
        self.executor = executor
        self.messenger = messenger
        self.permissions = permissions
        self.rng: RandomSource = rng or random.Random()
        self.clock = clock
        self.localizer = localizer or Localizer.with_defaults()

        self.metrics = ReactorMetrics()
        self.reactor = DefaultReactor(metrics=self.metrics)

        self.provider: Optional[ReactorConfigProvider] = None
        self.cooldowns: Optional[CooldownStore] = None

    @property
    def loaded(self) -> bool:
        return self.provider is not None and self.cooldowns is not None

    # ---------- 生命周期 ----------

    def init(self) -> None:
        self.provider = ReactorConfigProvider(self.config_path)
        self._register_permissions()

        self.cooldowns = CooldownStore(self.data_path)
        count = self.cooldowns.load()
        logger.info(f"UnwrapCommands loaded: {len(self.provider.snapshot().profiles)} profiles, {count} cooldown entries")

    def unload(self) -> None:
        self.save_data()
        self.provider = None
        self.cooldowns = None
        logger.info("UnwrapCommands unloaded")

    def on_server_save(self) -> None:
        self.save_data()

    def reload_config(self) -> bool:
        if self.provider is None:
            return False
        changed = self.provider.reload_if_changed()
        if changed:
            self._register_permissions()
        return changed

    # ---------- 事件 ----------

    def on_item_unwrap(self, item: Optional[TriggerItem], actor: Optional[Actor]) -> UnwrapResult:
        if not self.loaded:
            return UnwrapResult.ALLOW
        return self.reactor.handle(actor, item, self.context())

    def context(self) -> ReactorContext:
        assert self.provider is not None and self.cooldowns is not None
        return ReactorContext(
            now=self.clock(),
            config=self.provider.snapshot(),
            cooldowns=self.cooldowns,
            permissions=self.permissions,
            executor=self.executor,
            messenger=self.messenger,
            rng=self.rng,
            localizer=self.localizer,
            metrics=self.metrics,
        )

    # ---------- 内部 ----------

    def save_data(self) -> bool:
        if self.cooldowns is None:
            return False
        try:
            self.cooldowns.save()
            return True
        except StateFileError as e:
            logger.warning(f"{e}; will retry on next save")
            return False

    def _register_permissions(self) -> None:
        assert self.provider is not None
        for name in self.provider.snapshot().permissions():
            self.permissions.register(name)
