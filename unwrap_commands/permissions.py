from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Set

logger = logging.getLogger(__name__)


class PermissionRegistry:
    """内存版权限服务：先注册，后授予；未注册的权限一律视为未授予。"""

    def __init__(self) -> None:
        self._registered: List[str] = []
        self._grants: Dict[str, Set[str]] = {}

    @property
    def registered(self) -> List[str]:
        return list(self._registered)

    def register(self, name: str) -> None:
        if not name or name in self._registered:
            return
        self._registered.append(name)
        logger.debug(f"Permission registered: {name}")

    def register_all(self, names: Iterable[str]) -> None:
        for name in names:
            self.register(name)

    def grant(self, actor_id: str, name: str) -> None:
        self._grants.setdefault(str(actor_id), set()).add(name)

    def revoke(self, actor_id: str, name: str) -> None:
        self._grants.get(str(actor_id), set()).discard(name)

    def has(self, actor_id: str, name: str) -> bool:
        if name not in self._registered:
            return False
        return name in self._grants.get(str(actor_id), set())
