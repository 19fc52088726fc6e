# reactor/cooldowns.py
# =========================
# 冷却时间存储（按玩家 / 按 profile key）
# Cooldown store: actor -> profile key -> last use timestamp
# =========================

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional
from urllib.parse import quote, unquote

from .errors import StateFileError
from .types import ProfileKey

logger = logging.getLogger(__name__)

STATE_ROOT_KEY = "player_cooldowns"


def encode_key(key: ProfileKey) -> str:
    """各字段百分号转义后用 "/" 连接，字段内容不会与分隔符混淆"""
    return "/".join(quote(str(part), safe="") for part in key)


def decode_key(raw: str) -> ProfileKey:
    parts = raw.split("/")
    if len(parts) != 3:
        raise ValueError(f"bad profile key: {raw!r}")
    item, skin, name = (unquote(p) for p in parts)
    return ProfileKey(item, int(skin), name)


class CooldownStore:
    """
    冷却时间表，持有：
    - actor_id -> {ProfileKey -> 上次使用时间（Unix 秒，浮点）}
    - dirty 标记（有未落盘的修改）

    时间由调用方传入，便于测试模拟时钟。
    """

    def __init__(self, path: Optional[str | Path] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._entries: Dict[int, Dict[ProfileKey, float]] = {}
        self._lock = threading.RLock()
        self.dirty = False

    @contextmanager
    def locked(self) -> Iterator["CooldownStore"]:
        """check-then-update 期间持有锁"""
        with self._lock:
            yield self

    # ---------- 查询 / 更新 ----------

    def last_use(self, actor_id: int, key: ProfileKey) -> Optional[float]:
        with self._lock:
            return self._entries.get(actor_id, {}).get(key)

    def check(
        self,
        actor_id: int,
        key: ProfileKey,
        duration: float,
        *,
        now: float,
        bypass: bool = False,
    ) -> bool:
        """True 表示不在冷却中，可以继续"""
        if duration <= 0:
            return True
        if bypass:
            return True

        last = self.last_use(actor_id, key)
        if last is None:
            return True
        return (now - last) >= duration

    def update(self, actor_id: int, key: ProfileKey, *, now: float) -> None:
        with self._lock:
            self._entries.setdefault(actor_id, {})[key] = now
            self.dirty = True

    def remaining(self, actor_id: int, key: ProfileKey, duration: float, *, now: float) -> float:
        last = self.last_use(actor_id, key)
        if last is None:
            return 0.0
        return max(0.0, duration - (now - last))

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._entries.values())

    # ---------- 持久化 ----------

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, float]]]:
        with self._lock:
            return {
                STATE_ROOT_KEY: {
                    str(actor_id): {encode_key(k): ts for k, ts in per_actor.items()}
                    for actor_id, per_actor in self._entries.items()
                }
            }

    def load_dict(self, data: object) -> int:
        """载入状态；无法解析的条目跳过。返回载入条目数。"""
        entries: Dict[int, Dict[ProfileKey, float]] = {}
        root = data.get(STATE_ROOT_KEY) if isinstance(data, dict) else None
        if isinstance(root, dict):
            for raw_actor, per_actor in root.items():
                if not isinstance(per_actor, dict):
                    continue
                try:
                    actor_id = int(raw_actor)
                except (TypeError, ValueError):
                    continue
                for raw_key, ts in per_actor.items():
                    try:
                        key = decode_key(raw_key)
                        entries.setdefault(actor_id, {})[key] = float(ts)
                    except (TypeError, ValueError):
                        logger.debug(f"Skipping cooldown entry {raw_actor}/{raw_key!r}")

        with self._lock:
            self._entries = entries
            self.dirty = False
        return sum(len(v) for v in entries.values())

    def load(self) -> int:
        """
        从磁盘载入。文件缺失或损坏都视为空状态（不抛出）。
        """
        if self.path is None or not self.path.exists():
            self.load_dict({})
            return 0
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Cooldown state {self.path} unreadable, starting empty: {e}")
            self.load_dict({})
            return 0
        return self.load_dict(data)

    def save(self) -> None:
        """原子写入（临时文件 + replace）。失败抛 StateFileError，dirty 保持不变。"""
        if self.path is None:
            return
        with self._lock:
            self._write(self.to_dict())
            self.dirty = False

    def _write(self, payload: Dict[str, object]) -> None:
        assert self.path is not None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False, indent=2)
                Path(tmp_name).replace(self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StateFileError(f"Cannot write cooldown state {self.path}: {e}") from e
