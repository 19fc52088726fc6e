from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional, Tuple

from .reactor.config import ReactorConfig, load_config
from .reactor.errors import ConfigError

logger = logging.getLogger(__name__)


class ReactorConfigProvider:
    """ReactorConfig 快照提供者：只替换引用，不原地修改"""

    def __init__(self, config_path: str | Path) -> None:
        self._path = Path(config_path)
        self._ref: ReactorConfig = ReactorConfig.default()
        self._last_stamp: Optional[Tuple[int, int]] = None
        self._last_hash: Optional[str] = None

        self.load_initial()

    @property
    def path(self) -> Path:
        return self._path

    def snapshot(self) -> ReactorConfig:
        return self._ref

    def load_initial(self) -> None:
        """
        启动加载：缺失 / 损坏 / 版本过旧的配置会被默认值或迁移结果覆盖并写回。
        """
        cfg, changed = load_config(self._path)
        if changed:
            try:
                cfg.save_yaml(self._path)
            except OSError as e:
                logger.warning(f"Cannot write UnwrapCommands config {self._path}: {e}")
        for issue in cfg.lint():
            logger.warning(f"Config: {issue}")
        self._ref = cfg
        self._remember_file()

    def reload_if_changed(self) -> bool:
        """
        拆包配置热加载入口（由 plugin.reload_config 调用）。

        先比较 (mtime_ns, size)；两者不变时再比较 sha256，
        编辑器原地保存且 mtime 未变的情况也能识别。
        """
        stamp = self._read_stamp()
        if stamp is None:
            return False
        if stamp == self._last_stamp and self._read_digest() in (None, self._last_hash):
            return False
        return self.force_reload()

    def force_reload(self) -> bool:
        """严格读取 profiles 配置；失败时保留旧快照，不覆盖用户正在编辑的文件"""
        try:
            cfg = ReactorConfig.from_yaml(self._path)
        except ConfigError as e:
            logger.warning(f"UnwrapCommands config reload failed, keeping previous profiles: {e}")
            return False

        for issue in cfg.lint():
            logger.warning(f"Config: {issue}")
        self._ref = cfg
        self._remember_file()
        logger.info(f"UnwrapCommands config reloaded: {len(cfg.profiles)} profiles")
        return True

    def _remember_file(self) -> None:
        self._last_stamp = self._read_stamp()
        self._last_hash = self._read_digest()

    def _read_stamp(self) -> Optional[Tuple[int, int]]:
        try:
            st = self._path.stat()
        except OSError as e:
            logger.warning(f"Cannot stat UnwrapCommands config {self._path}: {e}")
            return None
        return st.st_mtime_ns, st.st_size

    def _read_digest(self) -> Optional[str]:
        try:
            return hashlib.sha256(self._path.read_bytes()).hexdigest()
        except OSError as e:
            logger.warning(f"Cannot read UnwrapCommands config {self._path}: {e}")
            return None
