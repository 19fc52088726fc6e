from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from .errors import ConfigError
from .types import CommandChannel, ProfileKey, SelectionMode

logger = logging.getLogger(__name__)

CURRENT_VERSION = "1.0.0"

PERMISSION_USE = "unwrapcommands.use"
PERMISSION_BYPASS_COOLDOWN = "unwrapcommands.bypass.cooldown"


@dataclass(frozen=True)
class ActionEntry:
    command: str = ""
    channel: CommandChannel = CommandChannel.SERVER
    weight: int = 1
    execute_chance: float = 100.0

    @property
    def effective_weight(self) -> int:
        return max(1, self.weight)


@dataclass(frozen=True)
class Profile:
    enabled: bool = True
    item_shortname: str = ""
    match_skin_id: int = 0
    match_display_name: str = ""
    required_permission: str = ""
    cooldown_seconds: float = 0.0
    block_while_on_cooldown: bool = False
    selection_mode: SelectionMode = SelectionMode.WEIGHTED
    block_default_loot: bool = False
    actions: Tuple[ActionEntry, ...] = ()
    send_notification: bool = False
    notification_message: str = ""

    @property
    def key(self) -> ProfileKey:
        return ProfileKey(self.item_shortname, self.match_skin_id, self.match_display_name)

    @property
    def specificity(self) -> int:
        score = 0
        if self.match_skin_id != 0:
            score += 2
        if self.match_display_name:
            score += 1
        return score


def _default_profiles() -> Tuple[Profile, ...]:
    return (
        Profile(
            enabled=True,
            item_shortname="xmas.present.small",
            selection_mode=SelectionMode.WEIGHTED,
            actions=(
                ActionEntry(
                    command="inventory.giveto {steamid} scrap 50",
                    channel=CommandChannel.SERVER,
                    weight=70,
                    execute_chance=100.0,
                ),
                ActionEntry(
                    command="inventory.giveto {steamid} supply.signal 1",
                    channel=CommandChannel.SERVER,
                    weight=30,
                    execute_chance=100.0,
                ),
            ),
            send_notification=True,
            notification_message="You unwrapped a {itemname}!",
        ),
    )


@dataclass(frozen=True)
class ReactorConfig:
    version: str = CURRENT_VERSION
    log_executed_commands: bool = True
    require_permission_to_use: bool = False
    world_size: float = 4500.0
    profiles: Tuple[Profile, ...] = field(default_factory=_default_profiles)

    @staticmethod
    def default() -> "ReactorConfig":
        return ReactorConfig()

    def permissions(self) -> List[str]:
        """启动时需要注册的权限（去重，保持首次出现顺序）"""
        names = [PERMISSION_USE, PERMISSION_BYPASS_COOLDOWN]
        for profile in self.profiles:
            if profile.required_permission and profile.required_permission not in names:
                names.append(profile.required_permission)
        return names

    def with_version(self, version: str) -> "ReactorConfig":
        return replace(self, version=version)

    def lint(self) -> List[str]:
        """返回配置中的可疑项（不影响加载）"""
        issues: List[str] = []
        seen: Dict[ProfileKey, int] = {}
        for idx, profile in enumerate(self.profiles):
            where = f"profiles[{idx}] ({profile.item_shortname or '<empty>'})"
            if not profile.item_shortname:
                issues.append(f"{where}: item_shortname is empty, profile never matches")
            # 名称过滤不区分大小写，按匹配时的口径判重
            match_key = profile.key._replace(display_name=profile.match_display_name.casefold())
            if match_key in seen:
                issues.append(f"{where}: same item/skin/name filter as profiles[{seen[match_key]}], never selected")
            else:
                seen[match_key] = idx
            if profile.cooldown_seconds < 0:
                issues.append(f"{where}: negative cooldown treated as no cooldown")
            for a_idx, action in enumerate(profile.actions):
                a_where = f"{where}.commands[{a_idx}]"
                if not action.command.strip():
                    issues.append(f"{a_where}: empty command")
                if action.weight < 1:
                    issues.append(f"{a_where}: weight {action.weight} treated as 1")
                if action.execute_chance <= 0:
                    issues.append(f"{a_where}: execute_chance {action.execute_chance} never fires")
        return issues

    # ---------- 序列化 ----------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReactorConfig":
        base = cls()
        raw_profiles = data.get("profiles")
        if "profiles" not in data:
            profiles = base.profiles
        elif raw_profiles is None:
            # 显式留空的 profiles 表示全部停用，不回退到内置默认
            logger.warning("Config has an empty profiles list; no items will trigger commands")
            profiles = ()
        elif isinstance(raw_profiles, list):
            profiles = tuple(_parse_profile(p) for p in raw_profiles if isinstance(p, dict))
        else:
            profiles = ()

        return cls(
            version=str(data.get("version", "") or ""),
            log_executed_commands=_as_bool(data.get("log_executed_commands"), base.log_executed_commands),
            require_permission_to_use=_as_bool(data.get("require_permission_to_use"), base.require_permission_to_use),
            world_size=_as_float(data.get("world_size"), base.world_size),
            profiles=profiles,
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ReactorConfig":
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config root must be a mapping, got {type(raw).__name__}")
        return cls.from_dict(raw)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "log_executed_commands": self.log_executed_commands,
            "require_permission_to_use": self.require_permission_to_use,
            "world_size": self.world_size,
            "profiles": [_profile_to_dict(p) for p in self.profiles],
        }

    def save_yaml(self, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, allow_unicode=True, sort_keys=False)


def load_config(path: str | Path) -> Tuple[ReactorConfig, bool]:
    """
    读取配置并按版本迁移。

    返回 (config, changed)；changed 为 True 时调用方应把 config 写回磁盘。
    - 文件不存在：使用内置默认配置
    - 文件损坏：使用内置默认配置
    - 版本落后：低于 1.0.0 的整体替换为默认配置，其余仅更新版本号
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Config {path} not found, creating default")
        return ReactorConfig.default(), True

    try:
        cfg = ReactorConfig.from_yaml(path)
    except ConfigError as e:
        logger.warning(f"{e}; replacing with default config")
        return ReactorConfig.default(), True

    if version_tuple(cfg.version) >= version_tuple(CURRENT_VERSION):
        return cfg, False

    logger.warning("Config changes detected! Updating...")
    old_version = cfg.version
    if version_tuple(cfg.version) < (1, 0, 0):
        cfg = ReactorConfig.default()
    logger.warning(f"Config update complete! Updated from version {old_version or '<none>'} to {CURRENT_VERSION}")
    return cfg.with_version(CURRENT_VERSION), True


def version_tuple(version: str) -> Tuple[int, ...]:
    """"1.2.3" -> (1, 2, 3)；非数字段按 0 处理，空串为 ()"""
    if not version:
        return ()
    return tuple(int(part) if part.isdecimal() else 0 for part in version.split("."))


# ---------- 字段解析（容错） ----------

def _parse_profile(raw: Dict[str, Any]) -> Profile:
    base = Profile()
    raw_actions = raw.get("commands") or []
    actions: Tuple[ActionEntry, ...] = ()
    if isinstance(raw_actions, list):
        actions = tuple(_parse_action(a) for a in raw_actions if isinstance(a, dict))

    return Profile(
        enabled=_as_bool(raw.get("enabled"), base.enabled),
        item_shortname=str(raw.get("item_shortname", "") or ""),
        match_skin_id=_as_int(raw.get("match_skin_id"), 0),
        match_display_name=str(raw.get("match_display_name", "") or ""),
        required_permission=str(raw.get("required_permission", "") or ""),
        cooldown_seconds=_as_float(raw.get("cooldown_seconds"), 0.0),
        block_while_on_cooldown=_as_bool(raw.get("block_unwrap_while_on_cooldown"), False),
        selection_mode=SelectionMode.parse(raw.get("selection_mode")),
        block_default_loot=_as_bool(raw.get("block_default_loot"), False),
        actions=actions,
        send_notification=_as_bool(raw.get("send_notification"), False),
        notification_message=str(raw.get("notification_message", "") or ""),
    )


def _parse_action(raw: Dict[str, Any]) -> ActionEntry:
    return ActionEntry(
        command=str(raw.get("command", "") or ""),
        channel=CommandChannel.parse(raw.get("type")),
        weight=_as_int(raw.get("weight"), 1),
        execute_chance=_as_float(raw.get("execute_chance"), 100.0),
    )


def _profile_to_dict(profile: Profile) -> Dict[str, Any]:
    return {
        "enabled": profile.enabled,
        "item_shortname": profile.item_shortname,
        "match_skin_id": profile.match_skin_id,
        "match_display_name": profile.match_display_name,
        "required_permission": profile.required_permission,
        "cooldown_seconds": profile.cooldown_seconds,
        "block_unwrap_while_on_cooldown": profile.block_while_on_cooldown,
        "selection_mode": profile.selection_mode.value.capitalize(),
        "block_default_loot": profile.block_default_loot,
        "commands": [
            {
                "command": a.command,
                "type": a.channel.value.capitalize(),
                "weight": a.weight,
                "execute_chance": a.execute_chance,
            }
            for a in profile.actions
        ],
        "send_notification": profile.send_notification,
        "notification_message": profile.notification_message,
    }


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        val = value.strip().lower()
        if val in ("true", "yes", "on", "1"):
            return True
        if val in ("false", "no", "off", "0"):
            return False
    if isinstance(value, (int, float)):
        return bool(value)
    return default


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
