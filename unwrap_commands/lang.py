# lang.py
# =========================
# 本地化消息表 + 时长文本
# Localized message tables and duration text
# =========================

from __future__ import annotations

import math
from typing import Dict, Optional

ERROR_COOLDOWN = "Error.Cooldown"

DEFAULT_LOCALE = "en"

DEFAULT_MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        ERROR_COOLDOWN: "You must wait {0} before unwrapping another {1}.",
    },
    "zh-CN": {
        ERROR_COOLDOWN: "你需要等待 {0} 才能再次拆开 {1}。",
    },
}


class Localizer:
    """按语言注册消息模板；缺失的语言或 key 回退到默认语言。"""

    def __init__(self, default_locale: str = DEFAULT_LOCALE) -> None:
        self.default_locale = default_locale
        self._tables: Dict[str, Dict[str, str]] = {}

    @classmethod
    def with_defaults(cls) -> "Localizer":
        loc = cls()
        for locale, messages in DEFAULT_MESSAGES.items():
            loc.register_messages(messages, locale)
        return loc

    def register_messages(self, messages: Dict[str, str], locale: str = DEFAULT_LOCALE) -> None:
        self._tables.setdefault(locale, {}).update(messages)

    def get_message(self, key: str, locale: Optional[str] = None, *args: object) -> str:
        template = None
        if locale:
            template = self._tables.get(locale, {}).get(key)
        if template is None:
            template = self._tables.get(self.default_locale, {}).get(key, key)
        if args:
            return template.format(*args)
        return template


def _unit(value: int, name: str) -> str:
    if value == 1:
        return f"1 {name}"
    return f"{value} {name}s"


def format_duration(seconds: float) -> str:
    """剩余时间文本，向上取整到秒，如 "1 minute 5 seconds"。"""
    total = int(math.ceil(seconds))
    if total < 60:
        return _unit(total, "second")

    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60

    if hours > 0:
        text = _unit(hours, "hour")
        if minutes > 0:
            text += " " + _unit(minutes, "minute")
        return text

    text = _unit(minutes, "minute")
    if secs > 0:
        text += " " + _unit(secs, "second")
    return text
