"""Reactor 模块错误类型。"""

from __future__ import annotations


class ReactorError(Exception):
    """Reactor 领域错误基类。"""


class ConfigError(ReactorError):
    """配置文件无法读取或结构非法。"""


class StateFileError(ReactorError):
    """冷却状态文件读写失败。"""
