from __future__ import annotations

import inspect
import logging
import sys
from typing import Optional

from loguru import logger


_configured = False

_LOGURU_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"})


def _caller_depth(frame) -> int:
    """从 emit 所在帧向上数，跳过 stdlib logging 内部帧，得到 loguru 的 depth"""
    depth = 0
    while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
        frame = frame.f_back
        depth += 1
    return depth


class _InterceptHandler(logging.Handler):
    """
    config_provider / cooldowns / plugin 使用 stdlib logging，
    这里把它们的记录转交给 loguru，与 pipeline 的日志共用同一组 sink。
    """

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int = record.levelno
        if record.levelname in _LOGURU_LEVELS:
            level = record.levelname
        logger.opt(depth=_caller_depth(inspect.currentframe()), exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    *,
    level: str = "INFO",
    force: bool = False,
    log_file: Optional[str] = None,
    fmt: Optional[str] = None,
) -> None:
    """
    Configure one global loguru sink (plus an optional rotating file).

    Parameters:
    - level: minimum level.
    - force: reconfigure even if already configured.
    - log_file: optional path; executed commands and blocked commands end up here too.
    - fmt: optional custom format.
    """
    global _configured

    if _configured and not force:
        return

    logger.remove()

    fmt = fmt or (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )
    logger.add(sys.stderr, level=level.upper(), colorize=True, format=fmt)

    if log_file:
        logger.add(
            log_file,
            level=level.upper(),
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
            format=fmt,
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    _configured = True
