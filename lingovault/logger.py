"""
日志模块 (Logging Module)
========================

lingovault.* 下的所有日志器共用一个输出到 stdout 的处理器，
默认级别 INFO，可用 LOG_LEVEL 环境变量（DEBUG / WARNING 等）调整。
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "lingovault"

_handler: Optional[logging.Handler] = None


def level_from_env(default: int = logging.INFO) -> int:
    """LOG_LEVEL 为未知名称时回退到 default。"""
    name = os.getenv("LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def _ensure_handler() -> None:
    global _handler
    if _handler is not None:
        return
    level = level_from_env()
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setLevel(level)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.addHandler(_handler)
    root.propagate = False


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """按模块名取日志器；level 只作用于该日志器本身。"""
    _ensure_handler()
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_level(level: int, logger_name: Optional[str] = None) -> None:
    """
    调整日志级别。

    不传 logger_name 时同时调整 lingovault 根日志器与共享处理器，
    否则只调整指定日志器（如 "lingovault.extract"）。
    """
    _ensure_handler()
    logger = logging.getLogger(logger_name or ROOT_LOGGER_NAME)
    logger.setLevel(level)
    if logger_name is None and _handler is not None:
        _handler.setLevel(level)
