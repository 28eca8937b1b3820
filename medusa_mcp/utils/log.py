"""日志模块 / Logging Module

提供 Medusa MCP 全局 logger。日志输出到 stderr, stdout 保留给协议通信。
Provides the package-wide logger. Output goes to stderr; stdout is reserved
for protocol traffic.
"""

import logging
import os
import sys

LOGGER_NAME = "medusa_mcp"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _resolve_level() -> int:
    level = os.getenv("MEDUSA_MCP_LOG_LEVEL")
    if level:
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.INFO
    if os.getenv("DEBUG") or os.getenv("NODE_ENV") == "development":
        return logging.DEBUG
    return logging.INFO


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """获取已配置的 logger / Get a configured logger"""
    _logger = logging.getLogger(name)
    if not _logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _logger.addHandler(handler)
        _logger.setLevel(_resolve_level())
    return _logger


logger = get_logger()
