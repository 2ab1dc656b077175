"""
日志配置
统一的日志格式，级别由配置中的 log_level 决定
"""

import logging

from ..config.settings import settings

_configured = False


def get_logger(name: str = "storefront") -> logging.Logger:
    """获取已完成基础配置的logger"""
    global _configured
    if not _configured:
        logging.basicConfig(
            level=settings.log_level.upper(),
            format="%(asctime)s - %(levelname)s - [%(name)s] %(message)s",
        )
        logging.getLogger("duckdb").setLevel(logging.WARNING)
        _configured = True
    return logging.getLogger(name)
