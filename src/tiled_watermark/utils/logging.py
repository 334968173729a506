"""日志配置工具。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s"
LOGGER_NAME = "tiled_watermark"


def setup_logging(level: int = logging.INFO, log_file: Optional[Path] = None) -> logging.Logger:
    """初始化项目日志配置，返回供批处理使用的日志器。"""

    logger = logging.getLogger(LOGGER_NAME)
    shutdown_logging(logger)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def shutdown_logging(logger: logging.Logger) -> None:
    """刷新并关闭日志器上的处理器。"""

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.flush()
        handler.close()
