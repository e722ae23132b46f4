"""structlog 配置模块

CLI 与嵌入方共用一套处理器链。日志写到 stderr，stdout 留给命令输出。
"""

import logging
import sys
from typing import Any

import structlog

from .config import LoggingConfig, load_logging_config

# 第三方库只在出错时输出
_NOISY_LOGGERS = ("aiosqlite",)


def _shared_processors(log_format: str) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if log_format == "json":
        # JSON 模式下异常展开为字符串字段
        processors.append(structlog.processors.format_exc_info)
    return processors


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def setup_logging(config: LoggingConfig | None = None, **context: Any) -> None:
    """初始化 structlog 并绑定会话上下文

    Args:
        config: 日志配置，默认从环境变量加载
        **context: 绑定到本次会话所有日志的字段（例如 db_path、command）
    """
    config = config or load_logging_config()
    shared = _shared_processors(config.log_format)

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(config.log_format),
            foreign_pre_chain=shared,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(config.log_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.contextvars.clear_contextvars()
    if context:
        structlog.contextvars.bind_contextvars(**context)
