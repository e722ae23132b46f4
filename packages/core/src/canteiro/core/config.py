"""配置模块 -- 可通过环境变量覆盖

包含数据库路径、日志配置，以及状态引擎与分析引擎的可调参数。
"""

import os
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, Field

from .models.enums import ConstructionSystem

log = structlog.get_logger()


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("CANTEIRO_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 键值存储路径"""
    return os.environ.get(
        "CANTEIRO_DB_PATH",
        str(_get_base_dir() / "sqlite" / "canteiro.db"),
    )


# 持久化键名
TASKS_KEY: str = "app_tasks"
HISTORY_KEY_PREFIX: str = "history_"


def history_key(task_id: str) -> str:
    """获取任务审计日志的存储键"""
    return f"{HISTORY_KEY_PREFIX}{task_id}"


class EngineConfig(BaseModel):
    """状态引擎 / 分析引擎配置 -- 从环境变量加载

    环境变量:
        CANTEIRO_SWIPE_THRESHOLD: 滑动手势触发距离（默认 100）
        CANTEIRO_ANALYTICS_PAD_DAYS: 报告窗口两侧留白天数（默认 2）
        CANTEIRO_PHOTO_REQUIRED_SYSTEMS: 需要照片才能完成的体系（逗号分隔）
    """

    swipe_threshold: int = Field(
        default=100,
        ge=1,
        description="滑动距离超过该值才提交状态变更",
    )
    analytics_pad_days: int = Field(
        default=2,
        ge=0,
        description="报告窗口两侧留白天数",
    )
    photo_required_systems: frozenset[ConstructionSystem] = Field(
        default=frozenset({ConstructionSystem.LSF, ConstructionSystem.INSTALLATION}),
        description="标记 executed 前必须有照片的建造体系",
    )


def _int_env(name: str, kwargs: dict, field: str, fallback: int) -> None:
    if val := os.environ.get(name):
        try:
            kwargs[field] = int(val)
        except ValueError:
            log.warning(
                "invalid_engine_config",
                env_var=name,
                value=val,
                fallback=fallback,
            )


def load_engine_config() -> EngineConfig:
    """从环境变量加载引擎配置

    非法值记录 warning 并使用默认值，不阻塞启动。

    Returns:
        EngineConfig 实例
    """
    kwargs: dict = {}

    _int_env("CANTEIRO_SWIPE_THRESHOLD", kwargs, "swipe_threshold", 100)
    _int_env("CANTEIRO_ANALYTICS_PAD_DAYS", kwargs, "analytics_pad_days", 2)

    if val := os.environ.get("CANTEIRO_PHOTO_REQUIRED_SYSTEMS"):
        try:
            kwargs["photo_required_systems"] = frozenset(
                ConstructionSystem(part.strip()) for part in val.split(",") if part.strip()
            )
        except ValueError:
            log.warning(
                "invalid_engine_config",
                env_var="CANTEIRO_PHOTO_REQUIRED_SYSTEMS",
                value=val,
                fallback="LSF,Instalação",
            )

    try:
        return EngineConfig(**kwargs)
    except ValueError:
        # 范围校验失败（例如阈值 <= 0）时整体回退默认
        log.warning("invalid_engine_config_range", values=kwargs)
        return EngineConfig()


_LOG_FORMATS = ("dev", "json")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingConfig(BaseModel):
    """日志配置 -- 从环境变量加载

    环境变量:
        CANTEIRO_LOG_FORMAT: dev（默认，可读输出）或 json
        CANTEIRO_LOG_LEVEL: 标准库日志级别名（默认 INFO）
    """

    log_format: Literal["dev", "json"] = Field(default="dev", description="渲染模式")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="根 logger 级别"
    )


def load_logging_config() -> LoggingConfig:
    """从环境变量加载日志配置，非法值记录 warning 并使用默认值"""
    kwargs: dict = {}

    if val := os.environ.get("CANTEIRO_LOG_FORMAT"):
        if val.lower() in _LOG_FORMATS:
            kwargs["log_format"] = val.lower()
        else:
            log.warning(
                "invalid_logging_config",
                env_var="CANTEIRO_LOG_FORMAT",
                value=val,
                fallback="dev",
            )

    if val := os.environ.get("CANTEIRO_LOG_LEVEL"):
        if val.upper() in _LOG_LEVELS:
            kwargs["log_level"] = val.upper()
        else:
            log.warning(
                "invalid_logging_config",
                env_var="CANTEIRO_LOG_LEVEL",
                value=val,
                fallback="INFO",
            )

    return LoggingConfig(**kwargs)
