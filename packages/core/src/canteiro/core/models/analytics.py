"""Analytics 输出模型

计划 vs 实际完成曲线与汇总统计，均为派生数据，不持久化。
"""

from datetime import date

from pydantic import BaseModel, Field

from .enums import ConstructionSystem


class ProgressPoint(BaseModel):
    """单日进度点"""

    day: date = Field(description="日期")
    planned_pct: float = Field(description="计划完成百分比")
    actual_pct: float = Field(description="实际完成百分比")
    executors: list[str] = Field(
        default_factory=list,
        description="当天完成任务的执行班组（去重）",
    )


class StatusBreakdown(BaseModel):
    """状态分布（简化为四类）"""

    waiting: int = 0
    active: int = 0
    blocked: int = 0
    done: int = 0


class AnalyticsSummary(BaseModel):
    """汇总统计，与曲线无关，空任务列表同样有定义"""

    total: int = 0
    executed: int = 0
    progress_pct: float = 0.0
    pending_gates: int = 0
    blocked: int = 0
    overdue: int = 0
    overdue_task_ids: list[str] = Field(default_factory=list)
    by_system: dict[ConstructionSystem, int] = Field(default_factory=dict)
    by_status: StatusBreakdown = Field(default_factory=StatusBreakdown)


class AnalyticsReport(BaseModel):
    """曲线 + 汇总"""

    window_start: date
    window_end: date
    series: list[ProgressPoint]
    summary: AnalyticsSummary
