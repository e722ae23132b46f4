"""Progress Analytics Engine

纯函数：输入调用方已筛选的任务列表，输出计划 vs 实际的每日累计完成曲线和汇总统计。
不读取 Store、不修改输入，可在每次渲染时重复调用。

完成日期 = 闸门决策日期（如有），否则为计划结束日期。
"""

from collections.abc import Sequence
from datetime import date, timedelta

from .models.analytics import (
    AnalyticsReport,
    AnalyticsSummary,
    ProgressPoint,
    StatusBreakdown,
)
from .models.enums import (
    ACTIVE_STATES,
    ConstructionSystem,
    ExecutionStatus,
    GateStatus,
)
from .models.task import Task

DEFAULT_PAD_DAYS = 2


def completion_date(task: Task) -> date:
    """任务完成日期：闸门日期优先，否则计划结束日期

    闸门时间以 UTC 存储，这里取 UTC 日历日，不按运行环境的本地时区换算。
    UTC-3 晚上 22:00 的决策因此计入下一天。需要本地日历时，调用方应在写入
    gate.date 前自行换算。
    """
    if task.gate.date is not None:
        return task.gate.date.date()
    return task.date_end_expected


def _is_executed(task: Task) -> bool:
    return task.status == ExecutionStatus.EXECUTED


def reporting_window(
    tasks: Sequence[Task], pad_days: int = DEFAULT_PAD_DAYS
) -> tuple[date, date] | None:
    """计算报告窗口（含两侧留白），无任务或窗口长度非正时返回 None"""
    if not tasks:
        return None

    dates: list[date] = []
    for task in tasks:
        dates.append(task.date_start_expected)
        dates.append(task.date_end_expected)
        if task.gate.date is not None:
            dates.append(task.gate.date.date())

    start = min(dates) - timedelta(days=pad_days)
    end = max(dates) + timedelta(days=pad_days)
    if end <= start:
        return None
    return start, end


def compute_progress_series(
    tasks: Sequence[Task], pad_days: int = DEFAULT_PAD_DAYS
) -> list[ProgressPoint] | None:
    """计算每日计划/实际完成百分比曲线

    Returns:
        按日期升序的 ProgressPoint 列表；窗口未定义时返回 None
    """
    window = reporting_window(tasks, pad_days)
    if window is None:
        return None
    start, end = window

    total = len(tasks)
    executed = [(task, completion_date(task)) for task in tasks if _is_executed(task)]

    points: list[ProgressPoint] = []
    day = start
    while day <= end:
        planned = sum(1 for task in tasks if task.date_end_expected <= day)
        actual = sum(1 for _, done in executed if done <= day)
        # 同一天多个任务完成时按执行班组去重，保持首次出现顺序
        executors = list(dict.fromkeys(task.executor for task, done in executed if done == day))
        points.append(
            ProgressPoint(
                day=day,
                planned_pct=planned / total * 100,
                actual_pct=actual / total * 100,
                executors=executors,
            )
        )
        day += timedelta(days=1)
    return points


def is_overdue(task: Task, today: date) -> bool:
    """未完成且计划结束日期早于今天（只比较日历日）"""
    return not _is_executed(task) and task.date_end_expected < today


def compute_summary(tasks: Sequence[Task], today: date | None = None) -> AnalyticsSummary:
    """汇总统计，空列表时各项为 0"""
    today = today or date.today()
    total = len(tasks)
    executed = sum(1 for task in tasks if _is_executed(task))
    blocked = sum(1 for task in tasks if task.status == ExecutionStatus.BLOCKED)
    overdue_ids = [task.id for task in tasks if is_overdue(task, today)]

    return AnalyticsSummary(
        total=total,
        executed=executed,
        progress_pct=executed / total * 100 if total else 0.0,
        pending_gates=sum(
            1
            for task in tasks
            if _is_executed(task) and task.gate.status == GateStatus.PENDING
        ),
        blocked=blocked,
        overdue=len(overdue_ids),
        overdue_task_ids=overdue_ids,
        by_system={
            system: sum(1 for task in tasks if task.system == system)
            for system in ConstructionSystem
        },
        by_status=StatusBreakdown(
            waiting=sum(
                1 for task in tasks if task.status == ExecutionStatus.AWAITING_START
            ),
            active=sum(1 for task in tasks if task.status in ACTIVE_STATES),
            blocked=blocked,
            done=executed,
        ),
    )


def compute_analytics(
    tasks: Sequence[Task],
    today: date | None = None,
    pad_days: int = DEFAULT_PAD_DAYS,
) -> AnalyticsReport | None:
    """曲线 + 汇总；曲线未定义（无任务）时返回 None，调用方需显式处理"""
    window = reporting_window(tasks, pad_days)
    series = compute_progress_series(tasks, pad_days)
    if window is None or series is None:
        return None
    return AnalyticsReport(
        window_start=window[0],
        window_end=window[1],
        series=series,
        summary=compute_summary(tasks, today),
    )


def subtask_progress(task: Task) -> int:
    """检查清单完成百分比（四舍五入取整），无子任务时为 0"""
    if not task.subtasks:
        return 0
    done = sum(1 for subtask in task.subtasks if subtask.completed)
    return round(done / len(task.subtasks) * 100)
