"""Progress Analytics Engine 单元测试

测试内容：
1. 报告窗口与留白
2. 计划 / 实际累计曲线（单调、最终收敛）
3. 同日完成的执行班组去重
4. 汇总统计：逾期、待闸门、按体系 / 状态分布
5. 空输入
"""

from datetime import UTC, date, datetime

from canteiro.core.analytics import (
    completion_date,
    compute_analytics,
    compute_progress_series,
    compute_summary,
    is_overdue,
    reporting_window,
    subtask_progress,
)
from canteiro.core.models import (
    ConstructionSystem,
    ExecutionStatus,
    GateCheck,
    GateStatus,
    Subtask,
)
from canteiro.core.seed import demo_tasks


class TestWindow:
    """报告窗口"""

    def test_empty_input(self):
        """空任务列表时曲线未定义"""
        assert reporting_window([]) is None
        assert compute_progress_series([]) is None
        assert compute_analytics([]) is None

    def test_padding(self, task_factory):
        """窗口两侧各留白 2 天"""
        start, end = reporting_window([task_factory()])
        assert start == date(2024, 2, 28)
        assert end == date(2024, 3, 7)

    def test_gate_date_extends_window(self, task_factory):
        """闸门日期参与窗口计算"""
        task = task_factory(
            status=ExecutionStatus.EXECUTED,
            gate=GateCheck(
                status=GateStatus.APPROVED,
                date=datetime(2024, 3, 10, 15, 0, tzinfo=UTC),
            ),
        )
        assert reporting_window([task], pad_days=0) == (date(2024, 3, 1), date(2024, 3, 10))

    def test_zero_length_window(self, task_factory):
        """窗口长度非正时返回 None"""
        task = task_factory(
            date_start_expected=date(2024, 3, 1), date_end_expected=date(2024, 3, 1)
        )
        assert reporting_window([task], pad_days=0) is None


class TestProgressSeries:
    """计划 / 实际完成曲线"""

    def test_single_executed_task(self, task_factory):
        """单个任务：计划在结束日跳到 100，实际在闸门日跳到 100"""
        task = task_factory(
            status=ExecutionStatus.EXECUTED,
            gate=GateCheck(
                status=GateStatus.APPROVED, date=datetime(2024, 3, 6, tzinfo=UTC)
            ),
        )
        series = compute_progress_series([task])
        assert len(series) == 9
        by_day = {p.day: p for p in series}

        assert by_day[date(2024, 3, 5)].planned_pct == 100
        assert by_day[date(2024, 3, 5)].actual_pct == 0
        assert by_day[date(2024, 3, 6)].actual_pct == 100
        assert by_day[date(2024, 3, 6)].executors == ["Equipe Civil"]
        assert by_day[date(2024, 3, 7)].executors == []

    def test_single_pending_task_curve(self, task_factory):
        """单个未执行任务：结束日之前计划为 0，之后为 100，实际始终为 0"""
        due = date(2024, 3, 5)
        series = compute_progress_series([task_factory()])

        before = [p for p in series if p.day < due]
        after = [p for p in series if p.day >= due]
        assert before and after
        assert all(p.planned_pct == 0 for p in before)
        assert all(p.planned_pct == 100 for p in after)
        assert all(p.actual_pct == 0 for p in series)

    def test_completion_date_falls_back_to_planned_end(self, task_factory):
        """没有闸门日期时以计划结束日期为完成日期"""
        task = task_factory(status=ExecutionStatus.EXECUTED)
        assert completion_date(task) == date(2024, 3, 5)

    def test_completion_date_uses_utc_day(self, task_factory):
        """闸门时间按 UTC 日历日归属，不换算本地时区"""
        task = task_factory(
            status=ExecutionStatus.EXECUTED,
            gate=GateCheck(
                status=GateStatus.APPROVED,
                date=datetime(2024, 3, 6, 1, 0, tzinfo=UTC),
            ),
        )
        # UTC-3 下该决策发生在 3 月 5 日晚上
        assert completion_date(task) == date(2024, 3, 6)
        point = next(p for p in compute_progress_series([task]) if p.day == date(2024, 3, 6))
        assert point.executors == ["Equipe Civil"]

    def test_unexecuted_tasks_never_count_as_actual(self, task_factory):
        """未执行的任务不计入实际完成"""
        series = compute_progress_series([task_factory(), task_factory("t2")])
        assert all(p.actual_pct == 0 for p in series)
        assert series[-1].planned_pct == 100

    def test_series_monotonic(self):
        """曲线按日期升序且单调不减，计划最终为 100"""
        series = compute_progress_series(demo_tasks())
        days = [p.day for p in series]
        assert days == sorted(days)
        for prev, cur in zip(series, series[1:]):
            assert cur.planned_pct >= prev.planned_pct
            assert cur.actual_pct >= prev.actual_pct
        assert series[-1].planned_pct == 100

    def test_executors_deduplicated(self, task_factory):
        """同日完成的执行班组去重，保持首次出现顺序"""
        gate = GateCheck(status=GateStatus.APPROVED, date=datetime(2024, 3, 5, tzinfo=UTC))
        tasks = [
            task_factory("a", status=ExecutionStatus.EXECUTED, executor="Eletricista", gate=gate),
            task_factory("b", status=ExecutionStatus.EXECUTED, executor="Encanador", gate=gate),
            task_factory("c", status=ExecutionStatus.EXECUTED, executor="Eletricista", gate=gate),
        ]
        point = next(p for p in compute_progress_series(tasks) if p.day == date(2024, 3, 5))
        assert point.executors == ["Eletricista", "Encanador"]

    def test_pure_and_repeatable(self):
        """重复计算结果一致，不修改输入"""
        tasks = demo_tasks()
        before = [t.model_dump() for t in tasks]
        first = compute_analytics(tasks, today=date(2023, 10, 10))
        second = compute_analytics(tasks, today=date(2023, 10, 10))
        assert first == second
        assert [t.model_dump() for t in tasks] == before


class TestSummary:
    """汇总统计"""

    def test_demo_project(self):
        """演示项目的各项统计"""
        summary = compute_summary(demo_tasks(), today=date(2023, 10, 17))
        assert summary.total == 5
        assert summary.executed == 2
        assert summary.progress_pct == 40
        assert summary.pending_gates == 1
        assert summary.blocked == 1
        # t3 (10-15) 已逾期；t4 (10-18)、t5 (10-19) 尚未到期
        assert summary.overdue_task_ids == ["t3"]
        assert summary.by_system[ConstructionSystem.HYBRID] == 2
        assert summary.by_system[ConstructionSystem.LSF] == 1
        assert summary.by_status.waiting == 1
        assert summary.by_status.active == 1
        assert summary.by_status.done == 2

    def test_empty_summary(self):
        """空任务列表各项为 0，按体系统计覆盖所有体系"""
        summary = compute_summary([], today=date(2024, 1, 1))
        assert summary.total == 0
        assert summary.progress_pct == 0.0
        assert set(summary.by_system) == set(ConstructionSystem)

    def test_overdue_is_calendar_day(self, task_factory):
        """逾期只比较日历日，已执行任务不算逾期"""
        task = task_factory()
        assert not is_overdue(task, date(2024, 3, 5))
        assert is_overdue(task, date(2024, 3, 6))
        executed = task_factory(status=ExecutionStatus.EXECUTED)
        assert not is_overdue(executed, date(2024, 4, 1))


class TestSubtaskProgress:
    """检查清单进度"""

    def test_no_subtasks(self, task_factory):
        """没有子任务时为 0"""
        assert subtask_progress(task_factory()) == 0

    def test_rounded(self, task_factory):
        """百分比四舍五入取整"""
        task = task_factory(
            subtasks=[
                Subtask(id="a", title="a", completed=True),
                Subtask(id="b", title="b"),
                Subtask(id="c", title="c"),
            ]
        )
        assert subtask_progress(task) == 33
