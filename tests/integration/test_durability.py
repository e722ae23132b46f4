"""持久性集成测试

关闭 Store 后重新打开，任务快照与审计日志完整。
"""

from pathlib import Path

from canteiro.core.config import TASKS_KEY
from canteiro.core.models import ExecutionStatus, GateStatus
from canteiro.core.seed import DEMO_USERS, demo_tasks
from canteiro.core.service import TaskService
from canteiro.core.store import create_store_group
from canteiro.core.store.kv_store import SqliteKeyValueStore
from canteiro.core.transitions import TransitionContext

MANAGER, EXECUTOR, _ = DEMO_USERS


class TestDurability:
    """进程重启后数据不丢失"""

    async def test_state_survives_restart(self, tmp_path: Path):
        """状态变更与审计日志在重启后都能读回"""
        db_path = str(tmp_path / "durable.db")

        # 第一次启动：演示数据 + 状态变更
        sg1 = await create_store_group(db_path, default=demo_tasks())
        service = TaskService(sg1)
        await service.apply_status(
            "t4", ExecutionStatus.IN_PROGRESS, TransitionContext(actor=EXECUTOR)
        )
        await service.decide_gate("t2", GateStatus.APPROVED_WITH_RESERVATIONS, MANAGER)
        await sg1.close()

        # 第二次启动：默认数据不覆盖已持久化的快照
        sg2 = await create_store_group(db_path, default=[])
        try:
            service = TaskService(sg2)
            t4 = await service.get_task("t4")
            assert t4.status == ExecutionStatus.IN_PROGRESS
            assert t4.blocked_reason is None
            assert (await service.get_task("t2")).gate.status == (
                GateStatus.APPROVED_WITH_RESERVATIONS
            )
            history = await service.get_history("t4")
            assert len(history) == 1
            assert history[0].previous_status == ExecutionStatus.BLOCKED
        finally:
            await sg2.close()

    async def test_corrupt_snapshot_falls_back_to_default(self, tmp_path: Path):
        """快照损坏时回退默认数据并记录 warning"""
        db_path = str(tmp_path / "corrupt.db")
        sg1 = await create_store_group(db_path)
        await SqliteKeyValueStore(sg1.conn).set(TASKS_KEY, "[{broken")
        await sg1.close()

        sg2 = await create_store_group(db_path, default=demo_tasks())
        try:
            assert len(sg2.task_store) == 5
            assert sg2.warnings[0].key == TASKS_KEY
        finally:
            await sg2.close()
