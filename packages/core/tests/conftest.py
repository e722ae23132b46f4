"""packages/core 测试配置 -- 核心层 fixture"""

from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from canteiro.core.models import (
    ConstructionSystem,
    ExecutionStatus,
    ProjectStage,
    Task,
    User,
    UserRole,
)
from canteiro.core.seed import demo_tasks
from canteiro.core.service import TaskService
from canteiro.core.store import StoreGroup, create_memory_store_group
from canteiro.core.store.kv_store import InMemoryKeyValueStore


class FailingKeyValueStore(InMemoryKeyValueStore):
    """读写可按需失败的 KeyValueStore"""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        super().__init__(data)
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise OSError(f"read failed: {key}")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError(f"quota exceeded: {key}")
        await super().set(key, value)


def make_task(task_id: str = "t-test", **overrides) -> Task:
    """构造测试任务"""
    fields = {
        "id": task_id,
        "title": "Teste",
        "stage": ProjectStage.STRUCTURAL,
        "system": ConstructionSystem.MASONRY,
        "executor": "Equipe Civil",
        "date_start_expected": date(2024, 3, 1),
        "date_end_expected": date(2024, 3, 5),
    }
    fields.update(overrides)
    return Task(**fields)


@pytest.fixture
def manager() -> User:
    return User(id="u1", name="Eng. Carlos (GP)", role=UserRole.PROJECT_MANAGER)


@pytest.fixture
def executor() -> User:
    return User(id="u2", name="Mestre João (Executor)", role=UserRole.FIELD_EXECUTOR)


@pytest.fixture
def client_user() -> User:
    return User(id="u3", name="Cliente Ana", role=UserRole.CLIENT)


@pytest.fixture
def kv() -> FailingKeyValueStore:
    return FailingKeyValueStore()


@pytest_asyncio.fixture
async def store_group(kv: FailingKeyValueStore) -> AsyncGenerator[StoreGroup, None]:
    """预置演示任务的内存 Store 组"""
    group = await create_memory_store_group(default=demo_tasks(), kv=kv)
    yield group
    await group.close()


@pytest.fixture
def service(store_group: StoreGroup) -> TaskService:
    return TaskService(store_group)


@pytest.fixture
def in_progress_task() -> Task:
    return make_task(status=ExecutionStatus.IN_PROGRESS)


@pytest.fixture
def task_factory():
    """返回 make_task 构造函数"""
    return make_task
