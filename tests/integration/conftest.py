"""集成测试共享 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from canteiro.core.store import StoreGroup, create_store_group


@pytest_asyncio.fixture
async def sqlite_store_group(tmp_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """SQLite 持久化的空 Store 组"""
    group = await create_store_group(str(tmp_path / "canteiro.db"))
    yield group
    await group.close()
