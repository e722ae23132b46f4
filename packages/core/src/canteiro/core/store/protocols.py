"""Store Protocol 接口定义

持久化端口：核心逻辑只依赖键值存储接口，
使用 Python Protocol 实现结构化子类型（duck typing），测试时可替换为内存实现。
"""

from typing import Protocol


class KeyValueStore(Protocol):
    """客户端本地键值持久化接口

    值为 JSON 文本，每次写入整体覆盖。
    """

    async def get(self, key: str) -> str | None:
        """读取键值，不存在时返回 None"""
        ...

    async def set(self, key: str, value: str) -> None:
        """写入键值（覆盖）"""
        ...

    async def keys(self, prefix: str = "") -> list[str]:
        """列出指定前缀的所有键"""
        ...
