"""
描述: SeaTable API 访问层
主要功能:
    - 连接注册表、HTTP 客户端
    - 分页读取与自动关联
"""

from seatable_nodes.seatable.client import (
    RawResponse,
    SeaTableAPIError,
    SeaTableClient,
    SeaTableError,
    SeaTableResponseError,
    SeaTableTransportError,
)
from seatable_nodes.seatable.registry import ClientRegistry, ConnectionConfig

__all__ = [
    "ClientRegistry",
    "ConnectionConfig",
    "RawResponse",
    "SeaTableAPIError",
    "SeaTableClient",
    "SeaTableError",
    "SeaTableResponseError",
    "SeaTableTransportError",
]
