"""
描述: 节点基类定义
主要功能:
    - 定义 BaseNode 抽象基类与 NodeContext 上下文
    - 统一的参数读取与校验辅助函数
    - 透传型节点的标准输出 (status_code / body / json)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from seatable_nodes.config import Settings
from seatable_nodes.seatable.client import RawResponse, SeaTableClient
from seatable_nodes.seatable.registry import ClientRegistry, ConnectionConfig


class InvalidArgumentError(ValueError):
    """节点输入缺失或非法 (不重试，直接返回给调用方)"""


# region 节点上下文与基类
@dataclass
class NodeContext:
    """节点执行上下文 (依赖注入)"""
    settings: Settings
    registry: ClientRegistry
    client_factory: Callable[[ConnectionConfig], SeaTableClient] | None = None

    def create_client(self, config: ConnectionConfig) -> SeaTableClient:
        if self.client_factory is not None:
            return self.client_factory(config)
        return SeaTableClient(config, self.settings.seatable.request)


class BaseNode(ABC):
    """节点抽象基类"""
    name: str = ""
    description: str = ""
    parameters: dict[str, Any] = {}

    def __init__(self, context: NodeContext) -> None:
        self.context = context
        if not self.name:
            raise ValueError(f"{self.__class__.__name__} must define 'name' attribute")

    @abstractmethod
    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        执行节点逻辑

        参数:
            params: 节点输入字典

        返回:
            节点输出字典
        """
        raise NotImplementedError

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }

    def resolve_client(self, params: dict[str, Any]) -> SeaTableClient:
        """按 client_id 查找连接配置并创建客户端"""
        client_id = optional_text(params, "client_id")
        config = self.context.registry.lookup(client_id) if client_id else None
        if config is None:
            raise InvalidArgumentError("Unknown Client ID - run SeaTable Connect first")
        return self.context.create_client(config)
# endregion


# region 参数辅助函数
def optional_text(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if value is None:
        return ""
    return str(value).strip()


def require_text(params: dict[str, Any], key: str, label: str) -> str:
    value = optional_text(params, key)
    if not value:
        raise InvalidArgumentError(f"{label} is required")
    return value


def optional_int(params: dict[str, Any], key: str, default: int) -> int:
    value = params.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{key} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidArgumentError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"{key} must be an integer") from exc


def optional_bool(params: dict[str, Any], key: str, default: bool) -> bool:
    value = params.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        raise InvalidArgumentError(f"{key} must be a boolean")
    return bool(value)


def passthrough_output(response: RawResponse) -> dict[str, Any]:
    """透传型节点输出：非 2xx 也作为正常结果返回"""
    return {
        "status_code": response.status_code,
        "body": response.text,
        "json": response.json(),
    }
# endregion
