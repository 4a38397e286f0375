"""
描述: 节点注册中心
主要功能:
    - 统一管理所有节点类的注册
    - 提供节点查找与元数据列表
"""

from __future__ import annotations

import logging
from typing import Any, Type

from seatable_nodes.nodes.base import BaseNode


# region 节点注册中心
class NodeRegistry:
    """节点注册中心 (类级单例)"""
    _nodes: dict[str, Type[BaseNode]] = {}
    _logger = logging.getLogger(__name__)

    @classmethod
    def register(cls, node_cls: Type[BaseNode]) -> Type[BaseNode]:
        node_name = getattr(node_cls, "name", "")
        if not node_name:
            cls._logger.warning(
                "Node %s has no 'name' attribute, skipping registration",
                node_cls.__name__,
            )
            return node_cls
        if node_name in cls._nodes:
            cls._logger.warning("Node %s already registered, overwriting", node_name)
        cls._nodes[node_name] = node_cls
        return node_cls

    @classmethod
    def get(cls, name: str) -> Type[BaseNode] | None:
        return cls._nodes.get(name)

    @classmethod
    def names(cls) -> list[str]:
        return sorted(cls._nodes)

    @classmethod
    def list_nodes(cls) -> list[dict[str, Any]]:
        """获取所有已注册节点的元数据"""
        return [
            {
                "name": node_cls.name,
                "description": node_cls.description,
                "parameters": node_cls.parameters,
            }
            for node_cls in cls._nodes.values()
        ]
# endregion
