"""
描述: 连接节点
主要功能:
    - 校验服务地址 / Base UUID / Base Token
    - 注册连接配置并输出 Client ID 供后续节点复用
"""

from __future__ import annotations

import logging
from typing import Any

from seatable_nodes.nodes.base import BaseNode, InvalidArgumentError, require_text
from seatable_nodes.nodes.registry import NodeRegistry
from seatable_nodes.seatable.registry import ConnectionConfig


logger = logging.getLogger(__name__)


def _resolve_token(value: Any) -> str:
    """Base Token 可以是字符串，也可以是凭证库条目 {"value": "..."}"""
    if value is None:
        raise InvalidArgumentError("Base Token is required")
    if isinstance(value, dict):
        if "value" not in value:
            raise InvalidArgumentError("Vault item missing 'value'")
        value = value["value"]
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError("Invalid Base Token value")
    return value


@NodeRegistry.register
class ConnectNode(BaseNode):
    """创建 SeaTable 连接并输出 Client ID"""

    name = "seatable.v1.connect"
    description = "Register a SeaTable base connection and return a reusable client id."
    parameters = {
        "type": "object",
        "properties": {
            "server_url": {"type": "string", "description": "SeaTable 服务地址"},
            "base_uuid": {"type": "string", "description": "Base UUID"},
            "base_token": {
                "type": ["string", "object"],
                "description": "Base API Token，或凭证条目 {\"value\": ...}",
            },
        },
        "required": ["server_url", "base_uuid", "base_token"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        server = require_text(params, "server_url", "Server URL").rstrip("/")
        if not server:
            raise InvalidArgumentError("Server URL is required")
        base_uuid = require_text(params, "base_uuid", "Base UUID")
        token = _resolve_token(params.get("base_token"))

        client_id = self.context.registry.register(
            ConnectionConfig(server=server, base_uuid=base_uuid, token=token)
        )
        logger.info("SeaTable client registered", extra={"client_id": client_id, "server": server})
        return {"client_id": client_id}
