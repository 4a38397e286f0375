from __future__ import annotations

import json
from typing import Any, Callable

from seatable_nodes.config import Settings
from seatable_nodes.nodes.base import NodeContext
from seatable_nodes.seatable.client import RawResponse, SeaTableClient
from seatable_nodes.seatable.registry import ClientRegistry, ConnectionConfig


SERVER = "https://cloud.seatable.io"
BASE_UUID = "5c264e76-0e5a-448a-9f34-580b551364ca"
API_BASE = f"{SERVER}/api-gateway/api/v2/dtables/{BASE_UUID}"

Handler = Callable[[str, str, dict[str, Any] | None, Any], tuple[int, Any]]


def _ok_empty(method: str, url: str, params: dict[str, Any] | None, json_body: Any) -> tuple[int, Any]:
    return 200, {}


class FakeClient(SeaTableClient):
    """记录调用并按 handler 返回 (status, payload)，payload 为 bytes 时原样作为响应体"""

    def __init__(self, handler: Handler = _ok_empty) -> None:
        super().__init__(ConnectionConfig(server=SERVER, base_uuid=BASE_UUID, token="secret"))
        self._handler = handler
        self.calls: list[dict[str, Any]] = []

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
        timeout: float | None = None,
    ) -> RawResponse:
        self.calls.append({"method": method, "url": url, "params": params, "json_body": json_body})
        status, payload = self._handler(method, url, params, json_body)
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        return RawResponse(body=body, status_code=status)


def build_context(client: SeaTableClient) -> tuple[NodeContext, str]:
    """返回注入了 client 的上下文，以及已注册的 client_id"""
    registry = ClientRegistry()
    client_id = registry.register(client.config)
    context = NodeContext(
        settings=Settings(),
        registry=registry,
        client_factory=lambda _config: client,
    )
    return context, client_id
