"""
描述: 元数据节点
主要功能:
    - 获取 Base 元数据 (表结构)
    - 列出表的列 / 视图
"""

from __future__ import annotations

from typing import Any

from seatable_nodes.nodes.base import BaseNode, optional_text, passthrough_output, require_text
from seatable_nodes.nodes.registry import NodeRegistry
from seatable_nodes.utils.parsing import extract_list


def _extract_tables(payload: Any) -> Any:
    """优先 metadata.tables，其次根级 tables"""
    if isinstance(payload, dict):
        metadata = payload.get("metadata")
        if isinstance(metadata, dict) and metadata.get("tables") is not None:
            return metadata["tables"]
        if payload.get("tables") is not None:
            return payload["tables"]
    return []


@NodeRegistry.register
class GetMetadataNode(BaseNode):
    """获取 Base 元数据"""

    name = "seatable.v1.get_metadata"
    description = "Retrieve the metadata (tables and columns) of a base."
    parameters = {
        "type": "object",
        "properties": {"client_id": {"type": "string"}},
        "required": ["client_id"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        response = await client.request("GET", client.dtable_url("metadata/"))
        output = passthrough_output(response)
        output["tables"] = _extract_tables(output["json"])
        return output


@NodeRegistry.register
class ListColumnsNode(BaseNode):
    name = "seatable.v1.list_columns"
    description = "List the columns of a table, optionally in view order."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "table_name": {"type": "string"},
            "view_name": {"type": "string"},
        },
        "required": ["client_id", "table_name"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        query: dict[str, Any] = {"table_name": require_text(params, "table_name", "Table Name")}
        view_name = optional_text(params, "view_name")
        if view_name:
            query["view_name"] = view_name

        response = await client.request("GET", client.dtable_url("columns/"), params=query)
        output = passthrough_output(response)
        columns = extract_list(output["json"], "columns")
        output["columns"] = columns
        output["count"] = len(columns)
        return output


@NodeRegistry.register
class ListViewsNode(BaseNode):
    name = "seatable.v1.list_views"
    description = "List the views of a table."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "table_name": {"type": "string"},
        },
        "required": ["client_id", "table_name"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        table_name = require_text(params, "table_name", "Table Name")

        response = await client.request("GET", client.dtable_url("views/"), params={"table_name": table_name})
        output = passthrough_output(response)
        views = extract_list(output["json"], "views")
        output["views"] = views
        output["count"] = len(views)
        return output
