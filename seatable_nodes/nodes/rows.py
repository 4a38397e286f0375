"""
描述: 行操作节点
主要功能:
    - 行的列出 / 追加 / 更新 / 删除
    - 按 ID 获取单行
    - 分页批量读取
"""

from __future__ import annotations

from typing import Any

from seatable_nodes.nodes.base import (
    BaseNode,
    InvalidArgumentError,
    optional_bool,
    optional_int,
    optional_text,
    passthrough_output,
    require_text,
)
from seatable_nodes.nodes.registry import NodeRegistry
from seatable_nodes.seatable.rows import DEFAULT_MAX_ROWS, DEFAULT_PAGE_SIZE, fetch_all_rows


ROW_ACTIONS = ("list", "append", "update", "delete")


@NodeRegistry.register
class RowsNode(BaseNode):
    """
    行增删改查

    功能:
        - list: GET rows/ (table_name, view_name, start, limit, convert_keys)
        - append: POST {table_name, row}
        - update: PUT {table_name, row_id, row}
        - delete: DELETE {table_name, row_id}
    """

    name = "seatable.v1.rows"
    description = "List, append, update or delete rows of a table."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "action": {"type": "string", "enum": list(ROW_ACTIONS), "default": "list"},
            "table_name": {"type": "string"},
            "view_name": {"type": "string"},
            "start": {"type": "integer", "default": 0},
            "limit": {"type": "integer", "default": 1000},
            "convert_keys": {"type": "boolean", "default": True},
            "row_id": {"type": "string", "description": "update / delete 必填"},
            "row_data": {"type": "object", "description": "append / update 必填"},
        },
        "required": ["client_id", "table_name"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        table_name = require_text(params, "table_name", "Table Name")
        action = optional_text(params, "action").lower() or "list"
        url = client.dtable_url("rows/")

        if action == "list":
            query: dict[str, Any] = {"table_name": table_name}
            view_name = optional_text(params, "view_name")
            if view_name:
                query["view_name"] = view_name
            start = optional_int(params, "start", 0)
            if start > 0:
                query["start"] = str(start)
            limit = optional_int(params, "limit", 1000)
            if limit > 0:
                query["limit"] = str(limit)
            if optional_bool(params, "convert_keys", True):
                query["convert_keys"] = "true"
            response = await client.request("GET", url, params=query)
        elif action == "append":
            row = params.get("row_data")
            if row is None:
                raise InvalidArgumentError("Row Data is required for append")
            response = await client.request("POST", url, json_body={"table_name": table_name, "row": row})
        elif action == "update":
            row_id = optional_text(params, "row_id")
            if not row_id:
                raise InvalidArgumentError("Row ID is required for update")
            row = params.get("row_data")
            if row is None:
                raise InvalidArgumentError("Row Data is required for update")
            response = await client.request(
                "PUT",
                url,
                json_body={"table_name": table_name, "row_id": row_id, "row": row},
            )
        elif action == "delete":
            row_id = optional_text(params, "row_id")
            if not row_id:
                raise InvalidArgumentError("Row ID is required for delete")
            response = await client.request(
                "DELETE",
                url,
                json_body={"table_name": table_name, "row_id": row_id},
            )
        else:
            raise InvalidArgumentError("Unsupported action for Rows")

        return passthrough_output(response)


@NodeRegistry.register
class GetRowNode(BaseNode):
    """按 ID 获取单行"""

    name = "seatable.v1.get_row"
    description = "Fetch a single row by id, optionally constrained by a view."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "table_name": {"type": "string"},
            "row_id": {"type": "string"},
            "view_name": {"type": "string"},
            "convert_keys": {"type": "boolean", "default": True},
        },
        "required": ["client_id", "table_name", "row_id"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        table_name = require_text(params, "table_name", "Table Name")
        row_id = require_text(params, "row_id", "Row ID")

        query: dict[str, Any] = {"table_name": table_name}
        view_name = optional_text(params, "view_name")
        if view_name:
            query["view_name"] = view_name
        if optional_bool(params, "convert_keys", True):
            query["convert_keys"] = "true"

        response = await client.request("GET", client.dtable_url(f"rows/{row_id}/"), params=query)
        output = passthrough_output(response)
        payload = output["json"]
        if isinstance(payload, dict) and "row" in payload:
            output["row"] = payload["row"]
        else:
            output["row"] = payload
        return output


@NodeRegistry.register
class RowsGetManyNode(BaseNode):
    """分页读取多行，直到表尽、短页或达到 max_rows"""

    name = "seatable.v1.rows_get_many"
    description = "Collect many rows by paginating the list rows endpoint."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "table_name": {"type": "string"},
            "view_name": {"type": "string"},
            "start": {"type": "integer", "default": 0},
            "page_size": {"type": "integer", "default": DEFAULT_PAGE_SIZE},
            "max_rows": {"type": "integer", "default": DEFAULT_MAX_ROWS},
            "convert_keys": {"type": "boolean", "default": True},
        },
        "required": ["client_id", "table_name"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        table_name = require_text(params, "table_name", "Table Name")

        result = await fetch_all_rows(
            client,
            table_name,
            view_name=optional_text(params, "view_name") or None,
            start=optional_int(params, "start", 0),
            page_size=optional_int(params, "page_size", DEFAULT_PAGE_SIZE),
            max_rows=optional_int(params, "max_rows", DEFAULT_MAX_ROWS),
            convert_keys=optional_bool(params, "convert_keys", True),
        )
        return {
            "status_code": result.status_code,
            "rows": result.rows,
            "count": result.count,
            "json": {"rows": result.rows, "count": result.count, "start": result.start},
        }
