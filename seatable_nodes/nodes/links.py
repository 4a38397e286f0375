"""
描述: 关联节点
主要功能:
    - 单条关联的添加 / 覆盖 / 移除
    - 按键列自动关联两张表
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
from seatable_nodes.seatable.linking import DEFAULT_MAX_LINK_ROWS, LINK_MODE_OVERRIDE, auto_link
from seatable_nodes.utils.parsing import parse_row_ids


@NodeRegistry.register
class LinkNode(BaseNode):
    """
    管理两表之间的行关联

    功能:
        - add: POST 添加一条关联
        - remove: DELETE 移除一条关联
        - update: PUT 用 other_row_ids 覆盖该行的全部关联
    """

    name = "seatable.v1.link"
    description = "Add, update or remove links between rows of two tables."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "operation": {"type": "string", "enum": ["add", "update", "remove"]},
            "link_id": {"type": "string"},
            "table_name": {"type": "string"},
            "other_table_name": {"type": "string"},
            "row_id": {"type": "string"},
            "other_row_id": {"type": "string", "description": "add / remove 必填"},
            "other_row_ids": {
                "type": ["string", "array"],
                "description": "update 必填：逗号分隔或 JSON 数组",
            },
        },
        "required": ["client_id", "operation", "link_id", "table_name", "other_table_name", "row_id"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        operation = optional_text(params, "operation").lower()
        link_id = optional_text(params, "link_id")
        table_name = optional_text(params, "table_name")
        other_table_name = optional_text(params, "other_table_name")
        row_id = optional_text(params, "row_id")
        if not (link_id and table_name and other_table_name and row_id):
            raise InvalidArgumentError("Link ID, Table, Other Table and Row ID are required")

        if operation in ("add", "remove"):
            other_row_id = optional_text(params, "other_row_id")
            if not other_row_id:
                raise InvalidArgumentError(f"Other Row ID is required for {operation}")
            method = "POST" if operation == "add" else "DELETE"
            payload: dict[str, Any] = {
                "link_id": link_id,
                "table_name": table_name,
                "other_table_name": other_table_name,
                "table_row_id": row_id,
                "other_table_row_id": other_row_id,
            }
        elif operation == "update":
            raw = params.get("other_row_ids")
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                raise InvalidArgumentError("Other Row IDs is required for update")
            try:
                other_row_ids = parse_row_ids(raw)
            except ValueError as exc:
                raise InvalidArgumentError(f"parse Other Row IDs: {exc}") from exc
            method = "PUT"
            payload = {
                "link_id": link_id,
                "table_name": table_name,
                "other_table_name": other_table_name,
                "row_id": row_id,
                "other_rows_ids": other_row_ids,
            }
        else:
            raise InvalidArgumentError("Operation must be add, update or remove")

        response = await client.request(method, client.dtable_url("links/"), json_body=payload)
        return passthrough_output(response)


@NodeRegistry.register
class AutoLinkNode(BaseNode):
    """
    按键列自动关联

    左表每个命中行的关联集合被整体替换为右表中键值相同的行 (override 模式)。
    dry_run 时只统计，不调用关联接口。
    """

    name = "seatable.v1.auto_link"
    description = "Link rows of two tables whose key columns hold the same value."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "table_name": {"type": "string", "description": "左表"},
            "other_table_name": {"type": "string", "description": "右表"},
            "link_id": {"type": "string"},
            "left_key_column": {"type": "string"},
            "right_key_column": {"type": "string"},
            "mode": {"type": "string", "enum": [LINK_MODE_OVERRIDE], "default": LINK_MODE_OVERRIDE},
            "max_left_rows": {"type": "integer", "default": DEFAULT_MAX_LINK_ROWS},
            "max_right_rows": {"type": "integer", "default": DEFAULT_MAX_LINK_ROWS},
            "dry_run": {"type": "boolean", "default": False},
        },
        "required": [
            "client_id",
            "table_name",
            "other_table_name",
            "link_id",
            "left_key_column",
            "right_key_column",
        ],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        table_name = optional_text(params, "table_name")
        other_table_name = optional_text(params, "other_table_name")
        link_id = optional_text(params, "link_id")
        left_key_column = optional_text(params, "left_key_column")
        right_key_column = optional_text(params, "right_key_column")
        if not (table_name and other_table_name and link_id and left_key_column and right_key_column):
            raise InvalidArgumentError("Table, Other Table, Link ID and key columns are required")

        mode = optional_text(params, "mode").lower() or LINK_MODE_OVERRIDE
        if mode != LINK_MODE_OVERRIDE:
            raise InvalidArgumentError("Mode must be override")

        result = await auto_link(
            client,
            table_name=table_name,
            other_table_name=other_table_name,
            link_id=link_id,
            left_key_column=left_key_column,
            right_key_column=right_key_column,
            max_left_rows=optional_int(params, "max_left_rows", DEFAULT_MAX_LINK_ROWS),
            max_right_rows=optional_int(params, "max_right_rows", DEFAULT_MAX_LINK_ROWS),
            dry_run=optional_bool(params, "dry_run", False),
        )
        return result.to_dict()
