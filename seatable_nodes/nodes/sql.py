"""
描述: SQL 类节点
主要功能:
    - 执行任意 SQL (支持参数化)
    - 多列关键词搜索 (contains / equals / starts_with / ends_with)
"""

from __future__ import annotations

import json
from typing import Any

from seatable_nodes.nodes.base import (
    BaseNode,
    InvalidArgumentError,
    optional_bool,
    optional_int,
    passthrough_output,
    require_text,
)
from seatable_nodes.nodes.registry import NodeRegistry
from seatable_nodes.utils.parsing import extract_list, split_columns


DEFAULT_SEARCH_ROWS = 100

# 模式 -> (比较符, 通配模板)
_MATCH_MODES: dict[str, tuple[str, str]] = {
    "contains": ("LIKE", "%{}%"),
    "equals": ("=", "{}"),
    "startswith": ("LIKE", "{}%"),
    "endswith": ("LIKE", "%{}"),
}


def _normalize_match_mode(value: str) -> str:
    mode = (value or "contains").strip().replace("_", "").lower()
    if mode not in _MATCH_MODES:
        raise InvalidArgumentError(
            "Match Mode must be contains, equals, starts_with or ends_with"
        )
    return mode


def build_search_conditions(
    columns: list[str],
    keyword: str,
    match_mode: str = "contains",
    case_sensitive: bool = False,
) -> tuple[list[str], list[str]]:
    """
    构建搜索条件与参数

    返回:
        (conditions, params)，条件之间按 OR 组合

    示例:
        (["Name"], "foo", contains, 不区分大小写) -> (["LOWER(Name) LIKE ?"], ["%foo%"])
    """
    operator, template = _MATCH_MODES[_normalize_match_mode(match_mode)]
    value = keyword if case_sensitive else keyword.lower()
    conditions: list[str] = []
    params: list[str] = []
    for column in columns:
        target = column if case_sensitive else f"LOWER({column})"
        conditions.append(f"{target} {operator} ?")
        params.append(template.format(value))
    return conditions, params


def _parse_sql_params(value: Any) -> list[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError as exc:
            raise InvalidArgumentError("Params must be a JSON array") from exc
        if isinstance(parsed, list):
            return parsed
    raise InvalidArgumentError("Params must be a JSON array")


@NodeRegistry.register
class SQLQueryNode(BaseNode):
    """执行任意 SQL"""

    name = "seatable.v1.sql_query"
    description = "Execute a SQL statement against a SeaTable base."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "sql": {"type": "string", "description": "SQL 语句，可包含 ? 占位符"},
            "params": {"type": "array", "description": "占位符参数"},
            "convert_keys": {"type": "boolean", "default": True},
        },
        "required": ["client_id", "sql"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        sql = params.get("sql")
        if not isinstance(sql, str) or not sql.strip():
            raise InvalidArgumentError("SQL is required")

        body: dict[str, Any] = {"sql": sql}
        sql_params = _parse_sql_params(params.get("params"))
        if sql_params:
            body["params"] = sql_params
        body["convert_keys"] = optional_bool(params, "convert_keys", True)

        response = await client.request("POST", client.dtable_url("sql/"), json_body=body)
        return passthrough_output(response)


@NodeRegistry.register
class SearchNode(BaseNode):
    """
    多列关键词搜索

    功能:
        - 为每一列生成一个条件，条件之间 OR 组合
        - 默认不区分大小写 (LOWER(col) 与小写关键词比较)
    """

    name = "seatable.v1.search"
    description = "Search rows whose columns match a keyword."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "table_name": {"type": "string"},
            "columns": {
                "type": ["string", "array"],
                "description": "逗号分隔的列名或列名数组",
            },
            "keyword": {"type": "string"},
            "match_mode": {
                "type": "string",
                "enum": ["contains", "equals", "starts_with", "ends_with"],
                "default": "contains",
            },
            "case_sensitive": {"type": "boolean", "default": False},
            "max_rows": {"type": "integer", "default": DEFAULT_SEARCH_ROWS},
            "convert_keys": {"type": "boolean", "default": True},
        },
        "required": ["client_id", "table_name", "columns", "keyword"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        table_name = require_text(params, "table_name", "Table Name")
        columns = split_columns(params.get("columns"))
        if not columns:
            raise InvalidArgumentError("At least one column is required")
        keyword = require_text(params, "keyword", "Keyword")

        match_mode = str(params.get("match_mode") or "contains")
        case_sensitive = optional_bool(params, "case_sensitive", False)
        max_rows = optional_int(params, "max_rows", DEFAULT_SEARCH_ROWS)
        if max_rows <= 0:
            max_rows = DEFAULT_SEARCH_ROWS

        conditions, sql_params = build_search_conditions(columns, keyword, match_mode, case_sensitive)
        sql = f"SELECT * FROM {table_name} WHERE {' OR '.join(conditions)} LIMIT {max_rows}"
        response = await client.request(
            "POST",
            client.dtable_url("sql/"),
            json_body={
                "sql": sql,
                "params": sql_params,
                "convert_keys": optional_bool(params, "convert_keys", True),
            },
        )

        output = passthrough_output(response)
        rows = extract_list(output["json"], "results")
        output["rows"] = rows
        output["count"] = len(rows)
        return output
