"""
描述: 行数据批量读取
主要功能:
    - 按键列读取 (_id + key) 的 SQL 查询
    - 基于 start/limit 的分页全量读取
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from seatable_nodes.seatable.client import SeaTableClient, SeaTableResponseError


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000
MAX_PAGE_SIZE = 1000
DEFAULT_MAX_ROWS = 10000


async def fetch_rows_for_key(
    client: SeaTableClient,
    table_name: str,
    key_column: str,
    limit: int,
) -> list[dict[str, Any]]:
    """
    通过 SQL 接口读取 _id 与键列

    表名与列名直接拼入 SQL 文本，不做转义，调用方负责传入合法标识符。

    抛出:
        SeaTableResponseError: 响应不是 {"results": [...]} 结构
    """
    sql = f"SELECT _id, {key_column} FROM {table_name} WHERE {key_column} IS NOT NULL LIMIT {limit}"
    response = await client.request(
        "POST",
        client.dtable_url("sql/"),
        json_body={"sql": sql, "convert_keys": True},
    )
    payload = response.json()
    if isinstance(payload, dict) and isinstance(payload.get("results"), list):
        return [row for row in payload["results"] if isinstance(row, dict)]
    raise SeaTableResponseError(
        f"unexpected SQL response for {table_name}.{key_column}: status={response.status_code}"
    )


@dataclass
class PageResult:
    """分页读取结果"""
    rows: list[Any] = field(default_factory=list)
    start: int = 0
    status_code: int = 0

    @property
    def count(self) -> int:
        return len(self.rows)


def _page_rows(payload: Any) -> list[Any]:
    if isinstance(payload, dict):
        rows = payload.get("rows")
        return rows if isinstance(rows, list) else []
    if isinstance(payload, list):
        return payload
    return []


async def fetch_all_rows(
    client: SeaTableClient,
    table_name: str,
    view_name: str | None = None,
    start: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_rows: int = DEFAULT_MAX_ROWS,
    convert_keys: bool = True,
) -> PageResult:
    """
    顺序分页读取行

    终止条件 (先满足者生效):
        - 已读取行数达到 max_rows
        - 本页为空
        - 本页行数少于请求的 limit

    参数:
        page_size: 超出 [1, 1000] 时使用 1000
        max_rows: <= 0 时使用 10000
        start: 负数按 0 处理

    抛出:
        SeaTableResponseError: 某页响应体不是 JSON
    """
    start = max(0, start)
    if page_size <= 0 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    if max_rows <= 0:
        max_rows = DEFAULT_MAX_ROWS

    result = PageResult(start=start)
    offset = start
    url = client.dtable_url("rows/")

    while len(result.rows) < max_rows:
        limit = min(page_size, max_rows - len(result.rows))
        params: dict[str, Any] = {"table_name": table_name, "start": str(offset), "limit": str(limit)}
        if view_name and view_name.strip():
            params["view_name"] = view_name
        if convert_keys:
            params["convert_keys"] = "true"

        response = await client.request("GET", url, params=params)
        result.status_code = response.status_code
        payload = response.json()
        if payload is None:
            raise SeaTableResponseError(
                f"unmarshal list rows response: status={response.status_code}"
            )

        page = _page_rows(payload)
        if not page:
            break
        result.rows.extend(page)
        offset += len(page)
        if len(page) < limit:
            break

    logger.info(
        "Rows fetched",
        extra={"table_name": table_name, "start": start, "count": result.count},
    )
    return result
