"""
描述: 按键值自动关联两张表的行
主要功能:
    - 从右表构建 键值 -> 行ID 列表 索引
    - 用左表逐行探测索引，并按行覆盖写入关联
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from seatable_nodes.seatable.client import SeaTableAPIError, SeaTableClient
from seatable_nodes.seatable.rows import fetch_rows_for_key
from seatable_nodes.utils.parsing import row_text


logger = logging.getLogger(__name__)

LINK_MODE_OVERRIDE = "override"
DEFAULT_MAX_LINK_ROWS = 1000


@dataclass
class AutoLinkResult:
    processed_left_rows: int = 0
    matched_left_rows: int = 0
    created_links: int = 0
    skipped_rows: int = 0
    mode: str = LINK_MODE_OVERRIDE

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed_left_rows": self.processed_left_rows,
            "matched_left_rows": self.matched_left_rows,
            "created_links": self.created_links,
            "skipped_rows": self.skipped_rows,
            "mode": self.mode,
        }


def build_key_index(rows: list[dict[str, Any]], key_column: str) -> dict[str, list[str]]:
    """键值 -> 行 ID 列表 (保持首次出现顺序)，空键或空 ID 的行跳过"""
    index: dict[str, list[str]] = {}
    for row in rows:
        key = row_text(row, key_column)
        if not key:
            continue
        row_id = row_text(row, "_id")
        if not row_id:
            continue
        index.setdefault(key, []).append(row_id)
    return index


async def auto_link(
    client: SeaTableClient,
    *,
    table_name: str,
    other_table_name: str,
    link_id: str,
    left_key_column: str,
    right_key_column: str,
    max_left_rows: int = DEFAULT_MAX_LINK_ROWS,
    max_right_rows: int = DEFAULT_MAX_LINK_ROWS,
    dry_run: bool = False,
) -> AutoLinkResult:
    """
    自动关联左表 (table_name) 与右表 (other_table_name)

    每个命中的左表行发送一次 PUT，用当前匹配集合整体替换该行在 link_id 上的关联。
    任一关联更新失败立即中止，已写入的更新不回滚。

    抛出:
        SeaTableTransportError: 网络异常
        SeaTableAPIError: 关联更新返回非 2xx
        SeaTableResponseError: 键列查询响应结构异常
    """
    if max_left_rows <= 0:
        max_left_rows = DEFAULT_MAX_LINK_ROWS
    if max_right_rows <= 0:
        max_right_rows = DEFAULT_MAX_LINK_ROWS

    right_rows = await fetch_rows_for_key(client, other_table_name, right_key_column, max_right_rows)
    index = build_key_index(right_rows, right_key_column)

    left_rows = await fetch_rows_for_key(client, table_name, left_key_column, max_left_rows)

    result = AutoLinkResult()
    links_url = client.dtable_url("links/")
    for row in left_rows:
        result.processed_left_rows += 1
        left_row_id = row_text(row, "_id")
        key = row_text(row, left_key_column)
        targets = index.get(key) if left_row_id and key else None
        if not targets:
            result.skipped_rows += 1
            continue
        result.matched_left_rows += 1

        if not dry_run:
            response = await client.request(
                "PUT",
                links_url,
                json_body={
                    "link_id": link_id,
                    "table_name": table_name,
                    "other_table_name": other_table_name,
                    "row_id": left_row_id,
                    "other_rows_ids": list(targets),
                },
            )
            if not response.ok:
                logger.warning(
                    "Link update failed, aborting auto link",
                    extra={"row_id": left_row_id, "status_code": response.status_code},
                )
                raise SeaTableAPIError(
                    response.status_code,
                    f"update links for row {left_row_id}",
                    response.text,
                )
        result.created_links += len(targets)

    logger.info(
        "Auto link finished",
        extra={"table_name": table_name, "other_table_name": other_table_name, "dry_run": dry_run, **result.to_dict()},
    )
    return result
