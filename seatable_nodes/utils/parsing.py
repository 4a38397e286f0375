"""
描述: 输入解析与响应整形工具
主要功能:
    - 列名 / 行 ID 列表解析
    - 行值文本化 (用于键匹配)
    - 响应体 JSON 宽松解析
"""

from __future__ import annotations

import json
from typing import Any


def split_columns(value: Any) -> list[str]:
    """逗号分隔的列名 (或列名列表) 去空白后返回，空项丢弃"""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        parts = [str(item) for item in value if item is not None]
    else:
        parts = str(value).split(",")
    return [part.strip() for part in parts if part.strip()]


def parse_row_ids(value: Any) -> list[str]:
    """
    解析行 ID 列表

    支持:
        - JSON 数组文本: '["a", "b"]'
        - 逗号分隔文本: "a, b ,c"
        - 已是列表的输入

    抛出:
        ValueError: JSON 数组文本无法解析或不是字符串数组
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]

    text = str(value).strip()
    if not text:
        return []
    if text.startswith("["):
        parsed = json.loads(text)
        if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
            raise ValueError("expected a JSON array of strings")
        return parsed
    return [part.strip() for part in text.split(",") if part.strip()]


def row_text(row: dict[str, Any] | None, key: str) -> str:
    """取行内字段并转为可比较的文本，缺失或 null 返回空串"""
    if not row:
        return ""
    value = row.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def decode_json(body: bytes | str) -> Any | None:
    """宽松解析 JSON，失败返回 None"""
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


def extract_list(payload: Any, key: str) -> list[Any]:
    """从 {key: [...]} 结构中取列表，不存在时返回空列表"""
    if isinstance(payload, dict):
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return []
