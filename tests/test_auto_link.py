from __future__ import annotations

import asyncio
from typing import Any

import pytest

from seatable_nodes.nodes.base import InvalidArgumentError
from seatable_nodes.nodes.links import AutoLinkNode
from seatable_nodes.seatable.client import SeaTableAPIError
from seatable_nodes.seatable.linking import auto_link, build_key_index
from tests.fakes import API_BASE, FakeClient, build_context


RIGHT_ROWS = [
    {"_id": "r1", "Code": "A"},
    {"_id": "r2", "Code": "A"},
    {"_id": "r3", "Code": "B"},
]
LEFT_ROWS = [
    {"_id": "l1", "Key": "A"},
    {"_id": "l2", "Key": "C"},
]


def _handler(link_status: int = 200):
    def handler(method: str, url: str, params: dict[str, Any] | None, json_body: Any) -> tuple[int, Any]:
        if url.endswith("/sql/"):
            if "FROM Right" in json_body["sql"]:
                return 200, {"results": RIGHT_ROWS}
            return 200, {"results": LEFT_ROWS}
        if url.endswith("/links/"):
            return link_status, {"success": link_status == 200}
        return 404, {}

    return handler


def _run(client: FakeClient, dry_run: bool = False):
    return asyncio.run(
        auto_link(
            client,
            table_name="Left",
            other_table_name="Right",
            link_id="lk01",
            left_key_column="Key",
            right_key_column="Code",
            dry_run=dry_run,
        )
    )


def test_build_key_index_groups_ids_in_order() -> None:
    rows = RIGHT_ROWS + [{"_id": "", "Code": "A"}, {"_id": "r9", "Code": None}, {"_id": "r4", "Code": 1.0}]

    index = build_key_index(rows, "Code")

    assert index == {"A": ["r1", "r2"], "B": ["r3"], "1": ["r4"]}


def test_auto_link_overrides_matched_rows() -> None:
    client = FakeClient(_handler())

    result = _run(client)

    assert result.to_dict() == {
        "processed_left_rows": 2,
        "matched_left_rows": 1,
        "created_links": 2,
        "skipped_rows": 1,
        "mode": "override",
    }
    sql_calls = [call for call in client.calls if call["url"].endswith("/sql/")]
    assert [call["json_body"]["sql"] for call in sql_calls] == [
        "SELECT _id, Code FROM Right WHERE Code IS NOT NULL LIMIT 1000",
        "SELECT _id, Key FROM Left WHERE Key IS NOT NULL LIMIT 1000",
    ]
    assert all(call["json_body"]["convert_keys"] is True for call in sql_calls)

    link_calls = [call for call in client.calls if call["url"] == f"{API_BASE}/links/"]
    assert len(link_calls) == 1
    assert link_calls[0]["method"] == "PUT"
    assert link_calls[0]["json_body"] == {
        "link_id": "lk01",
        "table_name": "Left",
        "other_table_name": "Right",
        "row_id": "l1",
        "other_rows_ids": ["r1", "r2"],
    }


def test_auto_link_dry_run_makes_no_link_calls() -> None:
    client = FakeClient(_handler())

    result = _run(client, dry_run=True)

    assert result.processed_left_rows == 2
    assert result.matched_left_rows == 1
    assert result.skipped_rows == 1
    assert result.created_links == 2
    assert not [call for call in client.calls if call["url"].endswith("/links/")]


def test_auto_link_aborts_on_failed_link_update() -> None:
    client = FakeClient(_handler(link_status=403))

    with pytest.raises(SeaTableAPIError) as exc_info:
        _run(client)
    assert exc_info.value.status_code == 403


def test_auto_link_node_validates_inputs() -> None:
    client = FakeClient(_handler())
    context, client_id = build_context(client)
    node = AutoLinkNode(context)

    with pytest.raises(InvalidArgumentError, match="Table, Other Table, Link ID and key columns are required"):
        asyncio.run(node.run({"client_id": client_id, "table_name": "Left", "other_table_name": "Right"}))
    assert client.calls == []


def test_auto_link_node_rejects_unknown_mode() -> None:
    client = FakeClient(_handler())
    context, client_id = build_context(client)
    node = AutoLinkNode(context)
    params = {
        "client_id": client_id,
        "table_name": "Left",
        "other_table_name": "Right",
        "link_id": "lk01",
        "left_key_column": "Key",
        "right_key_column": "Code",
        "mode": "append",
    }

    with pytest.raises(InvalidArgumentError):
        asyncio.run(node.run(params))


def test_auto_link_node_returns_counters() -> None:
    client = FakeClient(_handler())
    context, client_id = build_context(client)
    node = AutoLinkNode(context)

    output = asyncio.run(
        node.run(
            {
                "client_id": client_id,
                "table_name": "Left",
                "other_table_name": "Right",
                "link_id": "lk01",
                "left_key_column": "Key",
                "right_key_column": "Code",
                "max_left_rows": 50,
                "dry_run": "true",
            }
        )
    )

    assert output["matched_left_rows"] == 1
    assert output["created_links"] == 2
    assert "LIMIT 50" in client.calls[1]["json_body"]["sql"]
