from __future__ import annotations

import asyncio

import pytest

from seatable_nodes.nodes.base import InvalidArgumentError
from seatable_nodes.nodes.rows import GetRowNode, RowsNode
from tests.fakes import API_BASE, FakeClient, build_context


def _rows_node(client: FakeClient) -> tuple[RowsNode, str]:
    context, client_id = build_context(client)
    return RowsNode(context), client_id


def test_rows_list_builds_query() -> None:
    client = FakeClient(lambda method, url, params, body: (200, {"rows": [{"_id": "r1"}]}))
    node, client_id = _rows_node(client)

    output = asyncio.run(
        node.run({"client_id": client_id, "table_name": "Table 1", "view_name": "Grid", "start": 20, "limit": 5})
    )

    call = client.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == f"{API_BASE}/rows/"
    assert call["params"] == {
        "table_name": "Table 1",
        "view_name": "Grid",
        "start": "20",
        "limit": "5",
        "convert_keys": "true",
    }
    assert output["status_code"] == 200
    assert output["json"] == {"rows": [{"_id": "r1"}]}


def test_rows_list_defaults_skip_zero_start() -> None:
    client = FakeClient(lambda method, url, params, body: (200, {"rows": []}))
    node, client_id = _rows_node(client)

    asyncio.run(node.run({"client_id": client_id, "table_name": "Table 1", "convert_keys": False}))

    assert client.calls[0]["params"] == {"table_name": "Table 1", "limit": "1000"}


def test_rows_list_rejects_fractional_limit() -> None:
    client = FakeClient()
    node, client_id = _rows_node(client)

    with pytest.raises(InvalidArgumentError, match="limit must be an integer"):
        asyncio.run(node.run({"client_id": client_id, "table_name": "T", "limit": 2.9}))
    asyncio.run(node.run({"client_id": client_id, "table_name": "T", "limit": 5.0}))

    assert client.calls[0]["params"]["limit"] == "5"


def test_rows_append_update_delete_bodies() -> None:
    client = FakeClient()
    node, client_id = _rows_node(client)

    asyncio.run(node.run({"client_id": client_id, "table_name": "T", "action": "append", "row_data": {"Name": "A"}}))
    asyncio.run(
        node.run(
            {"client_id": client_id, "table_name": "T", "action": "update", "row_id": "r1", "row_data": {"Name": "B"}}
        )
    )
    asyncio.run(node.run({"client_id": client_id, "table_name": "T", "action": "delete", "row_id": "r1"}))

    assert [call["method"] for call in client.calls] == ["POST", "PUT", "DELETE"]
    assert client.calls[0]["json_body"] == {"table_name": "T", "row": {"Name": "A"}}
    assert client.calls[1]["json_body"] == {"table_name": "T", "row_id": "r1", "row": {"Name": "B"}}
    assert client.calls[2]["json_body"] == {"table_name": "T", "row_id": "r1"}


def test_rows_non_2xx_is_passed_through() -> None:
    client = FakeClient(lambda method, url, params, body: (404, b"table not found"))
    node, client_id = _rows_node(client)

    output = asyncio.run(node.run({"client_id": client_id, "table_name": "Missing"}))

    assert output == {"status_code": 404, "body": "table not found", "json": None}


def test_rows_validation_errors() -> None:
    client = FakeClient()
    node, client_id = _rows_node(client)

    with pytest.raises(InvalidArgumentError, match="Row Data is required for append"):
        asyncio.run(node.run({"client_id": client_id, "table_name": "T", "action": "append"}))
    with pytest.raises(InvalidArgumentError, match="Row ID is required for update"):
        asyncio.run(node.run({"client_id": client_id, "table_name": "T", "action": "update", "row_data": {}}))
    with pytest.raises(InvalidArgumentError, match="Row ID is required for delete"):
        asyncio.run(node.run({"client_id": client_id, "table_name": "T", "action": "delete"}))
    with pytest.raises(InvalidArgumentError, match="Unsupported action for Rows"):
        asyncio.run(node.run({"client_id": client_id, "table_name": "T", "action": "upsert"}))
    with pytest.raises(InvalidArgumentError, match="Table Name is required"):
        asyncio.run(node.run({"client_id": client_id}))
    assert client.calls == []


def test_get_row_unwraps_row() -> None:
    client = FakeClient(lambda method, url, params, body: (200, {"row": {"_id": "r1", "Name": "A"}}))
    context, client_id = build_context(client)
    node = GetRowNode(context)

    output = asyncio.run(node.run({"client_id": client_id, "table_name": "T", "row_id": "r1"}))

    assert client.calls[0]["url"] == f"{API_BASE}/rows/r1/"
    assert client.calls[0]["params"] == {"table_name": "T", "convert_keys": "true"}
    assert output["row"] == {"_id": "r1", "Name": "A"}


def test_get_row_without_wrapper_returns_whole_json() -> None:
    client = FakeClient(lambda method, url, params, body: (200, {"_id": "r1", "Name": "A"}))
    context, client_id = build_context(client)
    node = GetRowNode(context)

    output = asyncio.run(node.run({"client_id": client_id, "table_name": "T", "row_id": "r1", "view_name": "V"}))

    assert client.calls[0]["params"]["view_name"] == "V"
    assert output["row"] == {"_id": "r1", "Name": "A"}
