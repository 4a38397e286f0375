"""
HTTP API for SeaTable nodes.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request, Response

from seatable_nodes.nodes.base import InvalidArgumentError, NodeContext
from seatable_nodes.nodes.registry import NodeRegistry
from seatable_nodes.seatable.client import (
    SeaTableAPIError,
    SeaTableResponseError,
    SeaTableTransportError,
)
from seatable_nodes.server.schema import NodeError, NodeRequest, NodeResponse


router = APIRouter()
logger = logging.getLogger(__name__)


def _build_context(request: Request) -> NodeContext:
    return NodeContext(
        settings=request.app.state.settings,
        registry=request.app.state.registry,
    )


@router.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok", "service": "seatable-nodes"}


@router.get("/favicon.ico")
async def favicon() -> Response:
    return Response(status_code=204)


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/nodes")
async def list_nodes(request: Request) -> dict[str, Any]:
    enabled = request.app.state.settings.nodes.enabled
    nodes = NodeRegistry.list_nodes()
    if enabled:
        nodes = [node for node in nodes if node["name"] in enabled]
    return {"nodes": nodes}


@router.post("/nodes/{node_name}", response_model=NodeResponse)
async def call_node(node_name: str, body: NodeRequest, request: Request) -> NodeResponse:
    node_cls = NodeRegistry.get(node_name)
    if not node_cls:
        raise HTTPException(status_code=404, detail="Node not found")

    enabled = request.app.state.settings.nodes.enabled
    if enabled and node_name not in enabled:
        raise HTTPException(status_code=403, detail="Node disabled")
    node = node_cls(_build_context(request))

    try:
        data = await node.run(body.params)
        return NodeResponse(success=True, data=data)
    except InvalidArgumentError as exc:
        return NodeResponse(
            success=False,
            error=NodeError(code="ErrInvalidArg", message=str(exc)),
        )
    except SeaTableTransportError as exc:
        logger.warning("Node transport error", extra={"node": node_name, "error": str(exc)})
        return NodeResponse(
            success=False,
            error=NodeError(code="ErrTransport", message=str(exc)),
        )
    except SeaTableAPIError as exc:
        logger.warning("Node remote error", extra={"node": node_name, "status_code": exc.status_code})
        return NodeResponse(
            success=False,
            error=NodeError(
                code="ErrRemote",
                message=str(exc),
                detail={"status_code": exc.status_code, "body": exc.body},
            ),
        )
    except SeaTableResponseError as exc:
        return NodeResponse(
            success=False,
            error=NodeError(code="ErrResponse", message=str(exc)),
        )
    except Exception as exc:
        logger.exception("Node execution failed", extra={"node": node_name})
        return NodeResponse(
            success=False,
            error=NodeError(code="ErrInternal", message=str(exc)),
        )
