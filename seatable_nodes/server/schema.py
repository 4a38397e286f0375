"""
描述: 节点宿主 HTTP API 数据模型
主要功能:
    - 定义节点调用请求 (NodeRequest)
    - 定义标准响应格式 (NodeResponse)
    - 定义错误结构 (NodeError)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# region API 数据模型
class NodeRequest(BaseModel):
    """节点调用请求体"""
    params: dict[str, Any] = Field(default_factory=dict)


class NodeError(BaseModel):
    """节点错误信息"""
    code: str
    message: str
    detail: Any | None = None


class NodeResponse(BaseModel):
    """节点调用响应"""
    success: bool
    data: dict[str, Any] | None = None
    error: NodeError | None = None
# endregion
