"""
描述: 附件传输节点
主要功能:
    - 上传本地文件为附件 (先取上传链接，再 multipart 上传)
    - 获取文件下载链接并可选保存到本地
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from seatable_nodes.nodes.base import BaseNode, InvalidArgumentError, optional_text, require_text
from seatable_nodes.nodes.registry import NodeRegistry
from seatable_nodes.seatable.client import SeaTableAPIError, SeaTableClient, SeaTableResponseError


logger = logging.getLogger(__name__)

ATTACHMENT_KINDS = ("file", "image")


# region 辅助函数
async def get_upload_link(client: SeaTableClient) -> dict[str, Any]:
    """
    获取上传链接

    返回:
        {upload_link, parent_path, file_relative_path, image_relative_path}

    抛出:
        SeaTableAPIError: 非 2xx
        SeaTableResponseError: 响应无 upload_link
    """
    response = await client.request("GET", client.server_url("api/v2.1/dtable/app-upload-link/"))
    if response.status_code >= 300:
        raise SeaTableAPIError(response.status_code, "get upload link failed", response.text)
    payload = response.json()
    if not isinstance(payload, dict):
        raise SeaTableResponseError("unexpected upload link response")
    if not payload.get("upload_link"):
        raise SeaTableResponseError("upload_link is empty")
    return payload


async def get_download_link(client: SeaTableClient, file_path: str) -> str:
    response = await client.request(
        "GET",
        client.server_url("api/v2.1/dtable/app-download-link/"),
        params={"path": file_path},
    )
    if response.status_code >= 300:
        raise SeaTableAPIError(response.status_code, "get download link failed", response.text)
    payload = response.json()
    if not isinstance(payload, dict):
        raise SeaTableResponseError("parse download link response failed")
    download_link = payload.get("download_link")
    if not isinstance(download_link, str) or not download_link:
        raise SeaTableResponseError("download_link not found in response")
    return download_link
# endregion


# region 节点实现
@NodeRegistry.register
class UploadAttachmentNode(BaseNode):
    """
    上传附件

    功能:
        - 上传到 Base 的附件目录
        - 输出附件对象与相对路径 (image 类型优先使用图片目录)
    """

    name = "seatable.v1.upload_attachment"
    description = "Upload a local file and return the attachment object."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "file_path": {"type": "string", "description": "本地文件路径"},
            "file_name": {"type": "string", "description": "覆盖上传文件名"},
            "kind": {"type": "string", "enum": list(ATTACHMENT_KINDS), "default": "file"},
        },
        "required": ["client_id", "file_path"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        file_path = Path(require_text(params, "file_path", "File Path"))
        kind = optional_text(params, "kind").lower() or "file"
        if kind not in ATTACHMENT_KINDS:
            raise InvalidArgumentError("Kind must be file or image")
        if not file_path.is_file():
            raise InvalidArgumentError(f"File not found: {file_path}")
        file_name = optional_text(params, "file_name") or file_path.name

        link = await get_upload_link(client)
        upload_url = client.server_url(f"seafhttp/upload-api/{link['upload_link']}?ret-json=1")
        response = await client.upload(upload_url, file_path, file_name, str(link.get("parent_path") or ""))
        if response.status_code >= 300:
            logger.warning("Attachment upload failed", extra={"status_code": response.status_code})
            raise SeaTableAPIError(response.status_code, "upload failed", response.text)

        attachments = response.json()
        if not isinstance(attachments, list):
            raise SeaTableResponseError("unexpected upload response")
        if not attachments:
            raise SeaTableResponseError("no attachment returned")

        if kind == "image" and link.get("image_relative_path"):
            relative_path = link["image_relative_path"]
        else:
            relative_path = link.get("file_relative_path") or ""
        return {"attachment": attachments[0], "relative_path": relative_path}


@NodeRegistry.register
class DownloadFileNode(BaseNode):
    """获取下载链接，提供 save_path 时下载到本地"""

    name = "seatable.v1.download_file"
    description = "Resolve a download link for a SeaTable file and optionally save it locally."
    parameters = {
        "type": "object",
        "properties": {
            "client_id": {"type": "string"},
            "file_path": {"type": "string", "description": "SeaTable 内的文件路径"},
            "save_path": {"type": "string", "description": "本地保存路径"},
        },
        "required": ["client_id", "file_path"],
    }

    async def run(self, params: dict[str, Any]) -> dict[str, Any]:
        client = self.resolve_client(params)
        file_path = require_text(params, "file_path", "File Path")
        save_path = optional_text(params, "save_path")

        download_url = await get_download_link(client, file_path)
        file_size = 0
        if save_path:
            file_size = await client.download(download_url, Path(save_path))
            logger.info("File downloaded", extra={"saved_path": save_path, "file_size": file_size})

        return {
            "status_code": 200,
            "download_url": download_url,
            "saved_path": save_path,
            "file_size": file_size,
        }
# endregion
