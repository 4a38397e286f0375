"""
描述: SeaTable HTTP API 客户端
主要功能:
    - 单次鉴权 JSON 请求，原样返回状态码与响应体
    - 附件上传 (multipart) 与文件下载 (流式落盘)
    - 统一异常分类 (传输 / 远端 / 响应结构)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from seatable_nodes.config import RequestSettings
from seatable_nodes.seatable.registry import ConnectionConfig
from seatable_nodes.utils.parsing import decode_json


logger = logging.getLogger(__name__)


# region 异常定义
class SeaTableError(RuntimeError):
    """SeaTable 调用异常基类"""


class SeaTableTransportError(SeaTableError):
    """网络层失败 (DNS、连接、超时、读取响应体)"""


@dataclass
class SeaTableAPIError(SeaTableError):
    """需要预校验状态码的流程中收到非 2xx 响应"""
    status_code: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.body:
            return f"{self.message}: status={self.status_code} body={self.body}"
        return f"{self.message}: status={self.status_code}"


class SeaTableResponseError(SeaTableError):
    """响应结构不符合预期"""
# endregion


@dataclass
class RawResponse:
    """原始响应 (状态码不做解释)"""
    body: bytes
    status_code: int

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any | None:
        return decode_json(self.body)


# region SeaTable 客户端
class SeaTableClient:
    """
    绑定单个 Base 的 API 客户端

    功能:
        - 拼接 api-gateway 与 server 级 URL
        - 注入 Authorization / Accept / Content-Type 头
        - 不重试，调用方根据状态码自行判断
    """
    def __init__(
        self,
        config: ConnectionConfig,
        request_settings: RequestSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        初始化客户端

        参数:
            config: 连接配置
            request_settings: 超时配置，缺省使用默认值
            transport: 自定义 httpx 传输层 (测试注入)
        """
        self._config = config
        self._settings = request_settings or RequestSettings()
        self._transport = transport

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    def dtable_url(self, path: str) -> str:
        """api-gateway v2 下属于当前 Base 的接口地址"""
        return (
            f"{self._config.server}/api-gateway/api/v2/dtables/"
            f"{self._config.base_uuid}/{path.lstrip('/')}"
        )

    def server_url(self, path: str) -> str:
        return f"{self._config.server}/{path.lstrip('/')}"

    def _http_client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            transport=self._transport,
            trust_env=False,
            follow_redirects=True,
        )

    def _headers(self, has_body: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._config.token.strip():
            headers["Authorization"] = f"Bearer {self._config.token}"
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
        timeout: float | None = None,
    ) -> RawResponse:
        """
        执行单次 API 请求

        参数:
            method: HTTP 方法
            url: 完整地址
            params: 查询参数 (None 值忽略)
            json_body: 请求体，存在时序列化为 JSON
            timeout: 覆盖默认超时 (秒)

        返回:
            RawResponse

        抛出:
            SeaTableTransportError: 网络异常或超时
        """
        content = None
        if json_body is not None:
            content = json.dumps(json_body, ensure_ascii=False).encode("utf-8")
        query = {key: value for key, value in (params or {}).items() if value is not None}

        try:
            async with self._http_client(timeout or self._settings.timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=query or None,
                    content=content,
                    headers=self._headers(content is not None),
                )
        except httpx.HTTPError as exc:
            raise SeaTableTransportError(f"http request failed: {exc.__class__.__name__}: {exc}") from exc

        logger.debug(
            "SeaTable request finished",
            extra={"method": method, "url": url, "status_code": response.status_code},
        )
        return RawResponse(body=response.content, status_code=response.status_code)

    async def download(self, url: str, save_path: Path) -> int:
        """
        下载文件并流式写入本地

        返回:
            写入字节数

        抛出:
            SeaTableTransportError: 网络异常
            SeaTableAPIError: 下载返回非 2xx

        传输中断时删除已写入的部分文件。
        """
        save_path.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        opened = False
        try:
            async with self._http_client(self._settings.download_timeout) as client:
                async with client.stream("GET", url) as response:
                    if response.status_code >= 300:
                        raise SeaTableAPIError(response.status_code, "download failed")
                    opened = True
                    with save_path.open("wb") as output:
                        async for chunk in response.aiter_bytes():
                            output.write(chunk)
                            written += len(chunk)
        except httpx.HTTPError as exc:
            if opened:
                save_path.unlink(missing_ok=True)
            raise SeaTableTransportError(f"download request failed: {exc.__class__.__name__}: {exc}") from exc
        return written

    async def upload(self, url: str, file_path: Path, file_name: str, parent_dir: str) -> RawResponse:
        """multipart 上传文件 (字段: file, parent_dir)"""
        content = file_path.read_bytes()
        try:
            async with self._http_client(self._settings.upload_timeout) as client:
                response = await client.post(
                    url,
                    files={"file": (file_name, content)},
                    data={"parent_dir": parent_dir},
                )
        except httpx.HTTPError as exc:
            raise SeaTableTransportError(f"upload request failed: {exc.__class__.__name__}: {exc}") from exc
        return RawResponse(body=response.content, status_code=response.status_code)
# endregion
