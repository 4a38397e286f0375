"""
描述: SeaTable 连接注册表
主要功能:
    - 保存 Connect 节点生成的连接配置
    - 按 Client ID 查询配置 (读写锁保护，读多写少)
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class ConnectionConfig:
    """
    单个 Base 的连接信息

    属性:
        server: 服务地址 (无结尾斜杠)
        base_uuid: Base UUID
        token: Base API Token
    """
    server: str
    base_uuid: str
    token: str

    def __repr__(self) -> str:
        return f"ConnectionConfig(server={self.server!r}, base_uuid={self.base_uuid!r}, token='***')"


class _ReadWriteLock:
    """读写锁：读者共享，写者独占，等待中的写者优先"""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


# region 注册表
class ClientRegistry:
    """
    进程级连接注册表

    功能:
        - register 生成唯一 Client ID 并保存配置
        - lookup 只读查询，未知 ID 返回 None
    条目在进程生命周期内不会被删除。
    """

    def __init__(self) -> None:
        self._lock = _ReadWriteLock()
        self._clients: dict[str, ConnectionConfig] = {}

    def register(self, config: ConnectionConfig) -> str:
        prefix = "st-" + config.base_uuid.replace("-", "")
        with self._lock.write():
            stamp = time.time_ns()
            client_id = f"{prefix}-{stamp}"
            while client_id in self._clients:
                stamp += 1
                client_id = f"{prefix}-{stamp}"
            self._clients[client_id] = config
        return client_id

    def lookup(self, client_id: str) -> ConnectionConfig | None:
        with self._lock.read():
            return self._clients.get(client_id)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._clients)
# endregion
