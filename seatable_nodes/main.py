"""
描述: 节点宿主服务主入口
主要功能:
    - FastAPI 应用初始化
    - 创建进程级连接注册表并注入各节点
    - 日志与配置加载
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from seatable_nodes import __version__
from seatable_nodes.config import Settings, get_settings
from seatable_nodes.nodes.registry import NodeRegistry
from seatable_nodes.seatable.registry import ClientRegistry
from seatable_nodes.server.http import router as http_router
import seatable_nodes.nodes  # noqa: F401
from seatable_nodes.utils.logger import setup_logging


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    创建应用

    参数:
        settings: 配置对象，缺省读取全局配置
    """
    settings = settings or get_settings()
    setup_logging(settings.logging)
    logger = logging.getLogger(__name__)

    unknown = [name for name in settings.nodes.enabled if NodeRegistry.get(name) is None]
    if unknown:
        logger.warning("Unknown nodes in nodes.enabled: %s", ", ".join(unknown))

    app = FastAPI(title="SeaTable Nodes", version=__version__)
    app.state.settings = settings
    app.state.registry = ClientRegistry()
    app.include_router(http_router)

    logger.info(
        "SeaTable nodes host config loaded",
        extra={
            "nodes_registered": len(NodeRegistry.names()),
            "nodes_enabled_count": len(settings.nodes.enabled),
        },
    )
    return app
