"""
描述: 节点宿主服务启动脚本
主要功能:
    - 配置 asyncio 策略 (Windows)
    - 加载 .env 与配置
    - 使用 uvicorn 启动 ASGI 服务
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

# Windows 兼容性：在任何 asyncio 操作前设置策略
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

BASE_DIR = Path(__file__).resolve().parent
os.environ.setdefault("CONFIG_PATH", str(BASE_DIR / "config.yaml"))

from dotenv import load_dotenv

load_dotenv(BASE_DIR / ".env")

import uvicorn

from seatable_nodes.config import get_settings
from seatable_nodes.main import create_app


if __name__ == "__main__":
    settings = get_settings()
    print(f"Starting SeaTable nodes host on http://{settings.server.host}:{settings.server.port}")
    print("Press Ctrl+C to stop")
    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_level="debug" if settings.server.debug else "info",
    )
