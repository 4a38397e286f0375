"""
描述: SeaTable 节点服务全局配置加载器
主要功能:
    - 统一管理请求超时、节点开关与日志配置
    - 支持 YAML 文件加载与环境变量覆盖
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


# region 配置模型
class ServerSettings(BaseModel):
    """节点宿主服务监听配置"""
    host: str = "0.0.0.0"
    port: int = 8083
    debug: bool = False


class RequestSettings(BaseModel):
    """HTTP 请求超时 (秒)"""
    timeout: float = 30.0
    upload_timeout: float = 60.0
    download_timeout: float = 300.0


class SeaTableSettings(BaseModel):
    request: RequestSettings = Field(default_factory=RequestSettings)


class NodesSettings(BaseModel):
    enabled: list[str] = Field(default_factory=list)


class LoggingSettings(BaseModel):
    """日志系统配置"""
    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """配置聚合根"""
    server: ServerSettings = Field(default_factory=ServerSettings)
    seatable: SeaTableSettings = Field(default_factory=SeaTableSettings)
    nodes: NodesSettings = Field(default_factory=NodesSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
# endregion


# region 配置加载逻辑
def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        def replace(match: re.Match[str]) -> str:
            expr = match.group(1)
            if ":-" in expr:
                key, default = expr.split(":-", 1)
                return os.getenv(key, default)
            return os.getenv(expr, "")

        return _ENV_PATTERN.sub(replace, value)
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_env(val) for key, val in value.items()}
    return value


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return _expand_env(data)


def _set_nested(data: dict[str, Any], keys: list[str], value: Any) -> None:
    current = data
    for key in keys[:-1]:
        current = current.setdefault(key, {})
    current[keys[-1]] = value


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    mapping = {
        "SEATABLE_REQUEST_TIMEOUT": ["seatable", "request", "timeout"],
        "SEATABLE_UPLOAD_TIMEOUT": ["seatable", "request", "upload_timeout"],
        "SEATABLE_DOWNLOAD_TIMEOUT": ["seatable", "request", "download_timeout"],
        "SEATABLE_NODES_HOST": ["server", "host"],
        "SEATABLE_NODES_PORT": ["server", "port"],
        "LOG_LEVEL": ["logging", "level"],
        "LOG_FORMAT": ["logging", "format"],
    }
    for env_key, path in mapping.items():
        env_value = os.getenv(env_key)
        if env_value is not None and env_value != "":
            _set_nested(data, path, env_value)
    return data


def load_settings(config_path: str | None = None) -> Settings:
    """
    加载配置

    参数:
        config_path: YAML 路径，缺省读取 CONFIG_PATH 或 config.yaml

    返回:
        校验后的 Settings 对象 (文件不存在时使用默认值)
    """
    path = Path(config_path or os.getenv("CONFIG_PATH", "config.yaml"))
    data = _load_yaml(path)
    data = _apply_env_overrides(data)
    return Settings.model_validate(data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """获取单例配置对象"""
    return load_settings()
# endregion
