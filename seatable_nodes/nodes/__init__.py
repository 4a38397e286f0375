"""
描述: 节点注册入口。
主要功能:
    - 导入并注册 connect、sql、rows、links、metadata、files 节点
    - 在服务启动时完成节点发现
"""

from seatable_nodes.nodes import connect, files, links, metadata, rows, sql  # noqa: F401
