"""
描述: SeaTable 自动化节点包
主要功能:
    - 以节点形式封装 SeaTable REST/SQL API
    - 提供连接注册、行操作、关联管理、附件传输与元数据读取
"""

__version__ = "0.1.0"
