"""应用模块入口

提供统一的模块导入接口
"""

from . import (
    config,
    crud,
    db,
    models,
    schemas,
    services,
)

# 从子模块导入关键组件
from .config import settings
from .crud import MemoryOrderStore, OrderStore
from .db import Base, get_db

__version__ = "1.0.0"

__all__ = [
    "config",
    "crud",
    "db",
    "models",
    "schemas",
    "services",
    "settings",
    "MemoryOrderStore",
    "OrderStore",
    "Base",
    "get_db",
]
