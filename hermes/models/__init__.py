"""数据库模型模块

定义所有 SQLAlchemy ORM 模型
"""

from ..database.connection import Base
from .order import Order

__all__ = ["Base", "Order"]
