"""API数据模型模块

定义所有 Pydantic 模型（请求/响应结构体）
"""

from .order import (
    EXECUTOR_ROLES,
    EXECUTOR_SLOTS,
    ORDER_NUMBER_PATTERN,
    BulkDeleteRequest,
    BulkDeleteResult,
    ClearResult,
    Executor,
    ImportResult,
    LookupField,
    OrderCreate,
    OrderFields,
    OrderRead,
    OrderRecord,
    OrderStats,
    OrderStatus,
    OrderUpdate,
    RestoreResult,
    blank_executors,
    normalize_executors,
)

__all__ = [
    "EXECUTOR_ROLES",
    "EXECUTOR_SLOTS",
    "ORDER_NUMBER_PATTERN",
    "BulkDeleteRequest",
    "BulkDeleteResult",
    "ClearResult",
    "Executor",
    "ImportResult",
    "LookupField",
    "OrderCreate",
    "OrderFields",
    "OrderRead",
    "OrderRecord",
    "OrderStats",
    "OrderStatus",
    "OrderUpdate",
    "RestoreResult",
    "blank_executors",
    "normalize_executors",
]
