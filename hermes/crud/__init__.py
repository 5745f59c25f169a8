from .base import DEFAULT_SORT_FIELD, SORT_FIELDS, RecordStore, resolve_sort
from .memory import MemoryOrderStore
from .order import OrderStore

__all__ = [
    "DEFAULT_SORT_FIELD",
    "SORT_FIELDS",
    "RecordStore",
    "resolve_sort",
    "MemoryOrderStore",
    "OrderStore",
]
