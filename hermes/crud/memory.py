"""内存订单存储

与 OrderStore 接口一致，数据保存在字典中，用于本地/离线场景和测试。
订单号唯一性在写入时显式检查。
"""

from typing import Dict, Iterable, List, Optional

from ..schemas import OrderRecord
from ..services.exceptions import DuplicateOrderError
from ..utils.helpers import contains_ci
from .base import SEARCH_FIELDS, lookup_attribute, resolve_sort


class MemoryOrderStore:
    """基于字典的订单存储"""

    def __init__(self, records: Optional[Iterable[OrderRecord]] = None):
        self._records: Dict[str, OrderRecord] = {}
        for record in records or ():
            self.put(record)

    def __len__(self) -> int:
        return len(self._records)

    def _check_unique(self, record: OrderRecord, records: Dict[str, OrderRecord]) -> None:
        for other in records.values():
            if other.id != record.id and other.order_number == record.order_number:
                raise DuplicateOrderError(record.order_number)

    def get(self, order_id: str) -> Optional[OrderRecord]:
        record = self._records.get(order_id)
        return record.model_copy(deep=True) if record else None

    def put(self, record: OrderRecord) -> str:
        self._check_unique(record, self._records)
        self._records[record.id] = record.model_copy(deep=True)
        return record.id

    def delete(self, order_id: str) -> bool:
        return self._records.pop(order_id, None) is not None

    def list(self, sort_field: str = "createdAt", direction: str = "desc") -> List[OrderRecord]:
        attr, descending = resolve_sort(sort_field, direction)
        records = sorted(self._records.values(), key=lambda r: r.id)
        records.sort(key=lambda r: getattr(r, attr), reverse=descending)
        return [r.model_copy(deep=True) for r in records]

    def find_by_field(self, field, value: str) -> List[OrderRecord]:
        attr = lookup_attribute(field)
        matches = [r for r in self._records.values() if getattr(r, attr) == value]
        # 与 OrderStore 一致：最近更新的在前
        matches.sort(key=lambda r: r.id)
        matches.sort(key=lambda r: r.updated_at, reverse=True)
        return [r.model_copy(deep=True) for r in matches]

    def search(self, term: str, limit: Optional[int] = None) -> List[OrderRecord]:
        found = [
            r for r in self.list()
            if any(contains_ci(getattr(r, name), term) for name in SEARCH_FIELDS)
        ]
        return found[:limit] if limit else found

    def clear_all(self) -> int:
        count = len(self._records)
        self._records.clear()
        return count

    def replace_all(self, records: Iterable[OrderRecord]) -> int:
        # 先写入临时字典，出现重复时现有数据不受影响
        staged: Dict[str, OrderRecord] = {}
        for record in records:
            self._check_unique(record, staged)
            staged[record.id] = record.model_copy(deep=True)
        self._records = staged
        return len(staged)
