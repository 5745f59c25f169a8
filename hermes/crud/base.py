"""存储层公共定义

两种存储实现（SQLAlchemy 的 OrderStore 与内存版 MemoryOrderStore）共享同一接口和排序规则。
"""

from typing import Iterable, List, Optional, Protocol, Tuple

from ..schemas import LookupField, OrderRecord

# 列表排序字段（camelCase 外部名 -> 属性名）
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "date": "date",
    "orderNumber": "order_number",
    "bottomNumber": "bottom_number",
    "material": "material",
    "diameter": "diameter",
    "thickness": "thickness",
}
DEFAULT_SORT_FIELD = "createdAt"

# 搜索覆盖的字段
SEARCH_FIELDS = ("order_number", "bottom_number", "material")


def resolve_sort(sort_field: Optional[str], direction: Optional[str]) -> Tuple[str, bool]:
    """返回 (属性名, 是否倒序)；未知字段回退到 createdAt，方向默认倒序"""
    attr = SORT_FIELDS.get(sort_field or "", SORT_FIELDS[DEFAULT_SORT_FIELD])
    descending = (direction or "desc").lower() != "asc"
    return attr, descending


def lookup_attribute(field) -> str:
    """业务键字段名（orderNumber / order_number / LookupField）-> 属性名"""
    if isinstance(field, LookupField):
        return field.attribute
    if field in ("order_number", "bottom_number"):
        return field
    return LookupField(field).attribute


class RecordStore(Protocol):
    """订单存储接口"""

    def get(self, order_id: str) -> Optional[OrderRecord]: ...

    def put(self, record: OrderRecord) -> str: ...

    def delete(self, order_id: str) -> bool: ...

    def list(self, sort_field: str = DEFAULT_SORT_FIELD, direction: str = "desc") -> List[OrderRecord]: ...

    def find_by_field(self, field, value: str) -> List[OrderRecord]: ...

    def search(self, term: str, limit: Optional[int] = None) -> List[OrderRecord]: ...

    def clear_all(self) -> int: ...

    def replace_all(self, records: Iterable[OrderRecord]) -> int: ...
