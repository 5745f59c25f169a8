"""订单业务服务

表单保存（创建/更新）、查询、统计，以及 CSV 导入导出和备份恢复的入口。
所有函数都接收显式构造的存储对象（OrderStore 或 MemoryOrderStore）。
"""

from typing import Iterable, List, Optional

import structlog

from ..config.settings import settings
from ..crud.base import RecordStore
from ..schemas import (
    BulkDeleteResult,
    ImportResult,
    LookupField,
    OrderCreate,
    OrderRecord,
    OrderStats,
    OrderStatus,
    OrderUpdate,
    RestoreResult,
)
from ..utils.helpers import contains_ci, generate_id, utcnow
from . import backup, csv_codec
from .exceptions import DuplicateOrderError, OrderNotFound, StoreError, ValidationError
from .reconcile import reconcile, restore

logger = structlog.get_logger(__name__)


def _ensure_unique(store: RecordStore, order_number: str, order_id: Optional[str] = None) -> None:
    for other in store.find_by_field(LookupField.ORDER_NUMBER, order_number):
        if other.id != order_id:
            raise DuplicateOrderError(order_number)


def create_order(store: RecordStore, data: OrderCreate) -> OrderRecord:
    """创建新订单"""
    _ensure_unique(store, data.order_number)
    now = utcnow()
    record = OrderRecord(
        **data.model_dump(),
        id=generate_id(),
        created_at=now,
        updated_at=now,
    )
    store.put(record)
    logger.info("Order created", order_id=record.id, order_number=record.order_number)
    return record


def get_order(store: RecordStore, order_id: str) -> OrderRecord:
    record = store.get(order_id)
    if record is None:
        raise OrderNotFound(order_id)
    return record


def update_order(store: RecordStore, order_id: str, data: OrderUpdate) -> OrderRecord:
    """更新订单，id 与 createdAt 保持不变"""
    current = get_order(store, order_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "order_number" in changes:
        _ensure_unique(store, changes["order_number"], order_id)

    data = current.model_dump()
    data.update(changes)
    data["updated_at"] = utcnow()
    record = OrderRecord.model_validate(data)
    store.put(record)
    logger.info("Order updated", order_id=order_id, fields=sorted(changes))
    return record


def delete_order(store: RecordStore, order_id: str) -> None:
    if not store.delete(order_id):
        raise OrderNotFound(order_id)
    logger.info("Order deleted", order_id=order_id)


def delete_orders(store: RecordStore, ids: Iterable[str]) -> BulkDeleteResult:
    """逐条删除多个订单，单条失败不影响其余记录"""
    result = BulkDeleteResult()
    for order_id in ids:
        try:
            delete_order(store, order_id)
        except (OrderNotFound, StoreError) as exc:
            result.errors += 1
            logger.warning("Order delete failed", order_id=order_id, error=str(exc))
            continue
        result.deleted += 1
    logger.info("Bulk delete finished", **result.model_dump())
    return result


def clear_orders(store: RecordStore) -> int:
    deleted = store.clear_all()
    logger.warning("All orders cleared", deleted=deleted)
    return deleted


def list_orders(
    store: RecordStore,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    search: Optional[str] = None,
    skip: int = 0,
    limit: Optional[int] = None,
) -> List[OrderRecord]:
    """订单列表：排序 + 可选的关键字过滤 + 分页"""
    records = store.list(sort_by, sort_order)
    term = (search or "").strip()
    if term:
        records = [
            r for r in records
            if contains_ci(r.order_number, term) or contains_ci(r.bottom_number, term) or contains_ci(r.material, term)
        ]
    end = skip + limit if limit else None
    return records[skip:end]


def search_orders(store: RecordStore, q: Optional[str], limit: int = 20) -> List[OrderRecord]:
    term = (q or "").strip()
    if len(term) < settings.SEARCH_MIN_LENGTH:
        raise ValidationError(f"Search query must be at least {settings.SEARCH_MIN_LENGTH} characters")
    return store.search(term, limit)


def order_stats(store: RecordStore) -> OrderStats:
    records = store.list()
    return OrderStats(
        total=len(records),
        active=sum(1 for r in records if r.status == OrderStatus.active),
        unique_materials=len({r.material for r in records if r.material}),
        unique_order_numbers=len({r.order_number for r in records if r.order_number}),
    )


def export_orders_csv(
    store: RecordStore,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    material: Optional[str] = None,
) -> str:
    """导出有效订单为 CSV，可按日期范围（含端点）和材料过滤，按日期倒序"""
    records = [r for r in store.list("date", "desc") if r.status == OrderStatus.active]
    if date_from:
        records = [r for r in records if r.date and r.date >= date_from]
    if date_to:
        records = [r for r in records if r.date and r.date <= date_to]
    if material:
        records = [r for r in records if contains_ci(r.material, material)]
    logger.info("CSV export", records=len(records))
    return csv_codec.serialize_csv(csv_codec.order_to_row(r) for r in records)


def import_orders_csv(
    store: RecordStore,
    text: str,
    overwrite: bool = False,
    lookup_field: LookupField = LookupField.ORDER_NUMBER,
) -> ImportResult:
    """解析 CSV 并对账写入；CSV 无法使用时抛出 FormatError，不写入任何记录"""
    rows = csv_codec.parse_csv(text)
    candidates = csv_codec.rows_to_candidates(rows)
    return reconcile(store, candidates, overwrite=overwrite, lookup_field=lookup_field)


def export_backup(store: RecordStore) -> dict:
    return backup.build_backup(store.list())


def restore_backup(store: RecordStore, text) -> RestoreResult:
    """解析备份并整体恢复；格式错误时抛出 FormatError，存储保持不变"""
    entries = backup.parse_backup(text)
    return restore(store, entries)
