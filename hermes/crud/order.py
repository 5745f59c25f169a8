"""数据库操作（CRUD）- 订单相关

OrderStore 封装一个显式传入的 SQLAlchemy 会话，按记录读写订单：
- put 每条记录单独提交，失败时回滚并抛出 StoreError，不影响其他记录
- 读操作（get/list/find_by_field/search）失败时同样回滚并抛出 StoreError
- find_by_field 按 updated_at 倒序返回，重复业务键时"第一条"即最近写入的记录
- replace_all 在同一事务内清空并重建，用于备份恢复
"""

from typing import Iterable, List, Optional

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..schemas import OrderRecord
from ..services.exceptions import DuplicateOrderError, StoreError
from ..utils.helpers import contains_ci
from .base import SEARCH_FIELDS, lookup_attribute, resolve_sort

logger = structlog.get_logger(__name__)

_COLUMNS = (
    "date",
    "order_number",
    "diameter",
    "thickness",
    "type_size",
    "cutting",
    "bottom_number",
    "material",
    "heat_treatment",
    "treatment_date",
    "created_at",
    "updated_at",
)


def _to_record(row: models.Order) -> OrderRecord:
    return OrderRecord.model_validate(row)


def _apply(row: models.Order, record: OrderRecord) -> None:
    for name in _COLUMNS:
        setattr(row, name, getattr(record, name))
    row.executors = [executor.model_dump() for executor in record.executors]
    row.status = record.status.value


class OrderStore:
    """基于 SQLAlchemy 会话的订单存储"""

    def __init__(self, db: Session):
        self.db = db

    def _read_failed(self, action: str, exc: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.error("Order read failed", action=action, error=str(exc))
        return StoreError(f"Failed to {action}: {exc}")

    def get(self, order_id: str) -> Optional[OrderRecord]:
        try:
            row = self.db.get(models.Order, order_id)
        except SQLAlchemyError as exc:
            raise self._read_failed(f"load order {order_id}", exc) from exc
        return _to_record(row) if row else None

    def put(self, record: OrderRecord) -> str:
        """插入或覆盖一条记录，返回其 id"""
        try:
            row = self.db.get(models.Order, record.id)
            if row is None:
                row = models.Order(id=record.id)
                self.db.add(row)
            _apply(row, record)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateOrderError(record.order_number) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Failed to save order {record.id}: {exc}") from exc
        return record.id

    def delete(self, order_id: str) -> bool:
        try:
            row = self.db.get(models.Order, order_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Failed to delete order {order_id}: {exc}") from exc
        return True

    def list(self, sort_field: str = "createdAt", direction: str = "desc") -> List[OrderRecord]:
        """获取所有订单，按指定字段排序"""
        attr, descending = resolve_sort(sort_field, direction)
        column = getattr(models.Order, attr)
        order_by = column.desc() if descending else column.asc()
        try:
            rows = self.db.query(models.Order).order_by(order_by, models.Order.id).all()
        except SQLAlchemyError as exc:
            raise self._read_failed("list orders", exc) from exc
        return [_to_record(row) for row in rows]

    def find_by_field(self, field, value: str) -> List[OrderRecord]:
        """按业务键精确查找"""
        attr = lookup_attribute(field)
        column = getattr(models.Order, attr)
        try:
            rows = (
                self.db.query(models.Order)
                .filter(column == value)
                .order_by(models.Order.updated_at.desc(), models.Order.id)
                .all()
            )
        except SQLAlchemyError as exc:
            raise self._read_failed(f"look up orders by {attr}", exc) from exc
        return [_to_record(row) for row in rows]

    def search(self, term: str, limit: Optional[int] = None) -> List[OrderRecord]:
        """订单号、封头编号、材料的模糊搜索（大小写不敏感）

        在 Python 侧逐条匹配：SQLite 的 LIKE 只对 ASCII 忽略大小写，且输入中的 % 和 _ 需按字面处理
        """
        found = [
            r for r in self.list()
            if any(contains_ci(getattr(r, name), term) for name in SEARCH_FIELDS)
        ]
        return found[:limit] if limit else found

    def clear_all(self) -> int:
        try:
            deleted = self.db.query(models.Order).delete()
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Failed to clear orders: {exc}") from exc
        return deleted

    def replace_all(self, records: Iterable[OrderRecord]) -> int:
        """清空并写入全部记录；任何失败都会整体回滚"""
        count = 0
        try:
            self.db.expunge_all()
            self.db.query(models.Order).delete(synchronize_session=False)
            for record in records:
                row = models.Order(id=record.id)
                _apply(row, record)
                self.db.add(row)
                count += 1
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Restore rolled back", error=str(exc))
            raise StoreError(f"Failed to restore orders: {exc}") from exc
        return count
