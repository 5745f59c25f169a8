"""导入对账（reconcile）

对一批外部来源的候选记录（CSV 行或备份条目）逐条决定插入、更新或跳过，并统计结果。

- reconcile: 按业务键查找已有记录；存在且不允许覆盖则跳过，允许覆盖则沿用原 id/createdAt 更新，
  不存在则生成新 id 插入。单条失败只计入 errors，不会中断整批。
- restore: 备份恢复，所有有效条目通过 store.replace_all 在一个事务中整体替换现有数据。
"""

from typing import Mapping, Optional, Sequence

import structlog
from pydantic import ValidationError as PydanticValidationError

from ..crud.base import RecordStore
from ..schemas import ImportResult, LookupField, OrderRecord, OrderStatus, RestoreResult
from ..utils.helpers import generate_id, utcnow
from .exceptions import ServiceError, ValidationError

logger = structlog.get_logger(__name__)

# 候选记录中由对账过程决定、不从输入读取的字段
_MANAGED_KEYS = ("id", "createdAt", "created_at", "updatedAt", "updated_at", "status")


def _lookup_value(candidate: Mapping, field: LookupField) -> str:
    value = candidate.get(field.value)
    if value is None:
        value = candidate.get(field.attribute)
    return "" if value is None else str(value).strip()


def _validate(data: dict) -> OrderRecord:
    try:
        return OrderRecord.model_validate(data)
    except PydanticValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ValidationError(errors) from exc


def build_record(
    candidate: Mapping,
    order_id: str,
    created_at,
    updated_at,
    status: OrderStatus = OrderStatus.active,
) -> OrderRecord:
    """由候选记录构造完整订单，缺失字段取默认值，执行人规整为 6 个岗位"""
    if not isinstance(candidate, Mapping):
        raise ValidationError(f"Candidate must be a mapping, got {type(candidate).__name__}")
    if not _lookup_value(candidate, LookupField.ORDER_NUMBER):
        raise ValidationError("orderNumber is required")

    data = {key: value for key, value in candidate.items() if key not in _MANAGED_KEYS}
    data.update(id=order_id, created_at=created_at, updated_at=updated_at, status=status)
    return _validate(data)


def reconcile(
    store: RecordStore,
    candidates: Sequence[Mapping],
    overwrite: bool = False,
    lookup_field: LookupField = LookupField.ORDER_NUMBER,
) -> ImportResult:
    """逐条对账并写入存储，返回 imported/updated/skipped/errors/total"""
    lookup_field = LookupField(lookup_field)
    result = ImportResult(total=len(candidates))

    for position, candidate in enumerate(candidates, start=1):
        existing: Optional[OrderRecord] = None
        try:
            if not isinstance(candidate, Mapping):
                raise ValidationError(f"Candidate must be a mapping, got {type(candidate).__name__}")

            value = _lookup_value(candidate, lookup_field)
            if value:
                matches = store.find_by_field(lookup_field, value)
                existing = matches[0] if matches else None

            if existing is not None and not overwrite:
                result.skipped += 1
                continue

            now = utcnow()
            if existing is not None:
                record = build_record(candidate, existing.id, existing.created_at, now, existing.status)
            else:
                record = build_record(candidate, generate_id(), now, now)
            store.put(record)
        except (ServiceError, TypeError, ValueError) as exc:
            result.errors += 1
            logger.warning("Import record failed", position=position, error=str(exc))
            continue

        if existing is not None:
            result.updated += 1
        else:
            result.imported += 1

    logger.info(
        "Import finished",
        lookup_field=lookup_field.value,
        overwrite=overwrite,
        **result.model_dump(),
    )
    return result


def restore_record(entry: Mapping) -> OrderRecord:
    """备份条目 -> 订单，保留条目自身的 id、createdAt、updatedAt、status"""
    if not isinstance(entry, Mapping):
        raise ValidationError(f"Backup entry must be an object, got {type(entry).__name__}")

    data = dict(entry)
    now = utcnow()
    order_id = data.pop("id", None)
    data["id"] = str(order_id) if order_id not in (None, "") else generate_id()
    for alias, name in (("createdAt", "created_at"), ("updatedAt", "updated_at")):
        value = data.pop(alias, None) or data.pop(name, None)
        data[name] = value or now
    if not data.get("status"):
        data["status"] = OrderStatus.active
    return _validate(data)


def restore(store: RecordStore, entries: Sequence) -> RestoreResult:
    """用备份条目整体替换存储内容

    无效条目（格式错误、重复 id 或重复订单号）计入 errors 并跳过；
    写入失败时 replace_all 整体回滚并抛出 StoreError，原有数据保持不变。
    """
    records = []
    seen_ids = set()
    seen_numbers = set()
    errors = 0

    for position, entry in enumerate(entries, start=1):
        try:
            record = restore_record(entry)
            if record.id in seen_ids:
                raise ValidationError(f"Duplicate id in backup: {record.id}")
            if record.order_number in seen_numbers:
                raise ValidationError(f"Duplicate orderNumber in backup: {record.order_number}")
        except (ServiceError, TypeError, ValueError) as exc:
            errors += 1
            logger.warning("Backup entry rejected", position=position, error=str(exc))
            continue
        seen_ids.add(record.id)
        seen_numbers.add(record.order_number)
        records.append(record)

    restored = store.replace_all(records)
    result = RestoreResult(restored=restored, errors=errors, total=len(entries))
    logger.info("Backup restored", **result.model_dump())
    return result
