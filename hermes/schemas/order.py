"""订单数据结构定义

定义订单相关的Pydantic模型。对外 JSON 使用 camelCase 字段名（orderNumber、createdAt 等），
Python 侧使用 snake_case 属性名，两种写法在输入时都可接受。
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

# 订单号只允许字母、数字和连字符
ORDER_NUMBER_PATTERN = r"^[A-Za-z0-9\-]+$"

# 执行人固定 6 个岗位，按位置区分
EXECUTOR_ROLES = ("welder", "stamping", "flanging", "calibration", "plug_welder", "cutter")
EXECUTOR_SLOTS = len(EXECUTOR_ROLES)

TEXT_FIELDS = (
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
)


class OrderStatus(str, Enum):
    active = "active"
    deleted = "deleted"


class LookupField(str, Enum):
    """导入时用于查找已有记录的业务键"""
    ORDER_NUMBER = "orderNumber"
    BOTTOM_NUMBER = "bottomNumber"

    @property
    def attribute(self) -> str:
        return "order_number" if self is LookupField.ORDER_NUMBER else "bottom_number"


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _as_naive_utc(value):
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Executor(CamelModel):
    """执行人岗位：姓名 + 完成日期"""
    name: str = ""
    date: str = ""

    @field_validator("name", "date", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return _as_text(value)


def blank_executors() -> List[Executor]:
    return [Executor() for _ in range(EXECUTOR_SLOTS)]


def normalize_executors(value) -> list:
    """把执行人列表规整为恰好 6 个岗位，缺失的补空，多余的截断"""
    if value is None:
        return blank_executors()
    if isinstance(value, dict):
        # {"0": {...}, "1": {...}} 形式
        value = [value.get(str(i)) for i in range(EXECUTOR_SLOTS)]
    slots = []
    for item in list(value)[:EXECUTOR_SLOTS]:
        if item is None:
            item = {}
        elif isinstance(item, BaseModel):
            item = item.model_dump()
        slots.append(item)
    while len(slots) < EXECUTOR_SLOTS:
        slots.append({})
    return slots


class OrderFields(CamelModel):
    """订单的业务字段（除标识与时间戳外）"""
    date: str = ""
    order_number: str = ""
    diameter: str = ""
    thickness: str = ""
    type_size: str = ""
    cutting: str = ""
    bottom_number: str = ""
    material: str = ""
    heat_treatment: str = ""
    treatment_date: str = ""
    executors: List[Executor] = Field(default_factory=blank_executors)

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, value, info: ValidationInfo):
        text = _as_text(value)
        # 业务键去除首尾空白后再做格式校验
        if info.field_name in ("order_number", "bottom_number"):
            return text.strip()
        return text

    @field_validator("executors", mode="before")
    @classmethod
    def _normalize_executors(cls, value):
        return normalize_executors(value)


class OrderRecord(OrderFields):
    """存储层中的完整订单记录"""
    id: str
    order_number: str = Field(pattern=ORDER_NUMBER_PATTERN)
    status: OrderStatus = OrderStatus.active
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return _as_naive_utc(value)


class OrderCreate(OrderFields):
    """表单创建订单：日期和订单号必填"""
    date: str = Field(min_length=1)
    order_number: str = Field(pattern=ORDER_NUMBER_PATTERN)


class OrderUpdate(CamelModel):
    """更新订单时的模型，仅修改显式给出的字段"""
    date: Optional[str] = Field(None, min_length=1)
    order_number: Optional[str] = Field(None, pattern=ORDER_NUMBER_PATTERN)
    diameter: Optional[str] = None
    thickness: Optional[str] = None
    type_size: Optional[str] = None
    cutting: Optional[str] = None
    bottom_number: Optional[str] = None
    material: Optional[str] = None
    heat_treatment: Optional[str] = None
    treatment_date: Optional[str] = None
    executors: Optional[List[Executor]] = None
    status: Optional[OrderStatus] = None

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, value, info: ValidationInfo):
        if value is None:
            return None
        text = _as_text(value)
        if info.field_name in ("order_number", "bottom_number"):
            return text.strip()
        return text

    @field_validator("executors", mode="before")
    @classmethod
    def _normalize_executors(cls, value):
        return None if value is None else normalize_executors(value)


OrderRead = OrderRecord


class ImportResult(CamelModel):
    """CSV 导入统计：imported + updated + skipped + errors == total"""
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    total: int = 0


class RestoreResult(CamelModel):
    restored: int = 0
    errors: int = 0
    total: int = 0


class OrderStats(CamelModel):
    total: int
    active: int
    unique_materials: int
    unique_order_numbers: int


class ClearResult(CamelModel):
    deleted: int


class BulkDeleteRequest(CamelModel):
    ids: List[str] = Field(default_factory=list)


class BulkDeleteResult(CamelModel):
    """批量删除统计：不存在的 id 和写入失败都计入 errors"""
    deleted: int = 0
    errors: int = 0
