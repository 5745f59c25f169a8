"""工具函数模块

包含一些常用的工具函数
"""

import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    """生成新的订单 ID（UUID4 字符串）"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """当前 UTC 时间（不带时区，与数据库中保存的格式一致）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_utc(dt: datetime) -> str:
    """格式化为带 Z 后缀的 ISO-8601 字符串"""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat(timespec="milliseconds") + "Z"


def contains_ci(value: str, term: str) -> bool:
    """大小写不敏感的子串匹配，空值视为不匹配"""
    return bool(value) and term.lower() in value.lower()
