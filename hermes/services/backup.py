"""JSON 备份编解码

备份格式：{version, timestamp (ISO-8601), totalRecords, data: [订单...]}
"""

import json
from typing import Iterable, List

from ..schemas import OrderRecord
from ..utils.helpers import isoformat_utc, utcnow
from .exceptions import FormatError

BACKUP_VERSION = 1


def build_backup(records: Iterable[OrderRecord]) -> dict:
    data = [record.model_dump(mode="json", by_alias=True) for record in records]
    return {
        "version": BACKUP_VERSION,
        "timestamp": isoformat_utc(utcnow()),
        "totalRecords": len(data),
        "data": data,
    }


def dump_backup(records: Iterable[OrderRecord]) -> str:
    return json.dumps(build_backup(records), ensure_ascii=False, indent=2)


def backup_filename(timestamp: str) -> str:
    return f"orders_backup_{timestamp.replace(':', '-')}.json"


def parse_backup(text) -> List[dict]:
    """解析备份文本并返回 data 列表；格式不正确时抛出 FormatError，此时不会触碰存储"""
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise FormatError(f"Backup file is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise FormatError("Backup file must contain a JSON object")
    data = payload.get("data")
    if not isinstance(data, list):
        raise FormatError("Backup file has no 'data' list")
    return data
