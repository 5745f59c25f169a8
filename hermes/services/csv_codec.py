"""CSV 编解码

- parse_csv: 按引号感知的方式扫描整段文本，返回 {表头(小写): 值} 的行列表
- serialize_csv: 按 (字段, 标题) 列定义输出 CSV 文本
- order_to_row / rows_to_candidates: 订单记录与扁平行之间的映射，表头使用俄文标题
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..schemas import EXECUTOR_SLOTS, OrderRecord
from ..utils.helpers import isoformat_utc
from .exceptions import FormatError

# 订单字段 -> 导出标题
ORDER_COLUMNS = [
    ("id", "ID"),
    ("date", "Дата заказа"),
    ("orderNumber", "Номер заказа"),
    ("diameter", "Диаметр (мм)"),
    ("thickness", "Толщина (мм)"),
    ("typeSize", "Типоразмер"),
    ("cutting", "Раскрой"),
    ("bottomNumber", "Номер днища"),
    ("material", "Материал"),
    ("heatTreatment", "Режим ТО"),
    ("treatmentDate", "Дата ТО"),
]

# 6 个执行人岗位（姓名标题, 日期标题），顺序即岗位
EXECUTOR_TITLES = [
    ("Сварщик", "Дата сварки"),
    ("Штамповка", "Дата штамповки"),
    ("Отбортовка", "Дата отбортовки"),
    ("Калибровка", "Дата калибровки"),
    ("Сварщик (заглушки)", "Дата сварки заглушек"),
    ("Резчик", "Дата резки"),
]

TIMESTAMP_COLUMNS = [
    ("createdAt", "Дата создания"),
    ("updatedAt", "Дата обновления"),
]


def executor_key(index: int, part: str) -> str:
    return f"executors.{index}.{part}"


CSV_COLUMNS: List[Tuple[str, str]] = (
    ORDER_COLUMNS
    + [
        column
        for index, (name_title, date_title) in enumerate(EXECUTOR_TITLES)
        for column in ((executor_key(index, "name"), name_title), (executor_key(index, "date"), date_title))
    ]
    + TIMESTAMP_COLUMNS
)

_NEEDS_QUOTES = (",", '"', "\n", "\r")


def escape_cell(value) -> str:
    """转义单元格：含逗号、引号、换行或首尾空白时加引号，内部引号加倍"""
    if value is None:
        return ""
    text = str(value)
    if any(ch in text for ch in _NEEDS_QUOTES) or text != text.strip():
        return '"' + text.replace('"', '""') + '"'
    return text


def serialize_csv(rows: Iterable[Mapping[str, object]], columns: Sequence[Tuple[str, str]] = CSV_COLUMNS) -> str:
    lines = [",".join(escape_cell(title) for _, title in columns)]
    for row in rows:
        lines.append(",".join(escape_cell(row.get(field)) for field, _ in columns))
    return "\n".join(lines)


def _scan(text: str) -> List[List[str]]:
    """把文本拆成行和单元格

    `"` 切换引号模式，引号内 `""` 表示字面引号，逗号和换行按字面处理。
    未加引号的内容去掉首尾空白，引号内的内容原样保留。
    """
    rows: List[List[str]] = []
    row: List[str] = []
    cell: List[str] = []
    quoted_parts: List[str] = []
    in_quotes = False
    was_quoted = False

    def end_cell():
        nonlocal cell, quoted_parts, was_quoted
        if was_quoted:
            row.append("".join(quoted_parts))
        else:
            row.append("".join(cell).strip())
        cell, quoted_parts, was_quoted = [], [], False

    i, length = 0, len(text)
    while i < length:
        ch = text[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < length and text[i + 1] == '"':
                    quoted_parts.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                quoted_parts.append(ch)
        elif ch == '"':
            if not was_quoted:
                prefix = "".join(cell).lstrip()
                quoted_parts = [prefix] if prefix else []
                cell = []
            in_quotes = True
            was_quoted = True
        elif ch == ",":
            end_cell()
        elif ch == "\n":
            end_cell()
            rows.append(row)
            row = []
        elif ch == "\r":
            pass
        elif was_quoted:
            # 右引号之后的非空白字符仍属于同一单元格
            if not ch.isspace():
                quoted_parts.append(ch)
        else:
            cell.append(ch)
        i += 1

    if cell or quoted_parts or was_quoted or row:
        end_cell()
        rows.append(row)

    # 去掉空行
    return [r for r in rows if not (len(r) == 1 and r[0] == "")]


def parse_csv(text: str) -> List[Dict[str, str]]:
    """解析 CSV 文本，第一行为表头（小写、去引号），少于两行时抛出 FormatError"""
    if text.startswith("\ufeff"):
        text = text[1:]
    rows = _scan(text)
    if len(rows) < 2:
        raise FormatError("CSV must contain a header row and at least one data row")

    headers = [header.strip().lower().replace('"', "") for header in rows[0]]
    results = []
    for values in rows[1:]:
        results.append({header: values[index] if index < len(values) else "" for index, header in enumerate(headers)})
    return results


def decode_csv_bytes(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise FormatError("CSV file must be UTF-8 encoded") from exc


def order_to_row(order: OrderRecord) -> Dict[str, str]:
    """把订单展开为扁平行（执行人展开为 executors.N.name/date）"""
    data = order.model_dump(by_alias=True, exclude={"executors"})
    row = {field: data.get(field, "") for field, _ in ORDER_COLUMNS}
    for index, executor in enumerate(order.executors):
        row[executor_key(index, "name")] = executor.name
        row[executor_key(index, "date")] = executor.date
    row["createdAt"] = isoformat_utc(order.created_at)
    row["updatedAt"] = isoformat_utc(order.updated_at)
    return row


def _header_aliases(columns: Sequence[Tuple[str, str]]) -> Dict[str, str]:
    aliases = {}
    for field, title in columns:
        aliases[field.lower()] = field
        aliases[title.lower()] = field
    return aliases


_ALIASES = _header_aliases(CSV_COLUMNS)


def rows_to_candidates(rows: Iterable[Mapping[str, str]], columns: Optional[Sequence[Tuple[str, str]]] = None) -> List[dict]:
    """把解析后的行（表头已小写）映射为候选记录

    只保留表头表中认识的列，执行人按位置组装为 6 个岗位。
    """
    aliases = _ALIASES if columns is None else _header_aliases(columns)
    candidates = []
    for row in rows:
        candidate: dict = {}
        executors = [{"name": "", "date": ""} for _ in range(EXECUTOR_SLOTS)]
        for header, value in row.items():
            field = aliases.get(header.strip().lower())
            if field is None:
                continue
            if field.startswith("executors."):
                _, index, part = field.split(".")
                executors[int(index)][part] = value
            else:
                candidate[field] = value
        candidate["executors"] = executors
        candidates.append(candidate)
    return candidates
