"""
文件路径：giftbook/processors/ledger.py

说明：礼金记录的预处理（纯函数）。

- 过滤作废记录，按输入顺序计算“第 P 页第 N 人”位置索引；
- 拆分礼金子集（金额 > 0）与礼品子集（礼品描述非空）；
- 按收款方式汇总人数与金额（首次出现顺序）。

注意：位置索引基于全部未作废记录计算，礼品记录在附录中引用的索引与其录入位置一致。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, TypeVar

from ..models import GiftRecord, PaymentMethod, ProcessedRecord
from ..variables import CONST_POSITION_INDEX_FORMAT


T = TypeVar("T")


@dataclass
class MethodTotal:
    count: int = 0
    total: Decimal = Decimal("0")


@dataclass
class ProcessedLedger:
    records: List[ProcessedRecord] = field(default_factory=list)
    monetary: List[ProcessedRecord] = field(default_factory=list)
    gifts: List[ProcessedRecord] = field(default_factory=list)
    by_method: Dict[PaymentMethod, MethodTotal] = field(default_factory=dict)

    @property
    def gift_count(self) -> int:
        return len(self.gifts)

    @property
    def monetary_total(self) -> Decimal:
        return sum((r.amount for r in self.monetary), Decimal("0"))


def assign_positions(records: Sequence[GiftRecord], items_per_page: int) -> List[ProcessedRecord]:
    """过滤作废记录并附加位置索引。相同输入总是得到相同结果。"""
    per_page = max(1, int(items_per_page))
    result: List[ProcessedRecord] = []
    page, row = 1, 0
    for record in records:
        if record.voided:
            continue
        row += 1
        if row > per_page:
            page += 1
            row = 1
        result.append(
            ProcessedRecord(record=record, position_index=CONST_POSITION_INDEX_FORMAT.format(page=page, row=row))
        )
    return result


def process_records(records: Sequence[GiftRecord], items_per_page: int) -> ProcessedLedger:
    processed = assign_positions(records, items_per_page)
    ledger = ProcessedLedger(records=processed)
    for item in processed:
        if item.record.has_gift:
            ledger.gifts.append(item)
        if item.record.is_monetary:
            ledger.monetary.append(item)
            bucket = ledger.by_method.setdefault(item.payment_method, MethodTotal())
            bucket.count += 1
            bucket.total += item.amount
    return ledger


def paginate(items: Sequence[T], per_page: int) -> List[List[Optional[T]]]:
    """按每页条数切片，末页以 None 占位补齐。空输入返回空列表。"""
    per_page = max(1, int(per_page))
    pages: List[List[Optional[T]]] = []
    for start in range(0, len(items), per_page):
        chunk: List[Optional[T]] = list(items[start:start + per_page])
        chunk.extend([None] * (per_page - len(chunk)))
        pages.append(chunk)
    return pages


__all__ = [
    "MethodTotal",
    "ProcessedLedger",
    "assign_positions",
    "process_records",
    "paginate",
]
