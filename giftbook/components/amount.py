"""
文件路径：giftbook/components/amount.py

说明：金额格式化工具：阿拉伯数字金额转中文大写（礼簿竖排金额、统计页），以及人民币显示格式。
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Union

from ..variables import ERR_DATA_INVALID

Number = Union[int, float, Decimal, str]

_DIGITS = "零壹贰叁肆伍陆柒捌玖"
_UNITS = ("", "拾", "佰", "仟")
_GROUP_UNITS = ("", "万", "亿", "万亿")

def to_decimal(amount: Number) -> Decimal:
    """将金额转为 Decimal；非数值（含 bool、NaN、无穷）抛 ValueError。"""
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal, str)):
        raise ValueError(f"[{ERR_DATA_INVALID}] 金额必须是数值：{amount!r}")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ValueError(f"[{ERR_DATA_INVALID}] 金额必须是数值：{amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"[{ERR_DATA_INVALID}] 金额必须是有限数值：{amount!r}")
    return value

def _split_groups(digits: str) -> List[str]:
    """从右向左每 4 位分一节。"""
    groups: List[str] = []
    while digits:
        groups.insert(0, digits[-4:])
        digits = digits[:-4]
    return groups

def _convert_group(group: str) -> str:
    """转换一节（至多 4 位）。节内连续的零只在其后仍有非零数字时输出一个“零”。"""
    text = ""
    started = False
    pending_zero = False
    for i, ch in enumerate(group):
        digit = int(ch)
        if digit == 0:
            pending_zero = started
            continue
        if pending_zero:
            text += "零"
            pending_zero = False
        text += _DIGITS[digit] + _UNITS[len(group) - 1 - i]
        started = True
    return text

def to_chinese_amount(amount: Number) -> str:
    """金额转中文大写。

    示例：
        >>> to_chinese_amount(0)
        '零元整'
        >>> to_chinese_amount(1005)
        '壹仟零伍元整'
        >>> to_chinese_amount("88.5")
        '捌拾捌元伍角'

    规则：
    - 整数部分按 4 位一节，节单位为 万/亿/万亿；高位节全零而其后仍有非零节时在节间补一个“零”；
      低位节以零开头（如 1,0100）时同样补“零”。
    - 小数部分截断到分：角、分为零的一项省略，两者皆零时补“整”。
    - 负数加“负”前缀。
    """
    value = to_decimal(amount)
    if value < 0:
        return "负" + to_chinese_amount(-value)
    if value == 0:
        return "零元整"

    integer = int(value)
    cents = int((value - integer) * 100)
    jiao, fen = divmod(cents, 10)

    groups = _split_groups(str(integer)) if integer else []
    if len(groups) > len(_GROUP_UNITS):
        raise ValueError(f"[{ERR_DATA_INVALID}] 金额超出可转换范围：{amount!r}")

    text = ""
    for i, group in enumerate(groups):
        if int(group) == 0:
            if text and any(int(g) for g in groups[i + 1:]):
                text += "零"
            continue
        if text and group.startswith("0"):
            text += "零"
        text += _convert_group(group) + _GROUP_UNITS[len(groups) - 1 - i]

    text = re.sub("零+", "零", text).rstrip("零") or "零"
    text += "元"

    if jiao == 0 and fen == 0:
        return text + "整"
    if jiao:
        text += _DIGITS[jiao] + "角"
    if fen:
        text += _DIGITS[fen] + "分"
    return text

def format_rmb(amount: Number) -> str:
    """人民币显示格式：¥1,300.00（两位小数、千分位）。"""
    value = to_decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if value < 0:
        return f"-¥{-value:,.2f}"
    return f"¥{value:,.2f}"

def format_plain_amount(amount: Number) -> str:
    """礼金页数字金额：整数不带小数点，小数去掉尾随零（100 / 100.5）。"""
    value = to_decimal(amount)
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), "f")

def amount_display_text(amount: Number) -> str:
    """礼簿与统计页使用的金额大写文字；超出可转换范围时退回阿拉伯数字（如 12345678901234567元）。"""
    try:
        return to_chinese_amount(amount)
    except ValueError:
        value = to_decimal(amount)
        return format_plain_amount(value) + "元"

__all__ = [
    "to_decimal",
    "to_chinese_amount",
    "format_rmb",
    "format_plain_amount",
    "amount_display_text",
]
