"""
文件路径：giftbook/processors/fitter.py

说明：单元格自适应排字。

- 横排：从初始字号起按 0.5 递减，直到宽度不超过单元格 90%，最低不小于最小字号；垂直居中并按字高/10 微调基线。
- 竖排：字符自上而下成列，列自左向右排布；按“单列可容纳字数”推出所需列数（最多 3 列），再决定字号。
  需要 2 列时只检查初始字号，放不下直接升为 3 列再缩字号（沿用原有排版规则，不做 2 列缩字号搜索）。
  3 列按初始字号仍容纳不下时，把全部字符均分到 3 列再缩字号，任何字符都不丢弃。
- 始终给出结果：放不下时以最小字号绘制，接受视觉溢出；空文本不产生任何绘制指令。
- 纯函数，不记录日志、不抛异常。
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Protocol

from ..models import RGB, DrawText
from ..variables import (
    CONST_BASELINE_NUDGE_DIVISOR,
    CONST_FIT_RATIO,
    CONST_FIT_STEP,
    CONST_MAX_VERTICAL_COLUMNS,
)


HORIZONTAL = "horizontal"
VERTICAL = "vertical"


class Metrics(Protocol):
    def width(self, text: str, size: float) -> float: ...

    def height(self, size: float) -> float: ...


@dataclass(frozen=True)
class Cell:
    """单元格，(x, y) 为左下角。"""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class FitStyle:
    initial_size: float
    min_size: float


@dataclass(frozen=True)
class VerticalPlan:
    """竖排方案：列数、字号，以及每列最多容纳的字数。"""

    column_count: int
    font_size: float
    chars_per_column: int
    rows_for_height: int


@dataclass
class TextFit:
    font_size: float = 0.0
    column_count: int = 0
    ops: List[DrawText] = field(default_factory=list)


def column_height(chars: int, size: float, spacing: float) -> float:
    return chars * (size + spacing) - (spacing if chars > 0 else 0.0)


def block_width(columns: int, size: float, spacing: float) -> float:
    return columns * size + (columns - 1) * spacing


def shrink_to_width(text: str, max_width: float, style: FitStyle, metrics: Metrics) -> float:
    """横排字号搜索：宽度超过 max_width 的 90% 时逐步缩小，最低 min_size。"""
    size = style.initial_size
    limit = max_width * CONST_FIT_RATIO
    while size >= style.min_size and metrics.width(text, size) > limit:
        size -= CONST_FIT_STEP
    return max(size, style.min_size)


def _shrink_block(rows: int, columns: int, cell: Cell, style: FitStyle, spacing: float) -> float:
    max_w = cell.width * CONST_FIT_RATIO
    max_h = cell.height * CONST_FIT_RATIO
    size = style.initial_size
    while size >= style.min_size:
        if column_height(rows, size, spacing) <= max_h and block_width(columns, size, spacing) <= max_w:
            break
        size -= CONST_FIT_STEP
    return size


def plan_vertical(char_count: int, cell: Cell, style: FitStyle, spacing: float) -> VerticalPlan:
    """决定竖排列数与字号。"""
    max_h = cell.height * CONST_FIT_RATIO
    max_w = cell.width * CONST_FIT_RATIO
    per_column = max(1, math.floor((max_h + spacing) / (style.initial_size + spacing)))
    needed = math.ceil(char_count / per_column)

    if needed <= 1:
        columns, rows = 1, char_count
        size = _shrink_block(rows, columns, cell, style, spacing)
    elif needed == 2 and (
        column_height(per_column, style.initial_size, spacing) <= max_h
        and block_width(2, style.initial_size, spacing) <= max_w
    ):
        columns, rows, size = 2, per_column, style.initial_size
    else:
        columns = CONST_MAX_VERTICAL_COLUMNS
        if char_count > columns * per_column:
            # 三列仍放不下：按总字数重新均分各列，字号随列高缩小
            per_column = math.ceil(char_count / columns)
        rows = per_column
        size = _shrink_block(rows, columns, cell, style, spacing)

    return VerticalPlan(
        column_count=columns,
        font_size=max(size, style.min_size),
        chars_per_column=per_column,
        rows_for_height=rows,
    )


def _fit_horizontal(text: str, cell: Cell, style: FitStyle, metrics: Metrics, color: RGB, font: str) -> TextFit:
    size = shrink_to_width(text, cell.width, style, metrics)
    text_w = metrics.width(text, size)
    text_h = metrics.height(size)
    op = DrawText(
        text=text,
        x=cell.x + (cell.width - text_w) / 2,
        y=cell.y + (cell.height - text_h) / 2 + text_h / CONST_BASELINE_NUDGE_DIVISOR,
        size=size,
        font=font,
        color=color,
    )
    return TextFit(font_size=size, column_count=1, ops=[op])


def _fit_vertical(
    text: str, cell: Cell, style: FitStyle, metrics: Metrics, color: RGB, font: str, spacing: float
) -> TextFit:
    chars = list(text)
    plan = plan_vertical(len(chars), cell, style, spacing)
    size = plan.font_size
    pitch = size + spacing

    block_h = column_height(plan.rows_for_height, size, spacing)
    block_w = block_width(plan.column_count, size, spacing)
    block_left = cell.x + (cell.width - block_w) / 2
    block_bottom = cell.y + (cell.height - block_h) / 2

    ops: List[DrawText] = []
    per_column = plan.chars_per_column
    for c in range(plan.column_count):
        column = chars[c * per_column:(c + 1) * per_column]
        if not column:
            continue
        col_h = column_height(len(column), size, spacing)
        start_y = block_bottom + (block_h - col_h) / 2 + (col_h - size) + spacing / 2
        for r, char in enumerate(column):
            char_w = metrics.width(char, size)
            ops.append(
                DrawText(
                    text=char,
                    x=block_left + c * pitch + (size - char_w) / 2,
                    y=start_y - r * pitch,
                    size=size,
                    font=font,
                    color=color,
                )
            )
    return TextFit(font_size=size, column_count=plan.column_count, ops=ops)


def fit_text(
    text: str,
    cell: Cell,
    style: FitStyle,
    orientation: str,
    metrics: Metrics,
    color: RGB,
    font: str,
    letter_spacing: float = 0.0,
) -> TextFit:
    """把文本放进单元格，返回字号、列数与绘制指令。

    参数：
        text: 待排文字；空串返回空结果。
        cell: 目标单元格。
        style: 初始字号与最小字号。
        orientation: "horizontal" 或 "vertical"。
        metrics: 字体度量（width/height）。
        color: 文字颜色。
        font: 绘制时使用的字体名。
        letter_spacing: 竖排字间距，同时作为列间距。
    """
    if not text:
        return TextFit()
    if orientation == VERTICAL:
        return _fit_vertical(text, cell, style, metrics, color, font, letter_spacing)
    return _fit_horizontal(text, cell, style, metrics, color, font)


__all__ = [
    "HORIZONTAL",
    "VERTICAL",
    "Metrics",
    "Cell",
    "FitStyle",
    "VerticalPlan",
    "TextFit",
    "column_height",
    "block_width",
    "shrink_to_width",
    "plan_vertical",
    "fit_text",
]
