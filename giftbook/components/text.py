"""
文件路径：giftbook/components/text.py

说明：文本度量与换行工具。度量函数由调用方注入（通常绑定某字体与字号），
这里只负责段落拆分与贪心填充。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, List

from ..variables import CONST_LINE_GAP, CONST_WRAP_MODE_CHAR, CONST_WRAP_MODE_WORD


_PARAGRAPH_SPLIT = re.compile(r"\r?\n")
_WORD_TOKENS = re.compile(r"[\w']+|[^\s\w]")


@dataclass
class WrappedText:
    lines: List[str] = field(default_factory=list)
    height: float = 0.0


def estimate_text_width(
    text: str,
    font_size: float,
    char_width_ratio: float = 0.6,
) -> float:
    """估算文本宽度（简化版）。

    - 中文按 font_size 计算；ASCII 按 font_size * char_width_ratio。
    """
    if not text:
        return 0.0
    width = 0.0
    for char in text:
        if ord(char) > 127:
            width += font_size
        else:
            width += font_size * char_width_ratio
    return width


def _wrap_chars(paragraph: str, measure: Callable[[str], float], max_width: float) -> List[str]:
    """逐字贪心换行；单字超宽时独占一行。"""
    lines: List[str] = []
    line = ""
    for char in paragraph:
        candidate = line + char
        if not line or measure(candidate) <= max_width:
            line = candidate
        else:
            lines.append(line)
            line = char
    lines.append(line)
    return lines


def _wrap_words(paragraph: str, measure: Callable[[str], float], max_width: float) -> List[str]:
    """按词贪心换行，词间以空格连接；超宽单词再逐字拆开。"""
    lines: List[str] = []
    line = ""
    for token in _WORD_TOKENS.findall(paragraph):
        candidate = f"{line} {token}" if line else token
        if measure(candidate) <= max_width:
            line = candidate
            continue
        if line:
            lines.append(line)
        if measure(token) <= max_width:
            line = token
        else:
            pieces = _wrap_chars(token, measure, max_width)
            lines.extend(pieces[:-1])
            line = pieces[-1]
    lines.append(line)
    return lines


def wrap_text(
    text: str,
    measure: Callable[[str], float],
    max_width: float,
    font_size: float,
    mode: str = CONST_WRAP_MODE_CHAR,
) -> WrappedText:
    """按最大宽度把文本换成多行。

    参数：
        text: 原文，可含显式换行；空段落保留为一个空行。
        measure: 片段宽度函数（已绑定字体与字号）。
        max_width: 最大行宽（pt）。
        font_size: 字号，仅用于计算块高度。
        mode: "char" 逐字（中文），"word" 按词（西文）。

    返回：
        WrappedText，height = 行数 * (font_size + 4)。
    """
    if mode not in (CONST_WRAP_MODE_CHAR, CONST_WRAP_MODE_WORD):
        raise ValueError(f"未知换行模式：{mode}")
    wrap = _wrap_words if mode == CONST_WRAP_MODE_WORD else _wrap_chars

    lines: List[str] = []
    for paragraph in _PARAGRAPH_SPLIT.split(text or ""):
        lines.extend(wrap(paragraph, measure, max_width))
    return WrappedText(lines=lines, height=len(lines) * (font_size + CONST_LINE_GAP))


__all__ = [
    "WrappedText",
    "estimate_text_width",
    "wrap_text",
]
