"""
文件路径：giftbook/components/styles.py

说明：礼簿样式解析。

- 颜色支持 #RGB / #RRGGBB / rgb(r, g, b) 以及 0~1 浮点三元组，解析失败回退默认值；
- 样式覆盖结构与原礼簿样式配置一致：各文字角色 {fontSize, color}，页脚 pageInfo {fontSize, themeColor, baseColor}；
- 白事（solemn）模式下所有配色统一为深灰，字号覆盖仍然生效。
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..models import RGB
from ..variables import (
    STYLE_AMOUNT_SIZE,
    STYLE_COVER_TEXT_SIZE,
    STYLE_FESTIVE_COLORS,
    STYLE_LABEL_SIZE,
    STYLE_MUTED_COLOR,
    STYLE_NAME_SIZE,
    STYLE_NUMERIC_SIZE,
    STYLE_PAGE_INFO_SIZE,
    STYLE_SOLEMN_COLOR,
)


_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_NUMBERS = re.compile(r"[\d.]+")
_BLACK: RGB = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class TextStyle:
    size: float
    min_size: float
    color: RGB


@dataclass(frozen=True)
class ResolvedStyles:
    """一次生成内使用的全部配色与字号。"""

    name: TextStyle
    label: TextStyle
    amount: TextStyle
    numeric: TextStyle
    cover: TextStyle
    page_info_size: float
    theme: RGB  # 表格线、标题
    base: RGB  # 页脚、正文
    muted: RGB  # 统计页注释


def parse_color(value: Any, default: RGB = _BLACK) -> RGB:
    """解析颜色为 0~1 的 RGB 三元组。

    示例：
        >>> parse_color("#f00")
        (1.0, 0.0, 0.0)
        >>> parse_color("rgb(236, 64, 60)")[0]
        0.9254901960784314
    """
    if isinstance(value, (tuple, list)) and len(value) == 3:
        try:
            rgb = tuple(float(v) for v in value)
        except (TypeError, ValueError):
            return default
        return rgb if all(0.0 <= v <= 1.0 for v in rgb) else default  # type: ignore[return-value]

    text = str(value or "").strip()
    if not text:
        return default

    match = _HEX_COLOR.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        n = int(digits, 16)
        return ((n >> 16) / 255.0, ((n >> 8) & 255) / 255.0, (n & 255) / 255.0)

    if text.lower().startswith("rgb"):
        numbers = _NUMBERS.findall(text)
        if len(numbers) >= 3:
            try:
                r, g, b = (float(n) for n in numbers[:3])
            except ValueError:
                return default
            return (r / 255.0, g / 255.0, b / 255.0)

    return default


def _positive_number(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) and number > 0 else default


def resolve_styles(
    overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
    solemn: bool = False,
) -> ResolvedStyles:
    """合并默认样式与覆盖项，得到最终样式。"""
    overrides = overrides or {}

    def section(key: str) -> Mapping[str, Any]:
        value = overrides.get(key)
        return value if isinstance(value, Mapping) else {}

    def color(key: str, field: str, default_hex: str) -> RGB:
        if solemn:
            return parse_color(STYLE_SOLEMN_COLOR)
        return parse_color(section(key).get(field), parse_color(default_hex))

    def text_style(key: str, defaults: Any, default_hex: str) -> TextStyle:
        size, min_size = defaults
        return TextStyle(
            size=_positive_number(section(key).get("fontSize"), size),
            min_size=min_size,
            color=color(key, "color", default_hex),
        )

    page_info = section("pageInfo")
    base = color("pageInfo", "baseColor", STYLE_FESTIVE_COLORS["baseColor"])
    numeric_size, numeric_min = STYLE_NUMERIC_SIZE
    return ResolvedStyles(
        name=text_style("name", STYLE_NAME_SIZE, STYLE_FESTIVE_COLORS["name"]),
        label=text_style("label", STYLE_LABEL_SIZE, STYLE_FESTIVE_COLORS["label"]),
        amount=text_style("amount", STYLE_AMOUNT_SIZE, STYLE_FESTIVE_COLORS["amount"]),
        numeric=TextStyle(size=numeric_size, min_size=numeric_min, color=base),
        cover=text_style(
            "coverText",
            (STYLE_COVER_TEXT_SIZE, STYLE_COVER_TEXT_SIZE),
            STYLE_FESTIVE_COLORS["coverText"],
        ),
        page_info_size=_positive_number(page_info.get("fontSize"), STYLE_PAGE_INFO_SIZE),
        theme=color("pageInfo", "themeColor", STYLE_FESTIVE_COLORS["themeColor"]),
        base=base,
        muted=parse_color(STYLE_MUTED_COLOR),
    )


def style_overrides_from_mapping(data: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """接受 {"giftBookStyles": {...}} 或裸映射，丢弃非字典的条目。"""
    raw = data.get("giftBookStyles", data) if isinstance(data, Mapping) else {}
    if not isinstance(raw, Mapping):
        return {}
    return {str(k): dict(v) for k, v in raw.items() if isinstance(v, Mapping)}


__all__ = [
    "TextStyle",
    "ResolvedStyles",
    "parse_color",
    "resolve_styles",
    "style_overrides_from_mapping",
]
