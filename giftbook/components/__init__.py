"""
文件路径：giftbook/components/__init__.py

说明：
- 通用组件包入口，按职责拆分为 `components/{logging.py, io.py, amount.py, text.py, fonts.py, styles.py}`；
- 业务模块与测试可统一使用 `from giftbook.components import ...` 导入。
"""

from __future__ import annotations

from .logging import ErrorHandler, get_logger
from .io import FileHandler, fetch_bytes
from .amount import amount_display_text, format_plain_amount, format_rmb, to_chinese_amount, to_decimal
from .text import WrappedText, estimate_text_width, wrap_text
from .fonts import (
    FontMetrics,
    RegisteredFont,
    fallback_font,
    pick_preferred_cjk_font,
    probe_available_cjk_fonts,
    register_font_bytes,
)
from .styles import ResolvedStyles, TextStyle, parse_color, resolve_styles, style_overrides_from_mapping


# =============================
# 导出声明
# =============================
__all__ = [
    # 日志与错误处理
    "get_logger",
    "ErrorHandler",
    # 文件操作与资源拉取
    "FileHandler",
    "fetch_bytes",
    # 金额格式化
    "to_decimal",
    "to_chinese_amount",
    "format_rmb",
    "format_plain_amount",
    "amount_display_text",
    # 文本度量与换行
    "WrappedText",
    "estimate_text_width",
    "wrap_text",
    # 字体
    "FontMetrics",
    "RegisteredFont",
    "register_font_bytes",
    "fallback_font",
    "probe_available_cjk_fonts",
    "pick_preferred_cjk_font",
    # 样式
    "TextStyle",
    "ResolvedStyles",
    "parse_color",
    "resolve_styles",
    "style_overrides_from_mapping",
]
