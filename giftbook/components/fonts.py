"""
文件路径：giftbook/components/fonts.py

说明：字体注册、回退与度量。

- 自定义字体以字节形式注册为 ReportLab TTFont，名称由内容摘要派生，同一字体重复生成时不重复注册；
- 注册失败回退到内置 CJK 字体 STSong-Light（不嵌入），再不行回退 Helvetica；
- FontMetrics 为排版层提供 width/height 两个度量入口，排版层不直接接触 pdfmetrics。
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import List, Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfbase.ttfonts import TTFont

from ..variables import (
    PATH_FONT_FILE,
    PATH_FONTS_DIR,
    CONST_CANDIDATE_CJK_FONT_PATHS,
    CONST_FALLBACK_CJK_FONT,
    CONST_FALLBACK_LATIN_FONT,
    ERR_FONT_REGISTER_FAILED,
)
from .text import estimate_text_width
from .logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class RegisteredFont:
    """一个已注册到 ReportLab 的字体。

    data 为 TTF 原始字节（供 PyMuPDF 引擎内嵌）；内置回退字体为 None。
    """

    name: str
    data: Optional[bytes] = None

    @property
    def builtin(self) -> bool:
        return self.data is None


class FontMetrics:
    """基于 ReportLab 字体度量的宽高计算。"""

    def __init__(self, font_name: str) -> None:
        self.font_name = font_name

    def width(self, text: str, size: float) -> float:
        try:
            return pdfmetrics.stringWidth(text, self.font_name, size)
        except Exception:  # noqa: BLE001
            # 字体未注册（例如纯排版测试），按字符类别估算
            return estimate_text_width(text, size)

    def height(self, size: float) -> float:
        """字高 = ascent - descent；取不到度量时按 0.8/0.2 em 估算。"""
        try:
            ascent, descent = pdfmetrics.getAscentDescent(self.font_name, size)
        except Exception:  # noqa: BLE001
            ascent, descent = size * 0.8, -size * 0.2
        return ascent - descent


def font_face_name(data: bytes, role: str) -> str:
    digest = hashlib.sha1(data).hexdigest()[:10]
    return f"GB-{role}-{digest}"


def register_font_bytes(data: bytes, role: str) -> Optional[RegisteredFont]:
    """以字节注册 TTF 字体，失败返回 None（由调用方回退）。"""
    name = font_face_name(data, role)
    if name in pdfmetrics.getRegisteredFontNames():
        return RegisteredFont(name=name, data=bytes(data))
    try:
        pdfmetrics.registerFont(TTFont(name, BytesIO(data)))
    except Exception as exc:  # noqa: BLE001
        logger.warning("[%s] 注册字体失败：%s，原因：%s", ERR_FONT_REGISTER_FAILED, role, exc)
        return None
    logger.info("已注册字体：%s -> %s (%.1f KB)", role, name, len(data) / 1024.0)
    return RegisteredFont(name=name, data=bytes(data))


def fallback_font() -> RegisteredFont:
    """回退字体：优先内置 CJK（不嵌入），注册失败则使用 Helvetica（中文可能显示为方块）。"""
    if CONST_FALLBACK_CJK_FONT in pdfmetrics.getRegisteredFontNames():
        return RegisteredFont(name=CONST_FALLBACK_CJK_FONT)
    try:
        pdfmetrics.registerFont(UnicodeCIDFont(CONST_FALLBACK_CJK_FONT))
        logger.info("已启用 CJK 回退字体：%s（未嵌入）", CONST_FALLBACK_CJK_FONT)
        return RegisteredFont(name=CONST_FALLBACK_CJK_FONT)
    except Exception as exc:  # noqa: BLE001
        logger.warning("CJK 回退字体注册失败，将使用英文字体（中文可能显示为方块）：%s", exc)
        return RegisteredFont(name=CONST_FALLBACK_LATIN_FONT)


def probe_available_cjk_fonts() -> List[Path]:
    """探测可用的 CJK 字体文件（TTF），按优先级返回去重列表。

    优先级：
    1) 显式指定的 `PATH_FONT_FILE`
    2) `config/fonts/` 目录下的 .ttf 文件（按文件名排序）
    3) `CONST_CANDIDATE_CJK_FONT_PATHS` 列表中存在的文件
    """
    seen: set[str] = set()
    results: List[Path] = []

    def _add(p: Path) -> None:
        key = str(p.resolve())
        if key not in seen and p.exists() and p.suffix.lower() == ".ttf":
            seen.add(key)
            results.append(p)

    if PATH_FONT_FILE:
        _add(Path(PATH_FONT_FILE))

    if PATH_FONTS_DIR.exists():
        for p in sorted(PATH_FONTS_DIR.glob("*.ttf")):
            _add(p)

    for s in CONST_CANDIDATE_CJK_FONT_PATHS:
        _add(Path(s))

    return results


def pick_preferred_cjk_font() -> Optional[Path]:
    """选择首个可用的 CJK 字体文件，若无可用则返回 None。"""
    fonts = probe_available_cjk_fonts()
    return fonts[0] if fonts else None


__all__ = [
    "RegisteredFont",
    "FontMetrics",
    "font_face_name",
    "register_font_bytes",
    "fallback_font",
    "probe_available_cjk_fonts",
    "pick_preferred_cjk_font",
]
