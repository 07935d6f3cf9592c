"""
文件路径：giftbook/processors/engines/pymupdf.py

说明：PyMuPDF 路径：直接新建文档绘制，与 ReportLab 路径使用同一套绘制指令。

- 坐标：绘制指令以左下角为原点，PyMuPDF 以左上角为原点，需做 Y 轴翻转；
- 字体：自定义 TTF 通过 fontbuffer 内嵌；内置回退字体映射为 PyMuPDF 自带的 china-s / helv。
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

import fitz  # PyMuPDF

from ...components import get_logger
from ...models import DrawImage, DrawLine, DrawRect, DrawText, ImageAsset, RenderedPage
from ...variables import (
    CONST_FALLBACK_CJK_FONT,
    CONST_PYMUPDF_CJK_FONT,
    CONST_PYMUPDF_LATIN_FONT,
)


logger = get_logger(__name__)


class _FontTable:
    """ReportLab 字体名 → PyMuPDF 字体别名；内嵌字体按页登记。"""

    def __init__(self, fonts: Dict[str, Optional[bytes]]) -> None:
        self.fonts = fonts
        self.aliases: Dict[str, str] = {}

    def alias(self, font_name: str) -> str:
        if font_name not in self.aliases:
            if self.fonts.get(font_name):
                self.aliases[font_name] = f"GB{len(self.aliases)}"
            elif font_name == CONST_FALLBACK_CJK_FONT:
                self.aliases[font_name] = CONST_PYMUPDF_CJK_FONT
            else:
                self.aliases[font_name] = CONST_PYMUPDF_LATIN_FONT
        return self.aliases[font_name]

    def use(self, page: "fitz.Page", font_name: str, inserted: set) -> str:
        alias = self.alias(font_name)
        if alias not in inserted:
            data = self.fonts.get(font_name)
            if data:
                page.insert_font(fontname=alias, fontbuffer=data)
            else:
                page.insert_font(fontname=alias)
            inserted.add(alias)
        return alias


def render_pages(
    pages: Sequence[RenderedPage],
    images: Dict[str, ImageAsset],
    fonts: Dict[str, Optional[bytes]],
    title: str = "",
) -> bytes:
    """使用 PyMuPDF 输出全部页面。

    参数：
        pages: 绘制指令页。
        images: 图片资源（按 key 引用）。
        fonts: 字体名 → TTF 字节；内置回退字体为 None。
        title: 文档元数据标题。
    """
    doc = fitz.open()
    table = _FontTable(fonts)
    try:
        for page in pages:
            pg = doc.new_page(width=page.width, height=page.height)
            inserted: set = set()
            h = page.height
            for op in page.ops:
                if isinstance(op, DrawText):
                    fontname = table.use(pg, op.font, inserted)
                    pg.insert_text(
                        fitz.Point(op.x, h - op.y),
                        op.text,
                        fontsize=op.size,
                        fontname=fontname,
                        color=op.color,
                        fill_opacity=op.opacity,
                    )
                elif isinstance(op, DrawLine):
                    pg.draw_line(fitz.Point(op.x1, h - op.y1), fitz.Point(op.x2, h - op.y2), color=op.color, width=op.thickness)
                elif isinstance(op, DrawRect):
                    rect = fitz.Rect(op.x, h - op.y - op.height, op.x + op.width, h - op.y)
                    pg.draw_rect(rect, color=op.color, width=op.line_width)
                elif isinstance(op, DrawImage):
                    asset = images.get(op.key)
                    if asset is not None:
                        rect = fitz.Rect(op.x, h - op.y - op.height, op.x + op.width, h - op.y)
                        pg.insert_image(rect, stream=asset.data, keep_proportion=False)
        if title:
            doc.set_metadata({"title": title})
        data = doc.tobytes(deflate=True, garbage=4)
    finally:
        doc.close()
    logger.info("PyMuPDF 输出完成：%s 页 (%.1f KB)", len(pages), len(data) / 1024.0)
    return data


__all__ = ["render_pages"]
