"""
文件路径：giftbook/processors/engines/reportlab.py

说明：ReportLab 路径：把 RenderedPage 绘制指令逐页写入画布，输出 PDF 字节。
字体需事先通过 pdfmetrics 注册（见 components/fonts.py）。
"""

from __future__ import annotations

from io import BytesIO
from typing import Dict, Sequence

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ...components import get_logger
from ...models import DrawImage, DrawLine, DrawRect, DrawText, ImageAsset, RenderedPage
from ...variables import STYLE_PAGE_SIZE


logger = get_logger(__name__)


def _draw_text(c: canvas.Canvas, op: DrawText) -> None:
    c.setFillColorRGB(*op.color)
    if op.opacity < 1.0:
        c.setFillAlpha(op.opacity)
    c.setFont(op.font, op.size)
    c.drawString(op.x, op.y, op.text)
    if op.opacity < 1.0:
        c.setFillAlpha(1.0)


def render_pages(
    pages: Sequence[RenderedPage],
    images: Dict[str, ImageAsset],
    title: str = "",
) -> bytes:
    """使用 ReportLab 画布输出全部页面。"""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=STYLE_PAGE_SIZE)
    if title:
        c.setTitle(title)
    readers = {key: ImageReader(BytesIO(asset.data)) for key, asset in images.items()}

    for page in pages:
        c.setPageSize((page.width, page.height))
        for op in page.ops:
            if isinstance(op, DrawText):
                _draw_text(c, op)
            elif isinstance(op, DrawLine):
                c.setStrokeColorRGB(*op.color)
                c.setLineWidth(op.thickness)
                c.line(op.x1, op.y1, op.x2, op.y2)
            elif isinstance(op, DrawRect):
                c.setStrokeColorRGB(*op.color)
                c.setLineWidth(op.line_width)
                c.rect(op.x, op.y, op.width, op.height, stroke=1, fill=0)
            elif isinstance(op, DrawImage):
                reader = readers.get(op.key)
                if reader is not None:
                    c.drawImage(reader, op.x, op.y, width=op.width, height=op.height, mask="auto")
        c.showPage()

    c.save()
    data = buffer.getvalue()
    logger.info("ReportLab 输出完成：%s 页 (%.1f KB)", len(pages), len(data) / 1024.0)
    return data


__all__ = ["render_pages"]
