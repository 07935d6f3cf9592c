"""
文件路径：giftbook/__init__.py

说明：礼金簿 PDF 排版包。常用入口：

    from giftbook import GiftRecord, LayoutOptions, generate
    pdf = generate([GiftRecord(name="张三", amount=Decimal("100"))], LayoutOptions(subtitle="二〇二四年十月"))
"""

from .gift_registry import GiftRegistryPDF, generate, merge_documents, split_records
from .models import FontSources, GiftRecord, ImageSources, LayoutOptions, PaymentMethod

__all__ = [
    "GiftRegistryPDF",
    "generate",
    "merge_documents",
    "split_records",
    "GiftRecord",
    "PaymentMethod",
    "LayoutOptions",
    "FontSources",
    "ImageSources",
]
