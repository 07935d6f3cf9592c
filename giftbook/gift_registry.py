"""
文件路径：giftbook/gift_registry.py

模块职责：
- 礼簿 PDF 文档装配：校验输入 → 过滤作废并计算位置索引 → 并发拉取字体/图片 → 注册字体、解码图片
  （白事模式下图片转灰度）→ 解析样式 → 分页排版 → 按所选引擎序列化为 PDF 字节。
- 多册输出：按条数拆分记录、为每册注入分册序号与事项总计，并可用 PyPDF2 合并为一个文件。

说明：
- 本模块是排版核心中唯一做 IO（资源拉取）与记录日志的部分；
- 单个字体/图片失败只记录警告并回退（字体回退到内置 CJK 字体，图片跳过），不中断生成；
- 记录为空、不是列表或包含非 GiftRecord 元素时直接拒绝（ValueError）。

用法示例：
    pdf = GiftRegistryPDF().generate(records, LayoutOptions(subtitle="二〇二四年十月"), event_title="张三李四婚礼")
"""

from __future__ import annotations

import hashlib
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from io import BytesIO
from typing import Callable, Dict, List, Optional, Sequence

from PIL import Image, ImageOps, UnidentifiedImageError
from PyPDF2 import PdfReader, PdfWriter

from .components import ErrorHandler, fetch_bytes as default_fetch_bytes, get_logger
from .components.fonts import RegisteredFont, fallback_font, register_font_bytes
from .components.styles import resolve_styles
from .models import GiftRecord, ImageAsset, LayoutOptions, RenderedPage, ResourceSource
from .processors.engines import pymupdf as pymupdf_engine
from .processors.engines import reportlab as reportlab_engine
from .processors.layout import (
    IMAGE_BACK_COVER,
    IMAGE_BACKGROUND,
    IMAGE_COVER,
    LayoutContext,
    LayoutFonts,
    layout_document,
)
from .processors.ledger import process_records
from .variables import (
    CONST_ENGINE_DEFAULT,
    CONST_ENGINE_PYMUPDF,
    CONST_ENGINE_REPORTLAB,
    CONST_FETCH_WORKERS,
    CONST_GRAYSCALE_JPEG_QUALITY,
    CONST_SECTION_BLANK,
    ERR_DATA_INVALID,
    ERR_IMAGE_DECODE_FAILED,
    ERR_PDF_MERGE_FAILED,
    ERR_PDF_WRITE_FAILED,
    ERR_RESOURCE_FETCH_FAILED,
)


logger = get_logger(__name__)

Fetcher = Callable[[ResourceSource], bytes]

_FONT_ROLES = ("main", "gift_label", "formal", "amount", "cover")
_IMAGE_KEYS = (IMAGE_COVER, IMAGE_BACKGROUND, IMAGE_BACK_COVER)
_ENGINES = (CONST_ENGINE_REPORTLAB, CONST_ENGINE_PYMUPDF)


def _validate_records(records: object) -> None:
    if not isinstance(records, (list, tuple)) or not records:
        raise ValueError(ErrorHandler.format_error(ERR_DATA_INVALID, "数据必须是一个非空列表"))
    bad = [i for i, r in enumerate(records) if not isinstance(r, GiftRecord)]
    if bad:
        raise ValueError(ErrorHandler.format_error(ERR_DATA_INVALID, f"第 {bad[0] + 1} 条记录不是 GiftRecord"))


def split_records(records: Sequence[GiftRecord], size: int) -> List[List[GiftRecord]]:
    """按条数把记录拆成多册；size <= 0 时不拆分。"""
    if size <= 0 or len(records) <= size:
        return [list(records)]
    return [list(records[i:i + size]) for i in range(0, len(records), size)]


def merge_documents(parts: Sequence[bytes]) -> bytes:
    """按顺序合并多个 PDF（分册）为一个文件。"""
    if not parts:
        raise ValueError(ErrorHandler.format_error(ERR_DATA_INVALID, "没有可合并的分册"))
    writer = PdfWriter()
    try:
        for data in parts:
            for page in PdfReader(BytesIO(data)).pages:
                writer.add_page(page)
        buffer = BytesIO()
        writer.write(buffer)
    except Exception as exc:  # noqa: BLE001
        raise RuntimeError(ErrorHandler.format_error(ERR_PDF_MERGE_FAILED, f"PDF 合并失败: {exc}")) from exc
    logger.info("已合并 %s 个分册，共 %s 页", len(parts), len(writer.pages))
    return buffer.getvalue()


class GiftRegistryPDF:
    """礼簿 PDF 生成器。每次 generate() 使用独立的排版状态，实例可重复使用。

    参数：
        fetch_bytes: 资源字节提供者（来源 → bytes，可抛异常）；默认支持字节、本地路径与 URL。
        engine: "reportlab"（默认）或 "pymupdf"。
        max_workers: 资源并发拉取线程数。
    """

    def __init__(
        self,
        fetch_bytes: Optional[Fetcher] = None,
        engine: str = CONST_ENGINE_DEFAULT,
        max_workers: int = CONST_FETCH_WORKERS,
    ) -> None:
        if engine not in _ENGINES:
            raise ValueError(ErrorHandler.format_error(ERR_DATA_INVALID, f"未知渲染引擎：{engine}"))
        self.fetch_bytes: Fetcher = fetch_bytes or default_fetch_bytes
        self.engine = engine
        self.max_workers = max(1, int(max_workers))
        # 最近一次生成统计：各区段页数、记录数、引擎与字体
        self.last_generation_stats: Optional[dict] = None

    # -----------------------------
    # 资源
    # -----------------------------
    def _fetch_all(self, sources: Dict[str, ResourceSource]) -> Dict[str, bytes]:
        """并发拉取全部资源并等待完成；失败的资源记录警告后跳过。"""
        wanted = {key: src for key, src in sources.items() if src is not None}
        if not wanted:
            return {}
        fetched: Dict[str, bytes] = {}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(wanted))) as ex:
            futures = {ex.submit(self.fetch_bytes, src): key for key, src in wanted.items()}
            for fut in as_completed(futures):
                key = futures[fut]
                try:
                    data = fut.result()
                except Exception as exc:  # noqa: BLE001
                    logger.warning("[%s] 资源拉取失败：%s，原因：%s", ERR_RESOURCE_FETCH_FAILED, key, exc)
                    continue
                if data:
                    fetched[key] = bytes(data)
                else:
                    logger.warning("[%s] 资源为空：%s", ERR_RESOURCE_FETCH_FAILED, key)
        return fetched

    def _register_fonts(self, fetched: Dict[str, bytes]) -> Dict[str, RegisteredFont]:
        """注册各角色字体。未提供或失败的角色按规则继承：
        礼签/正文/金额 → 主字体，封面 → 正文字体，主字体 → 内置回退字体。
        """
        registered: Dict[str, Optional[RegisteredFont]] = {}
        for role in _FONT_ROLES:
            data = fetched.get(f"font:{role}")
            registered[role] = register_font_bytes(data, role) if data else None

        main = registered["main"] or fallback_font()
        resolved = {"main": main}
        for role in ("gift_label", "formal", "amount"):
            resolved[role] = registered[role] or main
        resolved["cover"] = registered["cover"] or resolved["formal"]
        return resolved

    def _decode_images(self, fetched: Dict[str, bytes], solemn: bool) -> Dict[str, ImageAsset]:
        """解码图片；白事模式转灰度 JPEG（同一图片只转换一次）。"""
        images: Dict[str, ImageAsset] = {}
        cache: Dict[str, ImageAsset] = {}
        for key in _IMAGE_KEYS:
            data = fetched.get(f"image:{key}")
            if not data:
                continue
            digest = hashlib.sha1(data).hexdigest()
            if digest in cache:
                cached = cache[digest]
                images[key] = ImageAsset(key=key, data=cached.data, width=cached.width, height=cached.height)
                continue
            try:
                asset = self._decode_image(key, data, solemn)
            except (UnidentifiedImageError, OSError, ValueError) as exc:
                logger.warning("[%s] 图片解码失败，已跳过：%s，原因：%s", ERR_IMAGE_DECODE_FAILED, key, exc)
                continue
            cache[digest] = asset
            images[key] = asset
        return images

    @staticmethod
    def _decode_image(key: str, data: bytes, solemn: bool) -> ImageAsset:
        with Image.open(BytesIO(data)) as img:
            img.load()
            width, height = img.size
            if solemn:
                gray = ImageOps.grayscale(img).convert("RGB")
                buffer = BytesIO()
                gray.save(buffer, format="JPEG", quality=CONST_GRAYSCALE_JPEG_QUALITY)
                return ImageAsset(key=key, data=buffer.getvalue(), width=width, height=height)
            if img.format in ("JPEG", "PNG"):
                return ImageAsset(key=key, data=data, width=width, height=height)
            # 其他格式统一转 PNG，两种引擎都能直接嵌入
            buffer = BytesIO()
            img.convert("RGBA").save(buffer, format="PNG")
            return ImageAsset(key=key, data=buffer.getvalue(), width=width, height=height)

    # -----------------------------
    # 序列化
    # -----------------------------
    def _serialize(
        self,
        pages: List[RenderedPage],
        images: Dict[str, ImageAsset],
        fonts: Dict[str, RegisteredFont],
        title: str,
    ) -> bytes:
        try:
            if self.engine == CONST_ENGINE_PYMUPDF:
                font_bytes = {f.name: f.data for f in fonts.values()}
                return pymupdf_engine.render_pages(pages, images, font_bytes, title=title)
            return reportlab_engine.render_pages(pages, images, title=title)
        except Exception as exc:  # noqa: BLE001
            raise RuntimeError(ErrorHandler.format_error(ERR_PDF_WRITE_FAILED, f"PDF 写入失败: {exc}")) from exc

    # -----------------------------
    # 入口
    # -----------------------------
    def generate(
        self,
        records: Sequence[GiftRecord],
        options: Optional[LayoutOptions] = None,
        event_title: str = "",
    ) -> bytes:
        """生成礼簿 PDF 字节。

        参数：
            records: 礼金记录（非空列表，按录入顺序）。
            options: 排版选项；None 使用默认值。调用方传入的对象不会被修改。
            event_title: 事项名称；提供时作为封面标题。

        返回：
            PDF 字节。
        """
        _validate_records(records)
        options = replace(options) if options is not None else LayoutOptions()
        if event_title:
            options.title = event_title

        ledger = process_records(records, options.items_per_page)
        logger.info(
            "开始生成礼簿：%s（记录 %s 条，有效 %s 条，礼金 %s 条，礼品 %s 条）",
            options.title, len(records), len(ledger.records), len(ledger.monetary), ledger.gift_count,
        )

        sources: Dict[str, ResourceSource] = {
            f"font:{role}": getattr(options.fonts, role) for role in _FONT_ROLES
        }
        sources.update({f"image:{key}": getattr(options.images, key) for key in _IMAGE_KEYS})
        fetched = self._fetch_all(sources)
        fonts = self._register_fonts(fetched)
        images = self._decode_images(fetched, options.solemn)

        context = LayoutContext(
            options=options,
            styles=resolve_styles(options.style_overrides, options.solemn),
            fonts=LayoutFonts(**{role: fonts[role].name for role in _FONT_ROLES}),
            images=images,
            generated_at=options.generated_at or datetime.now(),
        )
        pages = layout_document(ledger, context)
        if not pages:
            # 所有区段都被关闭或为空时仍输出一页空白，保证是合法文档
            logger.warning("没有可输出的页面（区段均关闭或无礼金），输出空白页")
            pages = [RenderedPage(section=CONST_SECTION_BLANK)]

        data = self._serialize(pages, images, fonts, options.title)
        self.last_generation_stats = {
            "engine": self.engine,
            "pages": len(pages),
            "sections": dict(Counter(p.section for p in pages)),
            "records": len(records),
            "voided": len(records) - len(ledger.records),
            "monetary": len(ledger.monetary),
            "gifts": ledger.gift_count,
            "monetary_total": ledger.monetary_total,
            "fonts": {role: fonts[role].name for role in _FONT_ROLES},
            "images": sorted(images),
        }
        logger.info("礼簿生成完成：%s 页，引擎 %s", len(pages), self.engine)
        return data

    def generate_parts(
        self,
        records: Sequence[GiftRecord],
        options: Optional[LayoutOptions] = None,
        event_title: str = "",
        split_size: int = 0,
    ) -> List[bytes]:
        """分册生成：每册带分册序号，统计页附整个事项的总金额与总人数。"""
        _validate_records(records)
        base = options if options is not None else LayoutOptions()
        chunks = split_records(records, split_size)
        if len(chunks) == 1:
            return [self.generate(chunks[0], base, event_title)]

        valid = [r for r in records if not r.voided and r.is_monetary]
        grand_amount = sum((r.amount for r in valid), Decimal("0"))
        parts: List[bytes] = []
        for index, chunk in enumerate(chunks, start=1):
            part_options = replace(
                base,
                part_index=index,
                total_parts=len(chunks),
                grand_total_amount=grand_amount,
                grand_total_givers=len(valid),
            )
            parts.append(self.generate(chunk, part_options, event_title))
        return parts


def generate(
    records: Sequence[GiftRecord],
    options: Optional[LayoutOptions] = None,
    event_title: str = "",
    fetch_bytes: Optional[Fetcher] = None,
    engine: str = CONST_ENGINE_DEFAULT,
) -> bytes:
    """便捷入口：每次调用新建生成器实例。"""
    return GiftRegistryPDF(fetch_bytes=fetch_bytes, engine=engine).generate(records, options, event_title)


__all__ = [
    "GiftRegistryPDF",
    "generate",
    "merge_documents",
    "split_records",
]
