"""
文件路径：giftbook/processors/layout.py

说明：礼簿分页排版，输出与具体 PDF 库无关的绘制指令（RenderedPage）。

流程严格顺序执行，不回退：
    开始 → [封面] → 礼金页(0..N) → [礼品附录(0..M)] → [统计页] → [封底] → 结束

- 礼金页：每页固定 items_per_page 个竖格，自上而下为 姓名区 / 礼签带 / 中文大写金额区 / 数字金额带；
  只放礼金记录，不足一页以占位补齐（占位格保留分隔线与礼签，不写姓名金额）。
- 礼品附录：三列表格（姓名 / 位置索引 / 备注信息），行高随换行高度增长，放不下时换页并重画表头。
- 统计页：按收款方式汇总人数与金额，附礼品份数、礼金小计及可选的事项总金额。

本模块只做计算，不做 IO、不记录日志。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..components.amount import amount_display_text, format_plain_amount, format_rmb
from ..components.fonts import FontMetrics
from ..components.styles import ResolvedStyles, TextStyle
from ..components.text import wrap_text
from ..models import (
    RGB,
    DrawImage,
    DrawLine,
    DrawRect,
    DrawText,
    ImageAsset,
    LayoutOptions,
    ProcessedRecord,
    RenderedPage,
)
from ..variables import (
    STYLE_APPENDIX_BORDER_WIDTH,
    STYLE_APPENDIX_CELL_LINE_WIDTH,
    STYLE_APPENDIX_HEADER_HEIGHT,
    STYLE_APPENDIX_HEADER_SIZE,
    STYLE_APPENDIX_MARGINS,
    STYLE_APPENDIX_NAME_COL,
    STYLE_APPENDIX_POSITION_COL,
    STYLE_APPENDIX_ROW_MIN_HEIGHT,
    STYLE_APPENDIX_ROW_PADDING,
    STYLE_APPENDIX_ROW_SIZE,
    STYLE_APPENDIX_TEXT_INSET,
    STYLE_APPENDIX_WRAP_INSET,
    STYLE_APPENDIX_TITLE_GAP,
    STYLE_APPENDIX_TITLE_SIZE,
    STYLE_COVER_BADGE_EXTRA_SIZE,
    STYLE_COVER_BADGE_OPACITY,
    STYLE_COVER_BADGE_TOP_OFFSET,
    STYLE_COVER_BADGE_X,
    STYLE_COVER_SUBTITLE_Y,
    STYLE_COVER_TITLE_Y,
    STYLE_FOOTER_MARGIN_X,
    STYLE_FOOTER_Y,
    STYLE_GIFT_LABEL_RATIO,
    STYLE_GRID_BORDER_WIDTH,
    STYLE_GRID_LINE_WIDTH,
    STYLE_GRID_MARGINS,
    STYLE_NUMERIC_AMOUNT_HEIGHT,
    STYLE_NUMERIC_AMOUNT_OFFSET,
    STYLE_PAGE_SIZE,
    STYLE_SUMMARY_COLUMNS,
    STYLE_SUMMARY_HEADER_GAP,
    STYLE_SUMMARY_HEADER_SIZE,
    STYLE_SUMMARY_NOTE_OFFSET,
    STYLE_SUMMARY_NOTE_SIZE,
    STYLE_SUMMARY_ROW_PITCH,
    STYLE_SUMMARY_ROW_SIZE,
    STYLE_SUMMARY_RULE_GAP,
    STYLE_SUMMARY_SUBLINE_DROP,
    STYLE_SUMMARY_SUBLINE_SIZE,
    STYLE_SUMMARY_TABLE_OFFSET,
    CONST_IDEOGRAPHIC_SPACE,
    CONST_LINE_GAP,
    CONST_SECTION_APPENDIX,
    CONST_SECTION_BACK_COVER,
    CONST_SECTION_COVER,
    CONST_SECTION_GRID,
    CONST_SECTION_SUMMARY,
    CONST_TIMESTAMP_FORMAT,
)
from .fitter import HORIZONTAL, VERTICAL, Cell, FitStyle, Metrics, fit_text
from .ledger import ProcessedLedger, paginate


IMAGE_COVER = "cover"
IMAGE_BACKGROUND = "background"
IMAGE_BACK_COVER = "back_cover"

APPENDIX_TITLE = "附录：礼品清单"
APPENDIX_HEADERS = ("姓名", "位置索引", "备注信息")
SUMMARY_TITLE = "总计"
SUMMARY_HEADERS = ("类别", "人数/份数", "金额")
SUMMARY_NOTE = "注：作废记录不计入统计"


@dataclass(frozen=True)
class LayoutFonts:
    """各文字角色最终使用的字体名（已完成回退与继承）。"""

    main: str
    gift_label: str
    formal: str
    amount: str
    cover: str

    @classmethod
    def single(cls, name: str) -> "LayoutFonts":
        return cls(main=name, gift_label=name, formal=name, amount=name, cover=name)


@dataclass
class LayoutContext:
    options: LayoutOptions
    styles: ResolvedStyles
    fonts: LayoutFonts
    images: Dict[str, ImageAsset] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=datetime.now)
    metrics_factory: Callable[[str], Metrics] = FontMetrics
    page_size: Tuple[float, float] = STYLE_PAGE_SIZE


@dataclass(frozen=True)
class SummaryRow:
    label: str
    count: str
    amount: str
    amount_text: Optional[str] = None


def display_name(name: str) -> str:
    """两字姓名中间插入全角空格，使竖排时与三字姓名等高。"""
    return f"{name[0]}{CONST_IDEOGRAPHIC_SPACE}{name[1]}" if len(name) == 2 else name


def fit_image(asset: ImageAsset, box_width: float, box_height: float) -> Tuple[float, float, float, float]:
    """等比缩放到容器内并居中，返回 (x, y, w, h)。"""
    scale = min(box_width / asset.width, box_height / asset.height)
    w, h = asset.width * scale, asset.height * scale
    return ((box_width - w) / 2, (box_height - h) / 2, w, h)


class PageLayoutEngine:
    """按固定顺序生成全部页面。每次 run() 使用独立的页面状态。"""

    def __init__(self, context: LayoutContext) -> None:
        self.ctx = context
        self.options = context.options
        self.styles = context.styles
        self.fonts = context.fonts
        self.width, self.height = context.page_size
        self._metrics: Dict[str, Metrics] = {}

    # -----------------------------
    # 通用工具
    # -----------------------------
    def metrics(self, font: str) -> Metrics:
        if font not in self._metrics:
            self._metrics[font] = self.ctx.metrics_factory(font)
        return self._metrics[font]

    def new_page(self, section: str, background: bool = True) -> RenderedPage:
        page = RenderedPage(section=section, width=self.width, height=self.height)
        if background:
            self.draw_image(page, IMAGE_BACKGROUND)
        return page

    def draw_image(self, page: RenderedPage, key: str) -> bool:
        asset = self.ctx.images.get(key)
        if asset is None or asset.width <= 0 or asset.height <= 0:
            return False
        x, y, w, h = fit_image(asset, page.width, page.height)
        page.ops.append(DrawImage(key=key, x=x, y=y, width=w, height=h))
        return True

    def text(
        self,
        page: RenderedPage,
        text: str,
        x: float,
        y: float,
        size: float,
        font: str,
        color: RGB,
        opacity: float = 1.0,
    ) -> None:
        if text:
            page.ops.append(DrawText(text=text, x=x, y=y, size=size, font=font, color=color, opacity=opacity))

    def centered_text(
        self, page: RenderedPage, text: str, left: float, width: float, y: float, size: float, font: str, color: RGB
    ) -> None:
        text_w = self.metrics(font).width(text, size)
        self.text(page, text, left + (width - text_w) / 2, y, size, font, color)

    def line(self, page: RenderedPage, x1: float, y1: float, x2: float, y2: float, color: RGB, thickness: float) -> None:
        page.ops.append(DrawLine(x1=x1, y1=y1, x2=x2, y2=y2, color=color, thickness=thickness))

    def footer(self, page: RenderedPage, left: str, center: str, right: str = "") -> None:
        font = self.fonts.formal
        size = self.styles.page_info_size
        color = self.styles.base
        metrics = self.metrics(font)
        self.text(page, left, STYLE_FOOTER_MARGIN_X, STYLE_FOOTER_Y, size, font, color)
        if center:
            self.text(page, center, (page.width - metrics.width(center, size)) / 2, STYLE_FOOTER_Y, size, font, color)
        if right:
            right_x = page.width - STYLE_FOOTER_MARGIN_X - metrics.width(right, size)
            self.text(page, right, right_x, STYLE_FOOTER_Y, size, font, color)

    def fit(
        self,
        page: RenderedPage,
        text: str,
        cell: Cell,
        style: TextStyle,
        orientation: str,
        font: str,
    ) -> None:
        result = fit_text(
            text,
            cell,
            FitStyle(initial_size=style.size, min_size=style.min_size),
            orientation,
            self.metrics(font),
            style.color,
            font,
            letter_spacing=self.options.letter_spacing,
        )
        page.ops.extend(result.ops)

    @property
    def generated_label(self) -> str:
        return f"生成日期: {self.ctx.generated_at.strftime(CONST_TIMESTAMP_FORMAT)}"

    @property
    def part_label(self) -> str:
        if self.options.is_multi_part:
            return f"P{self.options.part_index}/P{self.options.total_parts}"
        return ""

    # -----------------------------
    # 各区段
    # -----------------------------
    def layout_cover(self) -> Optional[RenderedPage]:
        if not self.options.print_cover:
            return None
        page = self.new_page(CONST_SECTION_COVER, background=False)
        self.draw_image(page, IMAGE_COVER)
        if not self.options.show_cover_title:
            return page

        style = self.styles.cover
        font = self.fonts.cover
        for text, y in ((self.options.title, STYLE_COVER_TITLE_Y), (self.options.subtitle, STYLE_COVER_SUBTITLE_Y)):
            if text:
                self.centered_text(page, text, 0.0, page.width, y, style.size, font, style.color)
        if self.options.part_index:
            self.text(
                page,
                f"P{self.options.part_index}",
                STYLE_COVER_BADGE_X,
                page.height - STYLE_COVER_BADGE_TOP_OFFSET,
                style.size + STYLE_COVER_BADGE_EXTRA_SIZE,
                font,
                style.color,
                opacity=STYLE_COVER_BADGE_OPACITY,
            )
        return page

    def layout_grid_pages(self, monetary: Sequence[ProcessedRecord]) -> List[RenderedPage]:
        per_page = max(1, int(self.options.items_per_page))
        chunks = paginate(monetary, per_page)
        if not chunks:
            return []

        m = STYLE_GRID_MARGINS
        table_w = self.width - m["left"] - m["right"]
        table_h = self.height - m["top"] - m["bottom"]
        col_w = table_w / per_page
        label_h = table_h * STYLE_GIFT_LABEL_RATIO
        name_h = (table_h - label_h) / 2
        amount_h = name_h
        chinese_h = amount_h - STYLE_NUMERIC_AMOUNT_HEIGHT
        line1_y = m["bottom"] + amount_h
        line2_y = line1_y + label_h
        theme = self.styles.theme

        pages: List[RenderedPage] = []
        for p, chunk in enumerate(chunks):
            page = self.new_page(CONST_SECTION_GRID)
            page.ops.append(
                DrawRect(x=m["left"], y=m["bottom"], width=table_w, height=table_h, color=theme, line_width=STYLE_GRID_BORDER_WIDTH)
            )
            for y in (line1_y, line2_y):
                self.line(page, m["left"], y, self.width - m["right"], y, theme, STYLE_GRID_LINE_WIDTH)
            for i in range(1, per_page):
                x = m["left"] + i * col_w
                self.line(page, x, m["bottom"], x, self.height - m["top"], theme, STYLE_GRID_LINE_WIDTH)

            subtotal = Decimal("0")
            for i, item in enumerate(chunk):
                col_x = m["left"] + i * col_w
                self.fit(
                    page, self.options.gift_label, Cell(col_x, line1_y, col_w, label_h),
                    self.styles.label, VERTICAL, self.fonts.gift_label,
                )
                if item is None:
                    continue
                subtotal += item.amount
                self.fit(
                    page, display_name(item.name), Cell(col_x, line2_y, col_w, name_h),
                    self.styles.name, VERTICAL, self.fonts.main,
                )
                self.fit(
                    page, amount_display_text(item.amount),
                    Cell(col_x, m["bottom"] + STYLE_NUMERIC_AMOUNT_HEIGHT, col_w, chinese_h),
                    self.styles.amount, VERTICAL, self.fonts.amount,
                )
                if item.amount > 0:
                    self.fit(
                        page, "¥" + format_plain_amount(item.amount),
                        Cell(col_x, m["bottom"] + STYLE_NUMERIC_AMOUNT_OFFSET, col_w, STYLE_NUMERIC_AMOUNT_HEIGHT),
                        self.styles.numeric, HORIZONTAL, self.fonts.formal,
                    )

            page_info = f"第 {p + 1} 页 / 共 {len(chunks)} 页"
            if self.part_label:
                page_info += f"( {self.part_label} )"
            self.footer(page, self.generated_label, page_info, f"本页小计: {format_rmb(subtotal)}")
            pages.append(page)
        return pages

    def _appendix_header(self, page: RenderedPage, top: float, col_widths: Sequence[float]) -> float:
        font = self.fonts.formal
        theme = self.styles.theme
        row_h = STYLE_APPENDIX_HEADER_HEIGHT
        size = STYLE_APPENDIX_HEADER_SIZE
        left = STYLE_APPENDIX_MARGINS["left"]
        x = left
        for i, header in enumerate(APPENDIX_HEADERS):
            self.centered_text(page, header, x, col_widths[i], top - row_h + (row_h - size) / 2, size, font, theme)
            if i < len(col_widths) - 1:
                self.line(page, x + col_widths[i], top, x + col_widths[i], top - row_h, theme, STYLE_APPENDIX_CELL_LINE_WIDTH)
            x += col_widths[i]
        self.line(page, left, top - row_h, left + sum(col_widths), top - row_h, theme, STYLE_APPENDIX_BORDER_WIDTH)
        return top - row_h

    def _appendix_row(
        self, page: RenderedPage, item: ProcessedRecord, lines: Sequence[str], top: float, row_h: float,
        col_widths: Sequence[float],
    ) -> None:
        font = self.fonts.formal
        size = STYLE_APPENDIX_ROW_SIZE
        base, theme = self.styles.base, self.styles.theme
        left = STYLE_APPENDIX_MARGINS["left"]
        bottom = top - row_h

        x = left
        for i, value in enumerate((item.name, item.position_index)):
            self.centered_text(page, str(value or ""), x, col_widths[i], bottom + (row_h - size) / 2, size, font, base)
            x += col_widths[i]

        line_h = size + CONST_LINE_GAP
        total_h = len(lines) * line_h
        y = bottom + (row_h - total_h) / 2 + total_h - size
        for line_text in lines:
            self.text(page, line_text.strip(), x + STYLE_APPENDIX_TEXT_INSET, y, size, font, base)
            y -= line_h

        x = left
        for width in col_widths[:-1]:
            x += width
            self.line(page, x, top, x, bottom, theme, STYLE_APPENDIX_CELL_LINE_WIDTH)
        self.line(page, left, bottom, left + sum(col_widths), bottom, theme, STYLE_APPENDIX_CELL_LINE_WIDTH)

    def layout_gift_appendix(self, gifts: Sequence[ProcessedRecord]) -> List[RenderedPage]:
        if not self.options.print_appendix or not gifts:
            return []

        m = STYLE_APPENDIX_MARGINS
        col_widths = (
            STYLE_APPENDIX_NAME_COL,
            STYLE_APPENDIX_POSITION_COL,
            self.width - m["left"] - m["right"] - STYLE_APPENDIX_NAME_COL - STYLE_APPENDIX_POSITION_COL,
        )
        font = self.fonts.formal
        size = STYLE_APPENDIX_ROW_SIZE
        metrics = self.metrics(font)
        measure = lambda fragment: metrics.width(fragment, size)  # noqa: E731

        page = self.new_page(CONST_SECTION_APPENDIX)
        cursor = self.height - m["top"]
        self.centered_text(
            page, APPENDIX_TITLE, 0.0, self.width, cursor, STYLE_APPENDIX_TITLE_SIZE, font, self.styles.theme
        )
        cursor -= STYLE_APPENDIX_TITLE_GAP
        # (页面, 表格顶边, 表格底边)
        frames: List[List] = [[page, cursor, cursor]]
        cursor = self._appendix_header(page, cursor, col_widths)
        rows_on_page = 0

        for item in gifts:
            wrapped = wrap_text(
                item.gift_description or "",
                measure,
                col_widths[2] - STYLE_APPENDIX_WRAP_INSET,
                size,
                mode=self.options.appendix_wrap_mode,
            )
            row_h = max(STYLE_APPENDIX_ROW_MIN_HEIGHT, wrapped.height + STYLE_APPENDIX_ROW_PADDING)
            # 新页首行即使超高也直接放下，避免无限换页
            if cursor - row_h < m["bottom"] and rows_on_page > 0:
                frames[-1][2] = cursor
                page = self.new_page(CONST_SECTION_APPENDIX)
                cursor = self.height - m["top"]
                frames.append([page, cursor, cursor])
                cursor = self._appendix_header(page, cursor, col_widths)
                rows_on_page = 0
            self._appendix_row(page, item, wrapped.lines, cursor, row_h, col_widths)
            cursor -= row_h
            rows_on_page += 1
        frames[-1][2] = cursor

        total = len(frames)
        left, right = m["left"], m["left"] + sum(col_widths)
        theme = self.styles.theme
        for idx, (p, top, bottom) in enumerate(frames):
            self.footer(p, self.generated_label, f"礼品附录 第 {idx + 1} / {total} 页", self.part_label)
            for x1, y1, x2, y2 in (
                (left, top, right, top),
                (left, top, left, bottom),
                (right, top, right, bottom),
                (left, bottom, right, bottom),
            ):
                self.line(p, x1, y1, x2, y2, theme, STYLE_APPENDIX_BORDER_WIDTH)
        return [frame[0] for frame in frames]

    def summary_rows(self, ledger: ProcessedLedger) -> List[SummaryRow]:
        rows: List[SummaryRow] = []
        for method, bucket in ledger.by_method.items():
            if bucket.total > 0:
                rows.append(
                    SummaryRow(method.label, f"{bucket.count} 人", format_rmb(bucket.total), amount_display_text(bucket.total))
                )
        if ledger.gift_count > 0:
            rows.append(SummaryRow("礼物", f"{ledger.gift_count} 份", "-"))
        total = ledger.monetary_total
        rows.append(SummaryRow("礼金小计", f"{len(ledger.monetary)} 人", format_rmb(total), amount_display_text(total)))
        if ledger.gift_count > 0:
            rows.append(SummaryRow("礼品小计", f"{ledger.gift_count} 份", "-"))
        grand_amount = self.options.grand_total_amount
        grand_givers = self.options.grand_total_givers
        if grand_amount is not None and grand_givers is not None:
            rows.append(
                SummaryRow("事项总金额", f"{grand_givers} 人", format_rmb(grand_amount), amount_display_text(grand_amount))
            )
        return rows

    def layout_summary(self, ledger: ProcessedLedger) -> Optional[RenderedPage]:
        if not self.options.print_summary:
            return None

        m = STYLE_APPENDIX_MARGINS
        font = self.fonts.formal
        theme, base = self.styles.theme, self.styles.base
        page = self.new_page(CONST_SECTION_SUMMARY)

        title_y = self.height - m["top"]
        self.centered_text(page, SUMMARY_TITLE, 0.0, self.width, title_y, STYLE_APPENDIX_TITLE_SIZE, font, theme)

        table_w = sum(STYLE_SUMMARY_COLUMNS)
        start_x = (self.width - table_w) / 2
        col_xs = (start_x, start_x + STYLE_SUMMARY_COLUMNS[0], start_x + STYLE_SUMMARY_COLUMNS[0] + STYLE_SUMMARY_COLUMNS[1])
        cursor = title_y - STYLE_SUMMARY_TABLE_OFFSET
        for header, x in zip(SUMMARY_HEADERS, col_xs):
            self.text(page, header, x, cursor, STYLE_SUMMARY_HEADER_SIZE, font, theme)
        cursor -= STYLE_SUMMARY_HEADER_GAP
        self.line(page, start_x, cursor + 5, start_x + table_w, cursor + 5, theme, STYLE_GRID_LINE_WIDTH)
        cursor -= STYLE_SUMMARY_RULE_GAP

        note_y = m["bottom"] + STYLE_SUMMARY_NOTE_OFFSET
        rows = self.summary_rows(ledger)
        pitch = STYLE_SUMMARY_ROW_PITCH
        if len(rows) > 1:
            room = cursor - STYLE_SUMMARY_SUBLINE_DROP - (note_y + STYLE_SUMMARY_NOTE_SIZE + CONST_LINE_GAP)
            pitch = min(pitch, room / (len(rows) - 1))

        for row in rows:
            self.text(page, row.label, col_xs[0], cursor, STYLE_SUMMARY_ROW_SIZE, font, base)
            self.text(page, row.count, col_xs[1], cursor, STYLE_SUMMARY_ROW_SIZE, font, base)
            self.text(page, row.amount, col_xs[2], cursor, STYLE_SUMMARY_ROW_SIZE, font, base)
            if row.amount_text:
                self.text(
                    page, row.amount_text, col_xs[2], cursor - STYLE_SUMMARY_SUBLINE_DROP, STYLE_SUMMARY_SUBLINE_SIZE, font, base
                )
            cursor -= pitch

        self.text(page, SUMMARY_NOTE, m["left"], note_y, STYLE_SUMMARY_NOTE_SIZE, font, self.styles.muted)
        self.footer(page, self.generated_label, "统计附录 第 1 / 1 页")
        return page

    def layout_back_cover(self) -> Optional[RenderedPage]:
        if not self.options.print_back_cover or IMAGE_BACK_COVER not in self.ctx.images:
            return None
        page = self.new_page(CONST_SECTION_BACK_COVER, background=False)
        self.draw_image(page, IMAGE_BACK_COVER)
        return page

    # -----------------------------
    # 入口
    # -----------------------------
    def run(self, ledger: ProcessedLedger) -> List[RenderedPage]:
        pages: List[RenderedPage] = []
        cover = self.layout_cover()
        if cover is not None:
            pages.append(cover)
        pages.extend(self.layout_grid_pages(ledger.monetary))
        pages.extend(self.layout_gift_appendix(ledger.gifts))
        summary = self.layout_summary(ledger)
        if summary is not None:
            pages.append(summary)
        back_cover = self.layout_back_cover()
        if back_cover is not None:
            pages.append(back_cover)
        return pages


def layout_document(ledger: ProcessedLedger, context: LayoutContext) -> List[RenderedPage]:
    """按固定顺序排出整本礼簿。"""
    return PageLayoutEngine(context).run(ledger)


__all__ = [
    "IMAGE_COVER",
    "IMAGE_BACKGROUND",
    "IMAGE_BACK_COVER",
    "LayoutFonts",
    "LayoutContext",
    "SummaryRow",
    "PageLayoutEngine",
    "display_name",
    "fit_image",
    "layout_document",
]
