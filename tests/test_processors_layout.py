from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List

import pytest

from giftbook.components import resolve_styles
from giftbook.models import DrawImage, GiftRecord, ImageAsset, LayoutOptions, PaymentMethod
from giftbook.processors.layout import (
    APPENDIX_TITLE,
    IMAGE_BACK_COVER,
    IMAGE_BACKGROUND,
    IMAGE_COVER,
    LayoutContext,
    LayoutFonts,
    PageLayoutEngine,
    display_name,
    fit_image,
    layout_document,
)
from giftbook.processors.ledger import process_records


class MonoMetrics:
    def width(self, text: str, size: float) -> float:
        return len(text) * size

    def height(self, size: float) -> float:
        return size


FIXED_TIME = datetime(2024, 10, 1, 12, 30, 0)


def _context(options: LayoutOptions = None, images=None) -> LayoutContext:
    options = options or LayoutOptions()
    return LayoutContext(
        options=options,
        styles=resolve_styles(options.style_overrides, options.solemn),
        fonts=LayoutFonts.single("F"),
        images=images or {},
        generated_at=FIXED_TIME,
        metrics_factory=lambda name: MonoMetrics(),
    )


def _texts(page) -> List[str]:
    return [op.text for op in page.texts()]


def _money(n: int, amount: int = 100) -> List[GiftRecord]:
    return [GiftRecord(name=f"宾客{i}", amount=Decimal(amount)) for i in range(n)]


class TestGridPages:
    def test_thirteen_records_two_pages_with_subtotals(self):
        ledger = process_records(_money(13), 12)
        pages = PageLayoutEngine(_context()).layout_grid_pages(ledger.monetary)
        assert len(pages) == 2
        first, second = _texts(pages[0]), _texts(pages[1])
        assert "本页小计: ¥1,200.00" in first
        assert "本页小计: ¥100.00" in second
        assert "第 1 页 / 共 2 页" in first
        assert "生成日期: 2024-10-01 12:30:00" in second
        # 数字金额带：第二页只有 1 个非占位格
        assert first.count("¥100") == 12
        assert second.count("¥100") == 1

    def test_placeholders_keep_label_and_dividers(self):
        ledger = process_records(_money(1), 12)
        page = PageLayoutEngine(_context()).layout_grid_pages(ledger.monetary)[0]
        texts = _texts(page)
        assert texts.count("贺") == 12
        lines = [op for op in page.ops if op.__class__.__name__ == "DrawLine"]
        # 两条横线 + 11 条竖分隔线
        assert len(lines) == 2 + 11

    @pytest.mark.parametrize("n, pages, last", [(1, 1, 1), (12, 1, 12), (24, 2, 12), (25, 3, 1)])
    def test_page_count_and_last_page_fill(self, n, pages, last):
        ledger = process_records(_money(n), 12)
        result = PageLayoutEngine(_context()).layout_grid_pages(ledger.monetary)
        assert len(result) == pages
        assert _texts(result[-1]).count("¥100") == last

    def test_gift_only_records_not_on_grid(self):
        records = _money(2) + [GiftRecord(name="乙", gift_description="喜糖")]
        ledger = process_records(records, 12)
        page = PageLayoutEngine(_context()).layout_grid_pages(ledger.monetary)[0]
        assert _texts(page).count("¥100") == 2

    def test_part_suffix_in_footer(self):
        options = LayoutOptions(part_index=1, total_parts=2)
        ledger = process_records(_money(1), 12)
        page = PageLayoutEngine(_context(options)).layout_grid_pages(ledger.monetary)[0]
        assert "第 1 页 / 共 1 页( P1/P2 )" in _texts(page)

    def test_oversized_amount_drawn_in_numerals(self):
        records = [GiftRecord(name="甲", amount=Decimal(10) ** 16)]
        page = PageLayoutEngine(_context()).layout_grid_pages(process_records(records, 12).monetary)[0]
        texts = _texts(page)
        assert texts.count("0") == 16
        assert "元" in texts

    def test_background_drawn_first(self):
        images = {IMAGE_BACKGROUND: ImageAsset(IMAGE_BACKGROUND, b"", 200, 100)}
        ledger = process_records(_money(1), 12)
        page = PageLayoutEngine(_context(images=images)).layout_grid_pages(ledger.monetary)[0]
        assert isinstance(page.ops[0], DrawImage)


def test_display_name_two_characters():
    assert display_name("张三") == "张　三"
    assert display_name("欧阳修") == "欧阳修"


def test_fit_image_keeps_ratio_and_centers():
    x, y, w, h = fit_image(ImageAsset("k", b"", 200, 100), 100, 100)
    assert (w, h) == (100, 50)
    assert (x, y) == (0, 25)


class TestGiftAppendix:
    def test_no_gifts_no_pages(self):
        ledger = process_records(_money(3), 12)
        assert PageLayoutEngine(_context()).layout_gift_appendix(ledger.gifts) == []

    def test_disabled(self):
        ledger = process_records([GiftRecord(name="乙", gift_description="喜糖")], 12)
        engine = PageLayoutEngine(_context(LayoutOptions(print_appendix=False)))
        assert engine.layout_gift_appendix(ledger.gifts) == []

    def test_rows_and_headers(self):
        ledger = process_records(_money(1) + [GiftRecord(name="乙", gift_description="喜糖一盒")], 12)
        pages = PageLayoutEngine(_context()).layout_gift_appendix(ledger.gifts)
        texts = _texts(pages[0])
        assert APPENDIX_TITLE in texts
        for header in ("姓名", "位置索引", "备注信息"):
            assert header in texts
        assert "第1页第2人" in texts
        assert "喜糖一盒" in texts
        assert "礼品附录 第 1 / 1 页" in texts

    def test_page_break_repeats_header(self):
        gifts = [GiftRecord(name=f"客{i}", gift_description="红酒") for i in range(20)]
        pages = PageLayoutEngine(_context()).layout_gift_appendix(process_records(gifts, 12).gifts)
        assert len(pages) == 2
        second = _texts(pages[1])
        assert "位置索引" in second
        assert APPENDIX_TITLE not in second
        assert "礼品附录 第 2 / 2 页" in second

    def test_oversized_first_row_does_not_loop(self):
        tall = GiftRecord(name="甲", gift_description="\n".join(["礼"] * 60))
        small = GiftRecord(name="乙", gift_description="喜糖")
        pages = PageLayoutEngine(_context()).layout_gift_appendix(process_records([tall, small], 12).gifts)
        assert len(pages) == 2


class TestSummary:
    def _ledger(self):
        records = [
            GiftRecord(name="甲", amount=Decimal(100)),
            GiftRecord(name="乙", amount=Decimal(100)),
            GiftRecord(name="丙", amount=Decimal(200), payment_method=PaymentMethod.MOBILE_PAY),
            GiftRecord(name="丁", gift_description="喜糖"),
            GiftRecord(name="戊", amount=Decimal(500), voided=True),
        ]
        return process_records(records, 12)

    def test_rows(self):
        rows = PageLayoutEngine(_context()).summary_rows(self._ledger())
        assert [r.label for r in rows] == ["现金", "微信", "礼物", "礼金小计", "礼品小计"]
        cash = rows[0]
        assert (cash.count, cash.amount, cash.amount_text) == ("2 人", "¥200.00", "贰佰元整")
        assert rows[3].amount == "¥400.00"
        assert rows[3].amount_text == "肆佰元整"

    def test_grand_total_row(self):
        options = LayoutOptions(grand_total_amount=Decimal(1300), grand_total_givers=13)
        rows = PageLayoutEngine(_context(options)).summary_rows(self._ledger())
        assert rows[-1].label == "事项总金额"
        assert rows[-1].amount == "¥1,300.00"
        assert rows[-1].count == "13 人"

    def test_page_contents(self):
        page = PageLayoutEngine(_context()).layout_summary(self._ledger())
        texts = _texts(page)
        assert "总计" in texts
        assert "注：作废记录不计入统计" in texts
        assert "统计附录 第 1 / 1 页" in texts

    def test_disabled(self):
        engine = PageLayoutEngine(_context(LayoutOptions(print_summary=False)))
        assert engine.layout_summary(self._ledger()) is None


class TestCoverAndDocument:
    def test_cover_texts_and_badge(self):
        options = LayoutOptions(title="张三李四婚礼", subtitle="二〇二四年十月", part_index=2, total_parts=3)
        page = PageLayoutEngine(_context(options)).layout_cover()
        texts = _texts(page)
        assert texts[:2] == ["张三李四婚礼", "二〇二四年十月"]
        badge = page.texts()[-1]
        assert badge.text == "P2"
        assert badge.opacity == pytest.approx(0.9)

    def test_cover_without_title(self):
        options = LayoutOptions(show_cover_title=False)
        images = {IMAGE_COVER: ImageAsset(IMAGE_COVER, b"", 100, 100)}
        page = PageLayoutEngine(_context(options, images)).layout_cover()
        assert page.texts() == []
        assert isinstance(page.ops[0], DrawImage)

    def test_section_order(self):
        options = LayoutOptions(print_back_cover=True)
        images = {IMAGE_BACK_COVER: ImageAsset(IMAGE_BACK_COVER, b"", 100, 100)}
        records = _money(13) + [GiftRecord(name="乙", gift_description="喜糖")]
        pages = layout_document(process_records(records, 12), _context(options, images))
        assert [p.section for p in pages] == ["cover", "grid", "grid", "appendix", "summary", "back_cover"]

    def test_back_cover_needs_image(self):
        options = LayoutOptions(print_back_cover=True)
        assert PageLayoutEngine(_context(options)).layout_back_cover() is None
