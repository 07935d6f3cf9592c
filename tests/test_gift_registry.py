from __future__ import annotations

from decimal import Decimal
from io import BytesIO
from typing import List

import fitz  # PyMuPDF
import pdfplumber
import pytest
from PIL import Image

from giftbook import gift_registry
from giftbook.gift_registry import GiftRegistryPDF, generate, merge_documents, split_records
from giftbook.models import FontSources, GiftRecord, ImageSources, LayoutOptions, PaymentMethod, RenderedPage
from giftbook.variables import CONST_FALLBACK_CJK_FONT


def _money(n: int, amount: int = 100) -> List[GiftRecord]:
    return [GiftRecord(name=f"宾客{i}", amount=Decimal(amount)) for i in range(n)]


def _png(color=(255, 0, 0), size=(40, 20)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def _page_count(data: bytes) -> int:
    with pdfplumber.open(BytesIO(data)) as pdf:
        return len(pdf.pages)


@pytest.fixture
def captured_pages(monkeypatch):
    """截获交给 ReportLab 引擎的绘制页，便于检查页脚等文字。"""
    captured: List[RenderedPage] = []
    original = gift_registry.reportlab_engine.render_pages

    def _spy(pages, images, title=""):
        captured.extend(pages)
        return original(pages, images, title=title)

    monkeypatch.setattr(gift_registry.reportlab_engine, "render_pages", _spy)
    return captured


class TestEndToEnd:
    def test_thirteen_records(self, captured_pages):
        generator = GiftRegistryPDF()
        data = generator.generate(_money(13), LayoutOptions(), event_title="张三李四婚礼")
        assert data.startswith(b"%PDF")
        stats = generator.last_generation_stats
        assert stats["sections"] == {"cover": 1, "grid": 2, "summary": 1}
        assert stats["monetary_total"] == Decimal(1300)
        assert _page_count(data) == stats["pages"] == 4

        grid = [p for p in captured_pages if p.section == "grid"]
        assert "本页小计: ¥1,200.00" in [t.text for t in grid[0].texts()]
        assert "本页小计: ¥100.00" in [t.text for t in grid[1].texts()]
        summary = [p for p in captured_pages if p.section == "summary"][0]
        summary_texts = [t.text for t in summary.texts()]
        assert "现金" in summary_texts
        assert "¥1,300.00" in summary_texts
        assert "壹仟叁佰元整" in summary_texts

    def test_voided_excluded_and_no_appendix(self):
        records = _money(2) + [GiftRecord(name="作废", amount=Decimal(500), voided=True)]
        generator = GiftRegistryPDF()
        generator.generate(records)
        stats = generator.last_generation_stats
        assert stats["voided"] == 1
        assert stats["monetary_total"] == Decimal(200)
        assert "appendix" not in stats["sections"]

    def test_gift_records_produce_appendix(self):
        records = _money(1) + [GiftRecord(name="乙", gift_description="喜糖一盒")]
        generator = GiftRegistryPDF()
        generator.generate(records)
        assert generator.last_generation_stats["sections"]["appendix"] == 1

    def test_all_sections_disabled_gives_blank_page(self):
        options = LayoutOptions(print_cover=False, print_summary=False, print_appendix=False)
        generator = GiftRegistryPDF()
        data = generator.generate([GiftRecord(name="乙", gift_description="喜糖")], options)
        assert _page_count(data) == 1
        assert generator.last_generation_stats["sections"] == {"blank": 1}

    def test_options_not_mutated(self):
        options = LayoutOptions()
        GiftRegistryPDF().generate(_money(1), options, event_title="寿宴")
        assert options.title == "礼金簿"

    def test_module_level_generate(self):
        assert generate(_money(1)).startswith(b"%PDF")


class TestPreconditions:
    @pytest.mark.parametrize("bad", [[], None, "abc", [1, 2], [{"name": "甲"}]])
    def test_rejects_invalid_records(self, bad):
        with pytest.raises(ValueError):
            GiftRegistryPDF().generate(bad)

    def test_unknown_engine(self):
        with pytest.raises(ValueError):
            GiftRegistryPDF(engine="raster")


class TestResourceFallback:
    def test_failing_fetcher_falls_back(self):
        def fetch(source):
            raise OSError("network down")

        options = LayoutOptions(
            fonts=FontSources(main="https://example.invalid/font.ttf"),
            images=ImageSources(cover="https://example.invalid/cover.png"),
        )
        generator = GiftRegistryPDF(fetch_bytes=fetch)
        data = generator.generate(_money(2), options)
        assert data.startswith(b"%PDF")
        stats = generator.last_generation_stats
        assert stats["fonts"]["main"] == CONST_FALLBACK_CJK_FONT
        assert stats["fonts"]["cover"] == CONST_FALLBACK_CJK_FONT
        assert stats["images"] == []

    def test_invalid_font_bytes_fall_back(self):
        options = LayoutOptions(fonts=FontSources(main=b"not a font"))
        generator = GiftRegistryPDF()
        generator.generate(_money(1), options)
        assert generator.last_generation_stats["fonts"]["main"] == CONST_FALLBACK_CJK_FONT

    def test_undecodable_image_skipped(self):
        options = LayoutOptions(images=ImageSources(background=b"garbage"))
        generator = GiftRegistryPDF()
        generator.generate(_money(1), options)
        assert generator.last_generation_stats["images"] == []

    def test_images_embedded(self):
        png = _png()
        options = LayoutOptions(images=ImageSources(cover=png, background=png))
        generator = GiftRegistryPDF()
        data = generator.generate(_money(1), options)
        assert generator.last_generation_stats["images"] == ["background", "cover"]
        assert _page_count(data) == 3


class TestSolemnMode:
    def test_grayscale_conversion(self):
        asset = GiftRegistryPDF._decode_image("cover", _png((255, 0, 0)), solemn=True)
        with Image.open(BytesIO(asset.data)) as img:
            assert img.format == "JPEG"
            r, g, b = img.convert("RGB").getpixel((5, 5))
        assert abs(r - g) <= 2 and abs(g - b) <= 2
        assert (asset.width, asset.height) == (40, 20)

    def test_festive_keeps_original_png(self):
        png = _png()
        asset = GiftRegistryPDF._decode_image("cover", png, solemn=False)
        assert asset.data == png

    def test_same_image_converted_once(self, monkeypatch):
        calls = []
        original = GiftRegistryPDF._decode_image

        def _counting(key, data, solemn):
            calls.append(key)
            return original(key, data, solemn)

        monkeypatch.setattr(GiftRegistryPDF, "_decode_image", staticmethod(_counting))
        png = _png()
        fetched = {"image:cover": png, "image:background": png}
        images = GiftRegistryPDF()._decode_images(fetched, solemn=True)
        assert len(calls) == 1
        assert set(images) == {"cover", "background"}
        assert images["background"].data == images["cover"].data


class TestEnginesAndParts:
    def test_pymupdf_engine(self):
        records = _money(13) + [GiftRecord(name="乙", gift_description="喜糖", payment_method=PaymentMethod.OTHER)]
        generator = GiftRegistryPDF(engine="pymupdf")
        data = generator.generate(records)
        with fitz.open(stream=data, filetype="pdf") as doc:
            assert doc.page_count == generator.last_generation_stats["pages"]

    def test_split_records(self):
        chunks = split_records(_money(5), 2)
        assert [len(c) for c in chunks] == [2, 2, 1]
        assert len(split_records(_money(5), 0)) == 1

    def test_parts_carry_grand_total_and_merge(self, captured_pages):
        records = _money(5) + [GiftRecord(name="作废", amount=Decimal(900), voided=True)]
        parts = GiftRegistryPDF().generate_parts(records, LayoutOptions(), event_title="婚礼", split_size=3)
        assert len(parts) == 2
        summaries = [p for p in captured_pages if p.section == "summary"]
        assert len(summaries) == 2
        for page in summaries:
            texts = [t.text for t in page.texts()]
            assert "事项总金额" in texts
            assert "¥500.00" in texts
            assert "5 人" in texts
        covers = [p for p in captured_pages if p.section == "cover"]
        assert [t.text for t in covers[1].texts()][-1] == "P2"

        merged = merge_documents(parts)
        assert _page_count(merged) == sum(_page_count(p) for p in parts)

    def test_merge_requires_parts(self):
        with pytest.raises(ValueError):
            merge_documents([])


def _transparent_png_with_red_square() -> bytes:
    img = Image.new("RGBA", (100, 100), (0, 0, 0, 0))
    img.paste((255, 0, 0, 255), (40, 40, 60, 60))
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


class TestTransparentImages:
    @pytest.mark.parametrize("engine", ["reportlab", "pymupdf"])
    def test_transparent_area_stays_white(self, engine):
        options = LayoutOptions(
            show_cover_title=False,
            print_summary=False,
            images=ImageSources(cover=_transparent_png_with_red_square()),
        )
        data = GiftRegistryPDF(engine=engine).generate(_money(1), options)
        with fitz.open(stream=data, filetype="pdf") as doc:
            pix = doc[0].get_pixmap(alpha=False)
            center_x = pix.width // 2
            # 方图等比铺满页高：上缘附近为透明区，页面中心为红色方块
            assert tuple(pix.pixel(center_x, pix.height // 10)[:3]) == (255, 255, 255)
            r, g, b = pix.pixel(center_x, pix.height // 2)[:3]
        assert r > 200 and g < 60 and b < 60


class TestVoidedGifts:
    def test_voided_gift_left_out_of_appendix_and_summary(self, captured_pages):
        records = _money(1) + [GiftRecord(name="x", gift_description="红酒", voided=True)]
        generator = GiftRegistryPDF()
        generator.generate(records)
        stats = generator.last_generation_stats
        assert "appendix" not in stats["sections"]
        assert stats["gifts"] == 0
        summary = [p for p in captured_pages if p.section == "summary"][0]
        texts = [t.text for t in summary.texts()]
        assert "礼物" not in texts
        assert "礼品小计" not in texts
        assert "红酒" not in [t.text for p in captured_pages for t in p.texts()]


class TestOversizedAmounts:
    def test_amount_beyond_chinese_range_still_generates(self, captured_pages):
        records = [GiftRecord(name="甲", amount=Decimal(10) ** 16)]
        data = GiftRegistryPDF().generate(records)
        assert data.startswith(b"%PDF")
        summary = [p for p in captured_pages if p.section == "summary"][0]
        assert "10000000000000000元" in [t.text for t in summary.texts()]
