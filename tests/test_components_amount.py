from __future__ import annotations

from decimal import Decimal

import pytest

from giftbook.components import amount_display_text, format_plain_amount, format_rmb, to_chinese_amount, to_decimal


class TestChineseAmount:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            (0, "零元整"),
            (100, "壹佰元整"),
            (1005, "壹仟零伍元整"),
            (100000000, "壹亿元整"),
            (10000, "壹万元整"),
            (10100, "壹万零壹佰元整"),
            (100010000, "壹亿零壹万元整"),
            (1010, "壹仟零壹拾元整"),
            (20000008, "贰仟万零捌元整"),
        ],
    )
    def test_integer_amounts(self, amount, expected):
        assert to_chinese_amount(amount) == expected

    def test_fraction_jiao_only(self):
        assert to_chinese_amount("88.5") == "捌拾捌元伍角"

    def test_fraction_jiao_and_fen(self):
        assert to_chinese_amount(Decimal("1.23")) == "壹元贰角叁分"

    def test_fraction_fen_only(self):
        assert to_chinese_amount(Decimal("6.05")) == "陆元伍分"

    def test_zero_fraction_is_whole(self):
        assert to_chinese_amount(Decimal("520.00")) == "伍佰贰拾元整"

    def test_fraction_truncated_to_fen(self):
        # 分以下直接截断，不四舍五入
        assert to_chinese_amount(Decimal("1.239")) == "壹元贰角叁分"

    def test_negative_prefix(self):
        assert to_chinese_amount(-200) == "负贰佰元整"

    def test_wan_yi_group(self):
        assert to_chinese_amount(10 ** 12) == "壹万亿元整"

    @pytest.mark.parametrize("bad", ["abc", None, True, float("nan"), float("inf"), [1]])
    def test_non_numeric_rejected(self, bad):
        with pytest.raises(ValueError):
            to_chinese_amount(bad)


class TestDisplayFormats:
    def test_format_rmb_thousands(self):
        assert format_rmb(1300) == "¥1,300.00"
        assert format_rmb(Decimal("0")) == "¥0.00"

    def test_format_rmb_negative(self):
        assert format_rmb(-12.5) == "-¥12.50"

    def test_plain_amount_integer_and_fraction(self):
        assert format_plain_amount(Decimal("100")) == "100"
        assert format_plain_amount(Decimal("100.50")) == "100.5"

    def test_to_decimal_accepts_strings(self):
        assert to_decimal(" 88.8 ") == Decimal("88.8")


class TestAmountDisplayText:
    def test_uses_chinese_within_range(self):
        assert amount_display_text(Decimal("1300")) == "壹仟叁佰元整"

    def test_falls_back_to_numerals_beyond_range(self):
        assert amount_display_text(Decimal(10) ** 16) == "10000000000000000元"
        assert amount_display_text("12345678901234567.5") == "12345678901234567.5元"

    def test_non_numeric_still_rejected(self):
        with pytest.raises(ValueError):
            amount_display_text("abc")
