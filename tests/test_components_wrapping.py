from __future__ import annotations

import math

import pytest

from giftbook.components import estimate_text_width, wrap_text


def _mono(size: float = 10.0):
    # 每个字符等宽，便于计算
    return lambda fragment: len(fragment) * size


class TestTextWidthEstimation:
    def test_empty_text_width_is_zero(self):
        assert estimate_text_width("", 12) == 0.0

    def test_mixed_cjk_ascii_width(self):
        # "测试ABC" -> 2*12 + 3*12*0.6 = 24 + 21.6 = 45.6
        w = estimate_text_width("测试ABC", font_size=12, char_width_ratio=0.6)
        assert math.isclose(w, 45.6, rel_tol=1e-6, abs_tol=1e-6)


class TestCharWrapping:
    def test_split_cjk_exact_two_chars_per_line(self):
        result = wrap_text("测试文本", _mono(), max_width=20, font_size=12)
        assert result.lines == ["测试", "文本"]
        assert result.height == 2 * (12 + 4)

    def test_lines_never_exceed_width(self):
        measure = _mono()
        result = wrap_text("红酒两瓶、喜糖一盒、茶叶一罐", measure, max_width=35, font_size=11)
        assert all(measure(line) <= 35 for line in result.lines)
        assert "".join(result.lines) == "红酒两瓶、喜糖一盒、茶叶一罐"

    def test_char_wider_than_line_stands_alone(self):
        result = wrap_text("测试", _mono(12), max_width=10, font_size=12)
        assert result.lines == ["测", "试"]

    def test_blank_line_preserved(self):
        result = wrap_text("第一行\n\n第三行", _mono(), max_width=100, font_size=10)
        assert result.lines == ["第一行", "", "第三行"]

    def test_crlf_paragraphs(self):
        result = wrap_text("甲\r\n乙", _mono(), max_width=100, font_size=10)
        assert result.lines == ["甲", "乙"]

    def test_empty_text_single_empty_line(self):
        result = wrap_text("", _mono(), max_width=100, font_size=10)
        assert result.lines == [""]


class TestWordWrapping:
    def test_words_joined_by_space(self):
        result = wrap_text("red wine two bottles", _mono(), max_width=90, font_size=10, mode="word")
        assert result.lines == ["red wine", "two", "bottles"]

    def test_oversized_word_broken_by_chars(self):
        measure = _mono()
        result = wrap_text("abcdefghij", measure, max_width=40, font_size=10, mode="word")
        assert result.lines == ["abcd", "efgh", "ij"]
        assert all(measure(line) <= 40 for line in result.lines)

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            wrap_text("x", _mono(), max_width=10, font_size=10, mode="syllable")
