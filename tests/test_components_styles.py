from __future__ import annotations

import math

import pytest

from giftbook.components import parse_color, resolve_styles, style_overrides_from_mapping
from giftbook.variables import STYLE_NAME_SIZE, STYLE_PAGE_INFO_SIZE


def _close(a, b):
    return all(math.isclose(x, y, abs_tol=1e-6) for x, y in zip(a, b))


class TestParseColor:
    def test_short_and_long_hex(self):
        assert parse_color("#f00") == (1.0, 0.0, 0.0)
        assert _close(parse_color("#353637"), (0x35 / 255, 0x36 / 255, 0x37 / 255))

    def test_rgb_function(self):
        assert _close(parse_color("rgb(236, 64, 60)"), (236 / 255, 64 / 255, 60 / 255))

    def test_float_tuple(self):
        assert parse_color((0.1, 0.2, 0.3)) == (0.1, 0.2, 0.3)

    @pytest.mark.parametrize("bad", ["", None, "#12", "red", (2.0, 0.0, 0.0)])
    def test_invalid_falls_back_to_default(self, bad):
        assert parse_color(bad, default=(0.5, 0.5, 0.5)) == (0.5, 0.5, 0.5)


class TestResolveStyles:
    def test_defaults(self):
        styles = resolve_styles()
        assert styles.name.size == STYLE_NAME_SIZE[0]
        assert styles.name.min_size == STYLE_NAME_SIZE[1]
        assert styles.page_info_size == STYLE_PAGE_INFO_SIZE
        # 数字金额带使用页脚基础色
        assert styles.numeric.color == styles.base

    def test_overrides_apply(self):
        styles = resolve_styles({"name": {"fontSize": 26, "color": "#000"}, "pageInfo": {"themeColor": "#00f"}})
        assert styles.name.size == 26
        assert styles.name.color == (0.0, 0.0, 0.0)
        assert styles.theme == (0.0, 0.0, 1.0)

    def test_invalid_size_ignored(self):
        styles = resolve_styles({"name": {"fontSize": -3}, "label": {"fontSize": "abc"}})
        assert styles.name.size == STYLE_NAME_SIZE[0]
        assert styles.label.size > 0

    def test_solemn_uses_single_palette_but_keeps_sizes(self):
        styles = resolve_styles({"name": {"fontSize": 24, "color": "#f00"}}, solemn=True)
        gray = parse_color("#353637")
        assert styles.name.size == 24
        for color in (styles.name.color, styles.label.color, styles.amount.color, styles.cover.color, styles.theme, styles.base):
            assert color == gray


def test_style_overrides_from_wrapped_mapping():
    data = {"giftBookStyles": {"name": {"fontSize": 20}, "broken": 3}}
    assert style_overrides_from_mapping(data) == {"name": {"fontSize": 20}}
    assert style_overrides_from_mapping({"label": {"color": "#fff"}}) == {"label": {"color": "#fff"}}
