"""Paint/Effect 转换测试"""

from figify.extraction.paint import (
    parse_shadow,
    resolve_corner_radius,
    resolve_effects,
    resolve_fills,
    resolve_stroke,
    resolve_visuals,
    split_shadow_list,
)
from figify.extraction.snapshot import ComputedStyle
from figify.extraction.types import Color


def _style(**kwargs) -> ComputedStyle:
    return ComputedStyle.from_dict(kwargs)


class TestFills:
    """背景填充"""

    def test_solid_background(self):
        fills = resolve_fills(_style(backgroundColor="rgba(255, 0, 0, 0.5)"))
        assert len(fills) == 1
        assert fills[0].color.is_close(Color(1.0, 0.0, 0.0, 0.5))
        assert fills[0].opacity == 0.5

    def test_transparent_background_has_no_fill(self):
        assert resolve_fills(_style(backgroundColor="rgba(0, 0, 0, 0)")) == []

    def test_gradient_fallback(self):
        style = _style(
            backgroundColor="rgba(0, 0, 0, 0)",
            backgroundImage="linear-gradient(90deg, rgba(0, 0, 0, 0) 0%, rgb(0, 128, 255) 100%)",
        )
        fills = resolve_fills(style)
        assert len(fills) == 1
        assert fills[0].color.is_close(Color(0.0, 128 / 255, 1.0))

    def test_background_color_wins_over_gradient(self):
        style = _style(
            backgroundColor="rgb(255, 255, 255)",
            backgroundImage="linear-gradient(red, rgb(0, 0, 0))",
        )
        assert resolve_fills(style)[0].color == Color(1.0, 1.0, 1.0)

    def test_url_background_ignored(self):
        style = _style(backgroundImage="url(rgb.png)")
        assert resolve_fills(style) == []


class TestStroke:
    """边框 → 描边（只看 top 边）"""

    def test_top_border(self):
        strokes, weight = resolve_stroke(
            _style(borderTopWidth="2px", borderTopColor="rgb(0, 0, 255)")
        )
        assert len(strokes) == 1
        assert strokes[0].color == Color(0.0, 0.0, 1.0)
        assert weight == 2.0

    def test_zero_width_border(self):
        assert resolve_stroke(_style(borderTopWidth="0px", borderTopColor="rgb(0, 0, 0)")) == ([], 0.0)

    def test_transparent_border(self):
        assert resolve_stroke(_style(borderTopWidth="1px", borderTopColor="transparent")) == ([], 0.0)


class TestShadows:
    """box-shadow → 投影"""

    def test_split_ignores_commas_inside_functions(self):
        value = "rgba(0, 0, 0, 0.1) 0px 1px 3px 0px, rgba(0, 0, 0, 0.06) 0px 1px 2px 0px"
        assert split_shadow_list(value) == [
            "rgba(0, 0, 0, 0.1) 0px 1px 3px 0px",
            "rgba(0, 0, 0, 0.06) 0px 1px 2px 0px",
        ]

    def test_color_first(self):
        shadow = parse_shadow("rgba(0, 0, 0, 0.25) 2px 4px 8px 1px")
        assert shadow.offset_x == 2
        assert shadow.offset_y == 4
        assert shadow.radius == 8
        assert shadow.spread == 1
        assert shadow.color.is_close(Color(0.0, 0.0, 0.0, 0.25))

    def test_color_last(self):
        shadow = parse_shadow("0px 10px 15px -3px rgb(10, 20, 30)")
        assert (shadow.offset_x, shadow.offset_y, shadow.radius, shadow.spread) == (0, 10, 15, -3)

    def test_missing_blur_and_spread(self):
        shadow = parse_shadow("3px 3px #000")
        assert shadow.radius == 0
        assert shadow.spread == 0

    def test_inset_dropped(self):
        assert parse_shadow("inset 0px 2px 4px rgb(0, 0, 0)") is None

    def test_no_color_dropped(self):
        assert parse_shadow("0px 2px 4px") is None

    def test_one_good_one_malformed(self):
        style = _style(boxShadow="rgb(0, 0, 0) 0px 2px 4px, rgb(0, 0, 0) nonsense")
        effects = resolve_effects(style)
        assert len(effects) == 1
        assert effects[0].offset_y == 2

    def test_source_order_preserved(self):
        style = _style(boxShadow="rgb(255, 0, 0) 1px 1px 1px, rgb(0, 0, 255) 2px 2px 2px")
        effects = resolve_effects(style)
        assert [e.offset_x for e in effects] == [1, 2]

    def test_none(self):
        assert resolve_effects(_style(boxShadow="none")) == []

    def test_to_dict(self):
        data = parse_shadow("rgb(0, 0, 0) 1px 2px 3px").to_dict()
        assert data["type"] == "DROP_SHADOW"
        assert data["offset"] == {"x": 1.0, "y": 2.0}
        assert data["blendMode"] == "NORMAL"


class TestCornerRadius:
    """圆角"""

    def test_plain(self):
        assert resolve_corner_radius(_style(borderRadius="8px")) == 8

    def test_capped(self):
        assert resolve_corner_radius(_style(borderRadius="9999px")) == 1000

    def test_zero(self):
        assert resolve_corner_radius(_style(borderRadius="0px")) == 0


class TestVisuals:
    """汇总"""

    def test_empty_style(self):
        visuals = resolve_visuals(ComputedStyle())
        assert visuals.is_empty
        assert not visuals.has_paint

    def test_radius_only_is_not_paint(self):
        visuals = resolve_visuals(_style(borderRadius="4px"))
        assert not visuals.has_paint
        assert not visuals.is_empty
