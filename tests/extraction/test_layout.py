"""Layout 推断测试"""

import pytest

from figify.extraction.layout import infer_auto_layout, infer_child_sizing, is_layout_container
from figify.extraction.snapshot import ComputedStyle
from figify.extraction.types import AxisAlign, LayoutMode, SizingMode


def _style(**kwargs) -> ComputedStyle:
    return ComputedStyle.from_dict(kwargs)


class TestContainerDetection:
    """哪些 display 值算布局容器"""

    @pytest.mark.parametrize("display", ["flex", "inline-flex", "grid", "inline-grid"])
    def test_layout_displays(self, display):
        assert is_layout_container(_style(display=display))

    @pytest.mark.parametrize("display", ["block", "inline", "table", "contents"])
    def test_flow_displays(self, display):
        assert not is_layout_container(_style(display=display))
        assert infer_auto_layout(_style(display=display)) is None


class TestFlexAutoLayout:
    """flex 容器"""

    def test_row_default(self):
        layout = infer_auto_layout(_style(display="flex"))
        assert layout.mode == LayoutMode.HORIZONTAL
        assert layout.primary_align == AxisAlign.START
        assert layout.counter_align == AxisAlign.START

    @pytest.mark.parametrize("direction", ["column", "column-reverse"])
    def test_column(self, direction):
        layout = infer_auto_layout(_style(display="flex", flexDirection=direction))
        assert layout.mode == LayoutMode.VERTICAL

    @pytest.mark.parametrize("value,expected", [
        ("center", AxisAlign.CENTER),
        ("flex-end", AxisAlign.END),
        ("end", AxisAlign.END),
        ("space-between", AxisAlign.SPACE_BETWEEN),
        ("space-around", AxisAlign.START),
        ("flex-start", AxisAlign.START),
    ])
    def test_justify_content(self, value, expected):
        layout = infer_auto_layout(_style(display="flex", justifyContent=value))
        assert layout.primary_align == expected

    def test_align_items_never_space_between(self):
        layout = infer_auto_layout(_style(display="flex", alignItems="space-between"))
        assert layout.counter_align == AxisAlign.START

    def test_align_items_center(self):
        layout = infer_auto_layout(_style(display="flex", alignItems="center"))
        assert layout.counter_align == AxisAlign.CENTER

    def test_padding_rounded_and_floored(self):
        layout = infer_auto_layout(_style(
            display="flex",
            paddingTop="12.5px",
            paddingRight="-4px",
            paddingBottom="0.4px",
            paddingLeft="8px",
        ))
        assert layout.padding_top == 13
        assert layout.padding_right == 0
        assert layout.padding_bottom == 0
        assert layout.padding_left == 8

    def test_gap_by_axis(self):
        row = infer_auto_layout(_style(display="flex", gap="4px", columnGap="10px", rowGap="20px"))
        assert row.item_spacing == 10
        column = infer_auto_layout(_style(
            display="flex", flexDirection="column", gap="4px", columnGap="10px", rowGap="20px",
        ))
        assert column.item_spacing == 20

    def test_gap_fallback(self):
        layout = infer_auto_layout(_style(display="flex", gap="6px"))
        assert layout.item_spacing == 6

    def test_normal_gap_is_zero(self):
        assert infer_auto_layout(_style(display="flex")).item_spacing == 0

    def test_to_dict(self):
        data = infer_auto_layout(_style(display="flex", justifyContent="center")).to_dict()
        assert data["layoutMode"] == "HORIZONTAL"
        assert data["primaryAxisAlignItems"] == "CENTER"
        assert data["counterAxisAlignItems"] == "MIN"


class TestGridAutoLayout:
    """grid 容器"""

    def test_row_flow(self):
        layout = infer_auto_layout(_style(display="grid"))
        assert layout.mode == LayoutMode.HORIZONTAL

    def test_column_flow(self):
        layout = infer_auto_layout(_style(display="grid", gridAutoFlow="column dense"))
        assert layout.mode == LayoutMode.VERTICAL

    def test_justify_items(self):
        layout = infer_auto_layout(_style(display="grid", justifyItems="end", justifyContent="center"))
        assert layout.primary_align == AxisAlign.END


class TestChildSizing:
    """子节点尺寸提示"""

    def test_flow_parent_is_fixed(self):
        sizing = infer_child_sizing(_style(display="block"), _style(flexGrow="1", width="100%"))
        assert sizing.horizontal == SizingMode.FIXED
        assert sizing.vertical == SizingMode.FIXED

    def test_no_parent(self):
        sizing = infer_child_sizing(None, _style())
        assert (sizing.horizontal, sizing.vertical) == (SizingMode.FIXED, SizingMode.FIXED)

    def test_grid_parent(self):
        sizing = infer_child_sizing(_style(display="grid"), _style())
        assert sizing.horizontal == SizingMode.FILL
        assert sizing.vertical == SizingMode.HUG

    def test_grow_in_row(self):
        sizing = infer_child_sizing(_style(display="flex"), _style(flexGrow="1"))
        assert sizing.horizontal == SizingMode.FILL
        assert sizing.vertical == SizingMode.FIXED

    def test_grow_in_column(self):
        sizing = infer_child_sizing(
            _style(display="flex", flexDirection="column"), _style(flexGrow="2")
        )
        assert sizing.horizontal == SizingMode.FIXED
        assert sizing.vertical == SizingMode.FILL

    def test_full_width_in_column(self):
        sizing = infer_child_sizing(
            _style(display="flex", flexDirection="column"), _style(width="100%")
        )
        assert sizing.horizontal == SizingMode.FILL
        assert sizing.vertical == SizingMode.FIXED

    def test_no_grow(self):
        sizing = infer_child_sizing(_style(display="inline-flex"), _style(flexGrow="0", width="120px"))
        assert (sizing.horizontal, sizing.vertical) == (SizingMode.FIXED, SizingMode.FIXED)
