"""Layout 推断 - flex/grid → auto-layout 描述与子节点尺寸提示

flex:
    flex-direction: column/column-reverse → VERTICAL，否则 HORIZONTAL
    justify-content → 主轴对齐，align-items → 交叉轴对齐
grid:
    grid-auto-flow 含 column → VERTICAL，否则 HORIZONTAL
    justify-items → 主轴对齐，align-items → 交叉轴对齐
    子节点尺寸固定为 水平 FILL / 垂直 HUG（不建模轨道）
"""

from .snapshot import ComputedStyle
from .types import AutoLayout, AxisAlign, ChildSizing, LayoutMode, SizingMode
from .units import non_negative_px, parse_number

FLEX_DISPLAYS = frozenset({"flex", "inline-flex"})
GRID_DISPLAYS = frozenset({"grid", "inline-grid"})


def _display(style: ComputedStyle) -> str:
    return (style.display or "").strip().lower()


def is_flex(style: ComputedStyle) -> bool:
    return _display(style) in FLEX_DISPLAYS


def is_grid(style: ComputedStyle) -> bool:
    return _display(style) in GRID_DISPLAYS


def is_layout_container(style: ComputedStyle) -> bool:
    """display 是否为 flex/inline-flex/grid/inline-grid"""
    return is_flex(style) or is_grid(style)


def _align(value: str, allow_space_between: bool) -> AxisAlign:
    value = (value or "").strip().lower()
    if value == "center":
        return AxisAlign.CENTER
    if value in ("flex-end", "end"):
        return AxisAlign.END
    if allow_space_between and value == "space-between":
        return AxisAlign.SPACE_BETWEEN
    return AxisAlign.START


def flex_mode(style: ComputedStyle) -> LayoutMode:
    direction = (style.flex_direction or "").strip().lower()
    if direction in ("column", "column-reverse"):
        return LayoutMode.VERTICAL
    return LayoutMode.HORIZONTAL


def grid_mode(style: ComputedStyle) -> LayoutMode:
    flow = (style.grid_auto_flow or "").strip().lower()
    if "column" in flow:
        return LayoutMode.VERTICAL
    return LayoutMode.HORIZONTAL


def _gap(style: ComputedStyle, mode: LayoutMode) -> int:
    """主轴间距：水平取 column-gap，垂直取 row-gap，缺省回退到 gap"""
    axis_gap = style.column_gap if mode == LayoutMode.HORIZONTAL else style.row_gap
    if axis_gap and axis_gap.strip().lower() != "normal":
        return non_negative_px(axis_gap)
    return non_negative_px(style.gap)


def infer_auto_layout(style: ComputedStyle) -> AutoLayout | None:
    """容器的 auto-layout 描述；非 flex/grid 返回 None"""
    if is_flex(style):
        mode = flex_mode(style)
        primary = _align(style.justify_content, allow_space_between=True)
    elif is_grid(style):
        mode = grid_mode(style)
        primary = _align(style.justify_items, allow_space_between=False)
    else:
        return None

    return AutoLayout(
        mode=mode,
        primary_align=primary,
        counter_align=_align(style.align_items, allow_space_between=False),
        padding_top=non_negative_px(style.padding_top),
        padding_right=non_negative_px(style.padding_right),
        padding_bottom=non_negative_px(style.padding_bottom),
        padding_left=non_negative_px(style.padding_left),
        item_spacing=_gap(style, mode),
    )


def _is_full_percent(value: str) -> bool:
    return (value or "").strip() == "100%"


def infer_child_sizing(parent_style: ComputedStyle | None, child_style: ComputedStyle) -> ChildSizing:
    """子节点尺寸提示，取决于直接父节点的布局模式

    Args:
        parent_style: 直接父节点的计算样式（None 视为普通流）
        child_style: 子节点的计算样式
    """
    if parent_style is None or not is_layout_container(parent_style):
        return ChildSizing(SizingMode.FIXED, SizingMode.FIXED)

    if is_grid(parent_style):
        return ChildSizing(SizingMode.FILL, SizingMode.HUG)

    grows = parse_number(child_style.flex_grow) > 0
    main_axis = flex_mode(parent_style)

    horizontal = SizingMode.FIXED
    vertical = SizingMode.FIXED
    if (grows and main_axis == LayoutMode.HORIZONTAL) or _is_full_percent(child_style.width):
        horizontal = SizingMode.FILL
    if (grows and main_axis == LayoutMode.VERTICAL) or _is_full_percent(child_style.height):
        vertical = SizingMode.FILL
    return ChildSizing(horizontal, vertical)
