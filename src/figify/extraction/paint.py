"""Paint/Effect 转换 - 从计算样式得到填充、描边、阴影和圆角

简化约定：
- 渐变背景只保留一个代表色（渐变文本中从左到右第一个非透明颜色）
- 边框只看 top 边，四边不同的边框不建模
- 只支持外投影；inset 阴影丢弃
"""

from .. import config
from .color import find_colors, first_color_in, parse_color
from .snapshot import ComputedStyle
from .types import DropShadow, SolidPaint, Stroke, Visuals
from .units import parse_number, parse_numbers


def resolve_fills(style: ComputedStyle) -> list[SolidPaint]:
    """背景色 → 单个纯色填充；背景透明时回退到渐变代表色"""
    color = parse_color(style.background_color)
    if color is None and "gradient" in (style.background_image or "").lower():
        color = first_color_in(style.background_image)
    if color is None:
        return []
    return [SolidPaint(color=color, opacity=color.a)]


def resolve_stroke(style: ComputedStyle) -> tuple[list[Stroke], float]:
    """top 边框 → (描边列表, 描边粗细)"""
    weight = parse_number(style.border_top_width)
    if weight <= 0:
        return [], 0.0
    color = parse_color(style.border_top_color)
    if color is None:
        return [], 0.0
    return [Stroke(color=color)], weight


def split_shadow_list(value: str) -> list[str]:
    """按顶层逗号切分阴影列表（忽略 rgba(...) 等函数内部的逗号）"""
    entries = []
    depth = 0
    current = []
    for ch in value:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            entries.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail:
        entries.append(tail)
    return [entry for entry in entries if entry]


def parse_shadow(entry: str) -> DropShadow | None:
    """解析单个阴影，颜色可在开头或结尾

    缺少可识别颜色或长度少于两个时返回 None。
    """
    if "inset" in entry.lower():
        return None

    colors = find_colors(entry)
    if not colors:
        return None
    start, end, color = colors[0]
    if color is None:
        return None

    lengths = parse_numbers(entry[:start] + " " + entry[end:])
    if len(lengths) < 2:
        return None

    offset_x, offset_y = lengths[0], lengths[1]
    blur = lengths[2] if len(lengths) > 2 else 0.0
    spread = lengths[3] if len(lengths) > 3 else 0.0
    return DropShadow(
        color=color,
        offset_x=offset_x,
        offset_y=offset_y,
        radius=max(0.0, blur),
        spread=spread,
    )


def resolve_effects(style: ComputedStyle) -> list[DropShadow]:
    """box-shadow → 投影列表，保持源顺序；单个坏条目不影响其他条目"""
    value = (style.box_shadow or "").strip()
    if not value or value.lower() == "none":
        return []
    effects = []
    for entry in split_shadow_list(value):
        shadow = parse_shadow(entry)
        if shadow is not None:
            effects.append(shadow)
    return effects


def resolve_corner_radius(style: ComputedStyle) -> float:
    """圆角，上限 CORNER_RADIUS_MAX"""
    radius = parse_number(style.border_radius)
    if radius <= 0:
        return 0.0
    return min(radius, float(config.CORNER_RADIUS_MAX))


def resolve_visuals(style: ComputedStyle) -> Visuals:
    """汇总一个节点的全部视觉样式"""
    strokes, weight = resolve_stroke(style)
    return Visuals(
        fills=resolve_fills(style),
        strokes=strokes,
        stroke_weight=weight,
        effects=resolve_effects(style),
        corner_radius=resolve_corner_radius(style),
    )
