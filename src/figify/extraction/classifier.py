"""节点分类 - 决定节点输出为 TEXT、带样式的文本容器，还是普通容器

规则:
1. 标签在 TEXT_TAGS 中且有非空的直接文本 → 文本候选
2. 文本候选同时带填充/描边/阴影 → FRAME 包裹一个合成 TEXT 子节点
   （TEXT 叶子节点不能携带背景/边框/阴影）
3. 其他 → 容器
"""

from enum import Enum

from .. import config
from .color import parse_color
from .snapshot import ComputedStyle, DomNode
from .types import Color, TextAlign, Visuals
from .units import parse_number

_TEXT_ALIGN = {
    "center": TextAlign.CENTER,
    "right": TextAlign.RIGHT,
    "end": TextAlign.RIGHT,
    "justify": TextAlign.JUSTIFIED,
}

_FONT_WEIGHT_KEYWORDS = {
    "normal": 400,
    "bold": 700,
    "lighter": 300,
    "bolder": 700,
}


class NodeKind(Enum):
    """节点分类结果"""
    TEXT = "text"
    STYLED_TEXT = "styled_text"
    CONTAINER = "container"


def direct_text(node: DomNode) -> str:
    """直接子文本（不含后代元素文本），去掉首尾空白"""
    return (node.text or "").strip()


def is_text_candidate(node: DomNode) -> bool:
    return node.tag.upper() in config.TEXT_TAGS and bool(direct_text(node))


def classify(node: DomNode, visuals: Visuals) -> NodeKind:
    """对已通过可见性过滤的节点分类

    Args:
        node: 快照节点
        visuals: 该节点解析出的视觉样式
    """
    if not is_text_candidate(node):
        return NodeKind.CONTAINER
    if visuals.has_paint:
        return NodeKind.STYLED_TEXT
    return NodeKind.TEXT


def font_family(style: ComputedStyle) -> str:
    """字体列表中的第一个，去掉引号"""
    first = (style.font_family or "").split(",")[0]
    first = first.replace('"', "").replace("'", "").strip()
    return first or config.DEFAULT_FONT_FAMILY


def font_weight(style: ComputedStyle) -> int:
    value = (style.font_weight or "").strip().lower()
    if value in _FONT_WEIGHT_KEYWORDS:
        return _FONT_WEIGHT_KEYWORDS[value]
    weight = int(parse_number(value))
    return weight if weight > 0 else config.DEFAULT_FONT_WEIGHT


def font_size(style: ComputedStyle) -> float:
    size = parse_number(style.font_size)
    return size if size > 0 else config.DEFAULT_FONT_SIZE


def text_align(style: ComputedStyle) -> TextAlign:
    return _TEXT_ALIGN.get((style.text_align or "").strip().lower(), TextAlign.LEFT)


def line_height(style: ComputedStyle) -> float | None:
    """px 行高；normal 或无法解析时为 None"""
    value = (style.line_height or "").strip().lower()
    if not value or value == "normal":
        return None
    height = parse_number(value)
    return height if height > 0 else None


def text_color(style: ComputedStyle) -> Color:
    """文字颜色，无法解析时为黑色"""
    return parse_color(style.color) or Color(0.0, 0.0, 0.0)
