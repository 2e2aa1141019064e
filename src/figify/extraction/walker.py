"""图层树遍历 - 把页面快照转换为图层树

按 DOM 顺序递归访问节点：
1. 可见性过滤（被过滤的节点连同子树一起丢弃）
2. 解析视觉样式、分类
3. 子节点坐标相对最近的被提取祖先（由递归显式传入 origin）
4. 自底向上省略空容器，省略可以级联

ID 由单次提取内的递增计数器分配（前序），合成根节点使用保留 ID。
"""

import itertools
from dataclasses import dataclass

from .. import config
from ..telemetry import get_logger, metrics
from .classifier import (
    NodeKind,
    classify,
    direct_text,
    font_family,
    font_size,
    font_weight,
    line_height,
    text_align,
    text_color,
)
from .layout import infer_auto_layout, infer_child_sizing, is_layout_container
from .paint import resolve_visuals
from .snapshot import ComputedStyle, DomNode, Rect
from .types import FrameLayer, Layer, RectangleLayer, TextLayer, Visuals, count_layers
from .units import non_negative_px, round_px
from .visibility import is_empty_wrapper, should_include

logger = get_logger(__name__)


@dataclass
class ExtractionResult:
    """提取结果：根容器 + 图层总数"""
    root: FrameLayer
    layer_count: int


def element_name(node: DomNode) -> str:
    """tag#id，否则 tag.class1.class2（跳过 __ 开头的类名）"""
    tag = node.tag.lower()
    if node.element_id:
        return f"{tag}#{node.element_id}"
    classes = [c for c in node.class_name.split() if c and not c.startswith("__")][:2]
    if classes:
        return f"{tag}.{'.'.join(classes)}"
    return tag


class LayerWalker:
    """单次提取的遍历器

    计数器属于实例，每次提取应使用新实例（见 extract_layers）。
    """

    def __init__(self):
        self._counter = itertools.count(1)

    def _next_id(self) -> str:
        return f"{config.LAYER_ID_PREFIX}{next(self._counter)}"

    def extract(self, body: DomNode) -> ExtractionResult:
        """从 document.body 的快照构建图层树"""
        visuals = resolve_visuals(body.style)
        children = self._visit_children(body, body.rect, body.style)

        root = FrameLayer(
            id=config.ROOT_LAYER_ID,
            name="root",
            x=0,
            y=0,
            width=round_px(body.rect.width),
            height=round_px(body.rect.height),
            children=children,
            visuals=visuals,
            auto_layout=infer_auto_layout(body.style),
        )
        layer_count = count_layers(root)
        logger.info(f"[DOMExtractor] Extracted {layer_count} layers")
        metrics.gauge("extraction.layers", layer_count)
        return ExtractionResult(root=root, layer_count=layer_count)

    def _visit_children(self, node: DomNode, origin: Rect, style: ComputedStyle) -> list[Layer]:
        children = []
        for child in node.children:
            layer = self.visit(child, origin, style)
            if layer is not None:
                children.append(layer)
        return children

    def visit(
        self,
        node: DomNode,
        origin: Rect,
        parent_style: ComputedStyle | None = None,
    ) -> Layer | None:
        """访问一个节点

        Args:
            node: 快照节点
            origin: 最近被提取祖先的渲染盒
            parent_style: 直接父节点的计算样式（子节点尺寸提示依赖父节点模式）

        Returns:
            图层，节点被过滤或省略时返回 None
        """
        if not should_include(node):
            return None

        layer_id = self._next_id()
        style = node.style
        rect = node.rect
        geometry = {
            "id": layer_id,
            "name": element_name(node),
            "x": round_px(rect.x - origin.x),
            "y": round_px(rect.y - origin.y),
            "width": round_px(rect.width),
            "height": round_px(rect.height),
        }
        sizing = None
        if parent_style is not None and is_layout_container(parent_style):
            sizing = infer_child_sizing(parent_style, style)

        visuals = resolve_visuals(style)
        kind = classify(node, visuals)

        if kind == NodeKind.TEXT:
            return self._text_layer(node, sizing=sizing, **geometry)

        if kind == NodeKind.STYLED_TEXT:
            return self._styled_text(node, visuals, sizing, geometry)

        children = self._visit_children(node, rect, style)
        if is_empty_wrapper(visuals, len(children)):
            return None

        auto_layout = infer_auto_layout(style)
        if not children and auto_layout is None:
            return RectangleLayer(sizing=sizing, visuals=visuals, **geometry)
        return FrameLayer(
            sizing=sizing,
            children=children,
            visuals=visuals,
            auto_layout=auto_layout,
            **geometry,
        )

    def _text_layer(self, node: DomNode, **geometry) -> TextLayer:
        style = node.style
        return TextLayer(
            characters=direct_text(node),
            font_size=font_size(style),
            font_family=font_family(style),
            font_weight=font_weight(style),
            text_color=text_color(style),
            text_align=text_align(style),
            line_height=line_height(style),
            **geometry,
        )

    def _styled_text(self, node: DomNode, visuals: Visuals, sizing, geometry: dict) -> FrameLayer:
        """带背景/边框/阴影的文本：FRAME 承载样式，内部放一个合成 TEXT"""
        style = node.style
        pad_top = non_negative_px(style.padding_top)
        pad_right = non_negative_px(style.padding_right)
        pad_bottom = non_negative_px(style.padding_bottom)
        pad_left = non_negative_px(style.padding_left)

        text = self._text_layer(
            node,
            id=self._next_id(),
            name=geometry["name"],
            x=pad_left,
            y=pad_top,
            width=max(0, geometry["width"] - pad_left - pad_right),
            height=max(0, geometry["height"] - pad_top - pad_bottom),
        )
        return FrameLayer(sizing=sizing, children=[text], visuals=visuals, **geometry)


def extract_layers(body: DomNode) -> ExtractionResult:
    """从 body 快照提取图层树（每次调用使用独立的 ID 计数器）"""
    return LayerWalker().extract(body)
