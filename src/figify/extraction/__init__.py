"""Extraction 模块 - 页面快照 → 图层树

核心组件:
- parse_color: 颜色字符串 → 归一化 RGBA
- resolve_visuals: 计算样式 → 填充/描边/阴影/圆角
- infer_auto_layout / infer_child_sizing: flex/grid → auto-layout
- extract_layers: 快照 → 图层树 + 图层总数
"""

from .color import parse_color
from .layout import infer_auto_layout, infer_child_sizing
from .paint import resolve_visuals
from .snapshot import SNAPSHOT_SCRIPT, ComputedStyle, DomNode, Rect
from .types import (
    Color,
    FrameLayer,
    Layer,
    LayerTree,
    RectangleLayer,
    Screenshot,
    TextLayer,
)
from .walker import ExtractionResult, LayerWalker, extract_layers

__all__ = [
    "parse_color",
    "resolve_visuals",
    "infer_auto_layout",
    "infer_child_sizing",
    "SNAPSHOT_SCRIPT",
    "ComputedStyle",
    "DomNode",
    "Rect",
    "Color",
    "FrameLayer",
    "TextLayer",
    "RectangleLayer",
    "Layer",
    "LayerTree",
    "Screenshot",
    "ExtractionResult",
    "LayerWalker",
    "extract_layers",
]
