"""图层树调试摘要（用 Rich 渲染为树形文本）"""

from io import StringIO

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from . import config
from .extraction.types import Color, FrameLayer, Layer, RectangleLayer, TextLayer


def _rgb(color: Color) -> str:
    return f"{color.r * 255:.0f}, {color.g * 255:.0f}, {color.b * 255:.0f}"


def describe_layer(layer: Layer) -> str:
    """单个图层的一行摘要"""
    line = f"{layer.name} ({layer.layer_type.value})"

    if isinstance(layer, TextLayer):
        preview = layer.characters[:20]
        return f'{line} - text: "{preview}..." color: rgb({_rgb(layer.text_color)})'

    if isinstance(layer, (FrameLayer, RectangleLayer)):
        visuals = layer.visuals
        line += (
            f" - fills: {len(visuals.fills)}, strokes: {len(visuals.strokes)}, "
            f"effects: {len(visuals.effects)}"
        )
        if visuals.fills:
            c = visuals.fills[0].color
            line += f" [fill: rgba({_rgb(c)}, {c.a:.2f})]"
        return line

    raise TypeError(f"Unknown layer type: {type(layer).__name__}")


def build_tree(layer: Layer, max_depth: int | None = None) -> Tree:
    """构建 Rich 树，超过 max_depth 的层级不展开"""
    if max_depth is None:
        max_depth = config.DEBUG_SUMMARY_MAX_DEPTH
    tree = Tree(Text(describe_layer(layer)))
    _add_children(tree, layer, 1, max_depth)
    return tree


def _add_children(node: Tree, layer: Layer, depth: int, max_depth: int) -> None:
    if depth > max_depth or not isinstance(layer, FrameLayer):
        return
    for child in layer.children:
        branch = node.add(Text(describe_layer(child)))
        _add_children(branch, child, depth + 1, max_depth)


def summarize_layers(layer: Layer, max_depth: int | None = None, width: int = 160) -> str:
    """渲染为纯文本摘要"""
    buffer = StringIO()
    console = Console(file=buffer, width=width, color_system=None, highlight=False)
    console.print(build_tree(layer, max_depth))
    return buffer.getvalue()
