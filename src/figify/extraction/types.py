"""Layer 数据模型定义

包含：
- Color: 归一化 RGBA 颜色
- SolidPaint / Stroke / DropShadow: 填充、描边、阴影
- AutoLayout / SizingMode: flex/grid → auto-layout 描述
- FrameLayer / TextLayer / RectangleLayer: 图层树节点（封闭变体）
- LayerTree: 一次捕获的结果（图层树 + 截图兜底）
- Screenshot: 光栅化截图

所有 to_dict() 输出 Figma 插件消费的 camelCase JSON 结构。
"""

from dataclasses import dataclass, field
from enum import Enum

# 颜色比较容差（1/255）
COLOR_TOLERANCE = 1 / 255


class LayerType(Enum):
    """图层类型"""
    FRAME = "FRAME"
    TEXT = "TEXT"
    RECTANGLE = "RECTANGLE"


class LayoutMode(Enum):
    """Auto-layout 主轴方向"""
    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"


class AxisAlign(Enum):
    """轴向对齐方式

    counter 轴不使用 SPACE_BETWEEN。
    """
    START = "MIN"
    CENTER = "CENTER"
    END = "MAX"
    SPACE_BETWEEN = "SPACE_BETWEEN"


class SizingMode(Enum):
    """子节点在 auto-layout 父节点中的尺寸行为"""
    FIXED = "FIXED"
    FILL = "FILL"
    HUG = "HUG"


class TextAlign(Enum):
    """文本水平对齐"""
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"
    JUSTIFIED = "JUSTIFIED"


@dataclass(frozen=True)
class Color:
    """RGBA 颜色，各通道归一化到 [0, 1]"""
    r: float
    g: float
    b: float
    a: float = 1.0

    def is_close(self, other: "Color", tolerance: float = COLOR_TOLERANCE) -> bool:
        """近似相等（浮点比较）"""
        return (
            abs(self.r - other.r) <= tolerance
            and abs(self.g - other.g) <= tolerance
            and abs(self.b - other.b) <= tolerance
            and abs(self.a - other.a) <= tolerance
        )

    def to_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}


@dataclass
class SolidPaint:
    """纯色填充"""
    color: Color
    opacity: float | None = None

    def to_dict(self) -> dict:
        data: dict = {"type": "SOLID", "color": self.color.to_dict()}
        if self.opacity is not None:
            data["opacity"] = self.opacity
        return data


@dataclass
class Stroke:
    """纯色描边（粗细由所属图层的 stroke_weight 给出）"""
    color: Color

    def to_dict(self) -> dict:
        return {"type": "SOLID", "color": self.color.to_dict()}


@dataclass
class DropShadow:
    """投影效果"""
    color: Color
    offset_x: float
    offset_y: float
    radius: float = 0.0  # blur
    spread: float = 0.0
    visible: bool = True

    def to_dict(self) -> dict:
        return {
            "type": "DROP_SHADOW",
            "color": self.color.to_dict(),
            "offset": {"x": self.offset_x, "y": self.offset_y},
            "radius": self.radius,
            "spread": self.spread,
            "visible": self.visible,
            "blendMode": "NORMAL",
        }


@dataclass
class AutoLayout:
    """Auto-layout 描述（所有数值非负）"""
    mode: LayoutMode
    primary_align: AxisAlign = AxisAlign.START
    counter_align: AxisAlign = AxisAlign.START
    padding_top: int = 0
    padding_right: int = 0
    padding_bottom: int = 0
    padding_left: int = 0
    item_spacing: int = 0

    def to_dict(self) -> dict:
        return {
            "layoutMode": self.mode.value,
            "primaryAxisAlignItems": self.primary_align.value,
            "counterAxisAlignItems": self.counter_align.value,
            "paddingTop": self.padding_top,
            "paddingRight": self.padding_right,
            "paddingBottom": self.padding_bottom,
            "paddingLeft": self.padding_left,
            "itemSpacing": self.item_spacing,
        }


@dataclass
class ChildSizing:
    """子节点两个轴向的尺寸提示"""
    horizontal: SizingMode = SizingMode.FIXED
    vertical: SizingMode = SizingMode.FIXED


@dataclass
class Visuals:
    """一个节点解析出的视觉样式（填充/描边/阴影/圆角）"""
    fills: list[SolidPaint] = field(default_factory=list)
    strokes: list[Stroke] = field(default_factory=list)
    stroke_weight: float = 0.0
    effects: list[DropShadow] = field(default_factory=list)
    corner_radius: float = 0.0

    @property
    def has_paint(self) -> bool:
        """是否有填充、描边或阴影（不含圆角）"""
        return bool(self.fills or self.strokes or self.effects)

    @property
    def is_empty(self) -> bool:
        """完全没有视觉内容"""
        return not self.has_paint and self.corner_radius == 0


@dataclass
class BaseLayer:
    """图层公共属性

    x, y 相对最近的被提取祖先的原点。
    """
    id: str
    name: str
    x: int
    y: int
    width: int
    height: int
    sizing: ChildSizing | None = field(default=None, kw_only=True)

    layer_type = LayerType.FRAME

    def _base_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.layer_type.value,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }
        if self.sizing is not None:
            data["layoutSizingHorizontal"] = self.sizing.horizontal.value
            data["layoutSizingVertical"] = self.sizing.vertical.value
        return data


def _visuals_dict(visuals: Visuals) -> dict:
    data: dict = {}
    if visuals.fills:
        data["fills"] = [fill.to_dict() for fill in visuals.fills]
    if visuals.corner_radius > 0:
        data["cornerRadius"] = visuals.corner_radius
    if visuals.strokes:
        data["strokes"] = [stroke.to_dict() for stroke in visuals.strokes]
        data["strokeWeight"] = visuals.stroke_weight
    if visuals.effects:
        data["effects"] = [effect.to_dict() for effect in visuals.effects]
    return data


@dataclass
class FrameLayer(BaseLayer):
    """容器图层，独占其子图层"""
    children: list["Layer"] = field(default_factory=list, kw_only=True)
    visuals: Visuals = field(default_factory=Visuals, kw_only=True)
    auto_layout: AutoLayout | None = field(default=None, kw_only=True)

    layer_type = LayerType.FRAME

    def to_dict(self) -> dict:
        data = self._base_dict()
        data["children"] = [child.to_dict() for child in self.children]
        data.update(_visuals_dict(self.visuals))
        if self.auto_layout is not None:
            data.update(self.auto_layout.to_dict())
        return data


@dataclass
class RectangleLayer(BaseLayer):
    """无子节点的带样式矩形"""
    visuals: Visuals = field(default_factory=Visuals, kw_only=True)

    layer_type = LayerType.RECTANGLE

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update(_visuals_dict(self.visuals))
        return data


@dataclass
class TextLayer(BaseLayer):
    """文本图层（叶子节点，不能携带背景/描边/阴影）"""
    characters: str = field(default="", kw_only=True)
    font_size: float = field(default=16.0, kw_only=True)
    font_family: str = field(default="Inter", kw_only=True)
    font_weight: int = field(default=400, kw_only=True)
    text_color: Color = field(default_factory=lambda: Color(0.0, 0.0, 0.0), kw_only=True)
    text_align: TextAlign | None = field(default=None, kw_only=True)
    line_height: float | None = field(default=None, kw_only=True)

    layer_type = LayerType.TEXT

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update({
            "characters": self.characters,
            "fontSize": self.font_size,
            "fontFamily": self.font_family,
            "fontWeight": self.font_weight,
            "textColor": self.text_color.to_dict(),
        })
        if self.text_align is not None:
            data["textAlign"] = self.text_align.value
        if self.line_height is not None:
            data["lineHeight"] = self.line_height
        return data


Layer = FrameLayer | TextLayer | RectangleLayer


def iter_layers(layer: Layer):
    """前序遍历图层树（DOM 顺序）"""
    yield layer
    if isinstance(layer, FrameLayer):
        for child in layer.children:
            yield from iter_layers(child)


def count_layers(layer: Layer) -> int:
    """统计图层总数（含自身）"""
    return sum(1 for _ in iter_layers(layer))


@dataclass
class Screenshot:
    """光栅化截图"""
    viewport: str
    width: int
    height: int
    data: str  # base64 PNG

    def to_dict(self) -> dict:
        return {
            "viewport": self.viewport,
            "width": self.width,
            "height": self.height,
            "data": self.data,
        }


@dataclass
class LayerTree:
    """一次捕获的结果：带名称和视口标签的根容器 + 截图兜底"""
    name: str
    viewport: str
    width: int
    height: int
    root_layer: FrameLayer
    screenshot_fallback: str | None = None

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "viewport": self.viewport,
            "width": self.width,
            "height": self.height,
            "rootLayer": self.root_layer.to_dict(),
        }
        if self.screenshot_fallback is not None:
            data["screenshotFallback"] = self.screenshot_fallback
        return data
