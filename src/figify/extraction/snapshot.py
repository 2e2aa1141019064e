"""页面快照 - 浏览器侧脚本与 Python 侧的边界记录

SNAPSHOT_SCRIPT 在页面上下文里执行（由浏览器自动化层 evaluate），
只负责把 document.body 下的元素树连同计算样式序列化出来，
不做任何分类、过滤或颜色转换；这些全部在 Python 侧完成。

style.width / style.height 记录声明值而不是计算值，用于识别 100% 宽高：
先取内联样式，其次是同源样式表中匹配且声明为 100% 的规则（如 .w-full），
都没有时回退到计算值。不解析选择器优先级；跨域样式表读不到。

记录结构（camelCase，与脚本输出一致）:
    {
      "tag": "DIV", "id": "", "className": "card",
      "rect": {"x": 0, "y": 0, "width": 100, "height": 40},
      "style": {"display": "flex", "backgroundColor": "rgb(...)", ...},
      "text": "direct text only",
      "children": [...]
    }
"""

from dataclasses import dataclass, field, fields

SNAPSHOT_SCRIPT = """
(function snapshotDOM() {
  const STYLE_KEYS = [
    'display', 'visibility', 'opacity',
    'backgroundColor', 'backgroundImage',
    'borderTopWidth', 'borderTopColor', 'borderRadius', 'boxShadow',
    'color', 'fontSize', 'fontWeight', 'fontFamily', 'textAlign', 'lineHeight',
    'flexDirection', 'justifyContent', 'alignItems', 'flexGrow',
    'gridAutoFlow', 'justifyItems',
    'paddingTop', 'paddingRight', 'paddingBottom', 'paddingLeft',
    'gap', 'rowGap', 'columnGap'
  ];

  // 样式表中声明 width/height: 100% 的规则（跨域样式表不可读，跳过）
  const FULL_RULES = { width: [], height: [] };

  function collectRules(rules) {
    for (const rule of rules) {
      if (rule.cssRules && rule.media) {
        if (window.matchMedia(rule.media.mediaText).matches) {
          collectRules(rule.cssRules);
        }
      } else if (rule.style && rule.selectorText) {
        for (const prop of ['width', 'height']) {
          if (rule.style.getPropertyValue(prop).trim() === '100%') {
            FULL_RULES[prop].push(rule.selectorText);
          }
        }
      }
    }
  }

  for (const sheet of document.styleSheets) {
    try {
      collectRules(sheet.cssRules);
    } catch (e) {
      // SecurityError
    }
  }

  function declaredSize(el, prop, computedValue) {
    if (el.style[prop]) {
      return el.style[prop];
    }
    for (const selector of FULL_RULES[prop]) {
      try {
        if (el.matches(selector)) {
          return '100%';
        }
      } catch (e) {
        // 浏览器不支持的选择器
      }
    }
    return computedValue;
  }

  function directText(el) {
    let text = '';
    for (const node of el.childNodes) {
      if (node.nodeType === Node.TEXT_NODE) {
        text += node.textContent;
      }
    }
    return text;
  }

  function snapshot(el) {
    const computed = getComputedStyle(el);
    const rect = el.getBoundingClientRect();
    const style = {};
    for (const key of STYLE_KEYS) {
      style[key] = computed[key];
    }
    // 声明值，用于识别 100% 宽高
    style.width = declaredSize(el, 'width', computed.width);
    style.height = declaredSize(el, 'height', computed.height);

    const children = [];
    for (const child of el.children) {
      children.push(snapshot(child));
    }

    return {
      tag: el.tagName,
      id: el.id || '',
      className: typeof el.className === 'string' ? el.className : '',
      rect: { x: rect.left, y: rect.top, width: rect.width, height: rect.height },
      style,
      text: directText(el),
      children
    };
  }

  return snapshot(document.body);
})()
"""

PAGE_DIMENSIONS_SCRIPT = (
    "({ width: document.documentElement.scrollWidth, "
    "height: document.documentElement.scrollHeight })"
)


@dataclass
class Rect:
    """渲染盒（视口坐标）"""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_dict(cls, data: dict | None) -> "Rect":
        data = data or {}
        return cls(
            x=_to_float(data.get("x", data.get("left"))),
            y=_to_float(data.get("y", data.get("top"))),
            width=_to_float(data.get("width")),
            height=_to_float(data.get("height")),
        )


@dataclass
class ComputedStyle:
    """节点计算样式的子集（浏览器序列化后的原始字符串）"""
    display: str = "block"
    visibility: str = "visible"
    opacity: str = "1"
    background_color: str = ""
    background_image: str = "none"
    border_top_width: str = "0px"
    border_top_color: str = ""
    border_radius: str = "0px"
    box_shadow: str = "none"
    color: str = ""
    font_size: str = ""
    font_weight: str = ""
    font_family: str = ""
    text_align: str = ""
    line_height: str = "normal"
    flex_direction: str = "row"
    justify_content: str = "normal"
    align_items: str = "normal"
    flex_grow: str = "0"
    grid_auto_flow: str = "row"
    justify_items: str = "normal"
    padding_top: str = "0px"
    padding_right: str = "0px"
    padding_bottom: str = "0px"
    padding_left: str = "0px"
    gap: str = "normal"
    row_gap: str = "normal"
    column_gap: str = "normal"
    width: str = "auto"
    height: str = "auto"

    @classmethod
    def from_dict(cls, data: dict | None) -> "ComputedStyle":
        """从 camelCase（或 kebab-case / snake_case）字典构造，未知键忽略"""
        data = data or {}
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _to_snake(key)
            if name in known and value is not None:
                values[name] = str(value)
        return cls(**values)


@dataclass
class DomNode:
    """一个元素节点的快照

    text 只包含直接子文本节点，不包含后代元素的文本。
    """
    tag: str
    rect: Rect = field(default_factory=Rect)
    style: ComputedStyle = field(default_factory=ComputedStyle)
    element_id: str = ""
    class_name: str = ""
    text: str = ""
    children: list["DomNode"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "DomNode":
        return cls(
            tag=str(data.get("tag", "")).upper(),
            rect=Rect.from_dict(data.get("rect")),
            style=ComputedStyle.from_dict(data.get("style")),
            element_id=str(data.get("id") or ""),
            class_name=str(data.get("className") or ""),
            text=str(data.get("text") or ""),
            children=[cls.from_dict(child) for child in data.get("children") or []],
        )


def _to_snake(key: str) -> str:
    out = []
    for ch in key.replace("-", "_"):
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
