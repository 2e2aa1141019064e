"""可见性过滤与空容器省略"""

from .. import config
from .snapshot import DomNode
from .types import Visuals
from .units import parse_number


def is_skipped_tag(node: DomNode) -> bool:
    """脚本/样式/嵌入媒体/矢量图形等标签总是跳过"""
    return node.tag.upper() in config.SKIP_TAGS


def is_visible(node: DomNode) -> bool:
    """节点（连同子树）是否参与输出

    排除条件（任一）:
    - display: none
    - visibility: hidden
    - opacity 恰好为 0
    - 渲染盒宽或高为 0
    """
    style = node.style
    if (style.display or "").strip().lower() == "none":
        return False
    if (style.visibility or "").strip().lower() == "hidden":
        return False
    if parse_number(style.opacity, default=1.0) == 0:
        return False
    if node.rect.width <= 0 or node.rect.height <= 0:
        return False
    return True


def should_include(node: DomNode) -> bool:
    return not is_skipped_tag(node) and is_visible(node)


def is_empty_wrapper(visuals: Visuals, child_count: int) -> bool:
    """过滤子节点后：无子节点、无填充、无圆角、无描边、无阴影"""
    return child_count == 0 and visuals.is_empty
