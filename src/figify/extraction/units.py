"""CSS 数值解析工具"""

import math
import re

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def parse_number(value: str | None, default: float = 0.0) -> float:
    """取字符串中的第一个数值（"12.5px" -> 12.5），失败返回 default"""
    if not value:
        return default
    match = _NUMBER_RE.search(value)
    if not match:
        return default
    try:
        number = float(match.group(0))
    except ValueError:
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def parse_numbers(value: str | None) -> list[float]:
    """取字符串中所有数值"""
    if not value:
        return []
    return [float(m) for m in _NUMBER_RE.findall(value)]


def round_px(value: float) -> int:
    """四舍五入到整数像素（.5 向上取整）"""
    return int(math.floor(value + 0.5))


def non_negative_px(value: str | None) -> int:
    """解析为四舍五入后的非负整数像素"""
    return max(0, round_px(parse_number(value)))
