"""颜色解析 - 把浏览器序列化的颜色字符串转换为归一化 RGBA

支持的写法（按优先级依次尝试）：
1. rgb(R G B / A)        现代空格语法
2. rgba(R, G, B, A)      传统逗号语法
3. oklab(L a b / A)
4. lab(L a b / A)        CIE-Lab, D65 白点
5. #rgb / #rrggbb / #rrggbbaa

parse_color 是全函数：无法识别或完全透明时返回 None，绝不抛异常。
"""

import re

from .types import Color

_NUM = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_ALPHA = rf"(?:\s*/\s*({_NUM}%?))?"

RGB_SPACE_RE = re.compile(
    rf"rgba?\(\s*({_NUM})\s+({_NUM})\s+({_NUM}){_ALPHA}\s*\)", re.IGNORECASE
)
RGB_COMMA_RE = re.compile(
    rf"rgba?\(\s*({_NUM})\s*,\s*({_NUM})\s*,\s*({_NUM})(?:\s*,\s*({_NUM}%?))?\s*\)",
    re.IGNORECASE,
)
OKLAB_RE = re.compile(
    rf"oklab\(\s*({_NUM}%?)\s+({_NUM})\s+({_NUM}){_ALPHA}\s*\)", re.IGNORECASE
)
# 不能匹配 oklab( 里的 lab(
LAB_RE = re.compile(
    rf"(?<![a-z])lab\(\s*({_NUM}%?)\s+({_NUM})\s+({_NUM}){_ALPHA}\s*\)", re.IGNORECASE
)
HEX_RE = re.compile(r"#([0-9a-f]{8}|[0-9a-f]{6}|[0-9a-f]{3})(?![0-9a-f])", re.IGNORECASE)

# D65 参考白
_D65_X = 0.95047
_D65_Y = 1.0
_D65_Z = 1.08883
_LAB_EPSILON = 216 / 24389
_LAB_KAPPA = 24389 / 27


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _parse_alpha(raw: str | None) -> float:
    """解析 alpha，支持百分比；缺省为 1"""
    if raw is None:
        return 1.0
    if raw.endswith("%"):
        return _clamp(float(raw[:-1]) / 100)
    return _clamp(float(raw))


def _gamma_encode(channel: float) -> float:
    """线性 sRGB → gamma 校正 sRGB，先 clamp 避免负数开方"""
    channel = _clamp(channel)
    if channel <= 0.0031308:
        return 12.92 * channel
    return 1.055 * channel ** (1 / 2.4) - 0.055


def oklab_to_rgb(lightness: float, a: float, b: float) -> tuple[float, float, float]:
    """Oklab → sRGB，各通道 clamp 到 [0, 1]"""
    l_ = lightness + 0.3963377774 * a + 0.2158037573 * b
    m_ = lightness - 0.1055613458 * a - 0.0638541728 * b
    s_ = lightness - 0.0894841775 * a - 1.2914855480 * b

    l = l_ ** 3
    m = m_ ** 3
    s = s_ ** 3

    r = 4.0767416621 * l - 3.3077115913 * m + 0.2309699292 * s
    g = -1.2684380046 * l + 2.6097574011 * m - 0.3413193965 * s
    bl = -0.0041960863 * l - 0.7034186147 * m + 1.7076147010 * s
    return _gamma_encode(r), _gamma_encode(g), _gamma_encode(bl)


def _lab_f_inverse(t: float) -> float:
    cube = t ** 3
    return cube if cube > _LAB_EPSILON else (116 * t - 16) / _LAB_KAPPA


def lab_to_rgb(lightness: float, a: float, b: float) -> tuple[float, float, float]:
    """CIE-Lab (D65) → XYZ → sRGB，各通道 clamp 到 [0, 1]"""
    fy = (lightness + 16) / 116
    fx = fy + a / 500
    fz = fy - b / 200

    x = _D65_X * _lab_f_inverse(fx)
    if lightness > _LAB_KAPPA * _LAB_EPSILON:
        y = _D65_Y * fy ** 3
    else:
        y = _D65_Y * lightness / _LAB_KAPPA
    z = _D65_Z * _lab_f_inverse(fz)

    r = 3.2404542 * x - 1.5371385 * y - 0.4985314 * z
    g = -0.9692660 * x + 1.8760108 * y + 0.0415560 * z
    bl = 0.0556434 * x - 0.2040259 * y + 1.0572252 * z
    return _gamma_encode(r), _gamma_encode(g), _gamma_encode(bl)


def _from_rgb_match(match: re.Match) -> Color:
    r, g, b, alpha = match.groups()
    return Color(
        _clamp(float(r) / 255),
        _clamp(float(g) / 255),
        _clamp(float(b) / 255),
        _parse_alpha(alpha),
    )


def _from_oklab_match(match: re.Match) -> Color:
    raw_l, a, b, alpha = match.groups()
    # oklab 的 L 可以写成 0..1 或百分比
    lightness = float(raw_l[:-1]) / 100 if raw_l.endswith("%") else float(raw_l)
    r, g, bl = oklab_to_rgb(lightness, float(a), float(b))
    return Color(r, g, bl, _parse_alpha(alpha))


def _from_lab_match(match: re.Match) -> Color:
    raw_l, a, b, alpha = match.groups()
    # lab 的 L 范围 0..100，百分比同值
    lightness = float(raw_l[:-1]) if raw_l.endswith("%") else float(raw_l)
    r, g, bl = lab_to_rgb(lightness, float(a), float(b))
    return Color(r, g, bl, _parse_alpha(alpha))


def _from_hex_match(match: re.Match) -> Color:
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    r = int(digits[0:2], 16) / 255
    g = int(digits[2:4], 16) / 255
    b = int(digits[4:6], 16) / 255
    a = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
    return Color(r, g, b, a)


# 解析优先级
_GRAMMARS = (
    (RGB_SPACE_RE, _from_rgb_match),
    (RGB_COMMA_RE, _from_rgb_match),
    (OKLAB_RE, _from_oklab_match),
    (LAB_RE, _from_lab_match),
    (HEX_RE, _from_hex_match),
)


def _visible(color: Color | None) -> Color | None:
    if color is None or color.a <= 0:
        return None
    return color


def parse_color(value: str | None) -> Color | None:
    """解析颜色字符串

    Args:
        value: 计算样式里的颜色值

    Returns:
        Color；透明（transparent 或 alpha 为 0）或无法识别时返回 None
    """
    if not value:
        return None
    text = value.strip()
    if not text or text.lower() == "transparent":
        return None

    for pattern, convert in _GRAMMARS:
        match = pattern.search(text)
        if match:
            try:
                return _visible(convert(match))
            except (ValueError, OverflowError):
                return None
    return None


def find_colors(text: str) -> list[tuple[int, int, Color | None]]:
    """按从左到右的顺序找出文本中所有颜色子串

    同一位置多个写法都匹配时按解析优先级取第一个。

    Returns:
        (start, end, color) 列表；color 为 None 表示该子串是透明色
    """
    found: dict[int, tuple[int, Color | None]] = {}
    for pattern, convert in _GRAMMARS:
        for match in pattern.finditer(text):
            start = match.start()
            if start in found:
                continue
            if any(s < start < e for s, (e, _) in found.items()):
                continue
            try:
                color = _visible(convert(match))
            except (ValueError, OverflowError):
                color = None
            found[start] = (match.end(), color)
    return [(start, end, color) for start, (end, color) in sorted(found.items())]


def first_color_in(text: str | None) -> Color | None:
    """文本中第一个非透明颜色（从左到右）"""
    if not text:
        return None
    for _, _, color in find_colors(text):
        if color is not None:
            return color
    return None
