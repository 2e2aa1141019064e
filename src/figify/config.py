"""Figify 配置

配置分为以下几类：
- Bridge 配置：WebSocket 端口、请求超时
- 提取配置：标签集合、字体默认值、圆角上限
- 截图配置：视口、页面加载超时
- 日志配置
"""

import os

# === Bridge 配置 ===
BRIDGE_HOST = "127.0.0.1"  # 插件只从本机连接
BRIDGE_PORT = 19407  # Figma 插件连接的固定端口
REQUEST_TIMEOUT_SECONDS = 30.0  # CREATE_FRAME / CREATE_LAYERS 等待响应超时（秒）
PLUGIN_CONNECT_WAIT_SECONDS = 60.0  # CLI import 等待插件连接的最长时间（秒）

# === 提取配置 ===
# 可以成为 TEXT 图层的标签（需同时含直接文本）
TEXT_TAGS = frozenset({
    "P", "H1", "H2", "H3", "H4", "H5", "H6",
    "SPAN", "A", "LABEL", "BUTTON", "LI", "TD", "TH",
    "STRONG", "EM", "B", "I", "SMALL", "CODE", "PRE",
})
# 无论样式如何都跳过的标签（脚本、样式、嵌入媒体、矢量图形）
SKIP_TAGS = frozenset({
    "SCRIPT", "STYLE", "NOSCRIPT", "TEMPLATE",
    "SVG", "IFRAME", "VIDEO", "AUDIO", "CANVAS",
    "MAP", "OBJECT", "EMBED",
})
CORNER_RADIUS_MAX = 1000  # "9999px" 全圆角写法的上限
ROOT_LAYER_ID = "root"  # 合成根节点的保留 ID
LAYER_ID_PREFIX = "layer_"

DEFAULT_FONT_FAMILY = "Inter"
DEFAULT_FONT_SIZE = 16.0
DEFAULT_FONT_WEIGHT = 400

# === 截图配置 ===
VIEWPORTS: dict[str, dict[str, object]] = {
    "desktop": {"name": "Desktop", "width": 1440, "height": 900},
    "mobile": {"name": "Mobile", "width": 375, "height": 812},
}
PAGE_LOAD_TIMEOUT_MS = 30000  # 页面加载超时（毫秒）
NETWORK_IDLE_TIMEOUT_MS = 5000  # 网络空闲等待（毫秒），超时可接受
SETTLE_DELAY_MS = 500  # 等待动画稳定（毫秒）
DEVICE_SCALE_FACTOR = 2  # Retina 截图

# === 调试配置 ===
DEBUG_SUMMARY_MAX_DEPTH = 5  # debug_extraction 输出的最大深度

# === 日志配置 ===
LOG_LEVEL = os.environ.get("FIGIFY_LOG_LEVEL", "INFO")  # 日志级别

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集
