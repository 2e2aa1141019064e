"""Figify - 把渲染后的网页转换为 Figma 图层树并发送给插件"""

__version__ = "0.1.0"
