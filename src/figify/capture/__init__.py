"""Capture 模块 - 浏览器渲染、截图与图层提取"""

from .service import (
    CaptureResult,
    CaptureService,
    capture_layers_from_page,
    extract_page,
    snapshot_page,
)
from .viewports import ViewportConfig, get_all_viewports, get_viewport

__all__ = [
    "CaptureService",
    "CaptureResult",
    "capture_layers_from_page",
    "extract_page",
    "snapshot_page",
    "ViewportConfig",
    "get_viewport",
    "get_all_viewports",
]
