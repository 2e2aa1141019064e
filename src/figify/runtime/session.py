"""Session - 集中持有 Bridge、服务器和截图服务

职责：
- 构造并持有 FigmaBridge / BridgeServer / CaptureService
- 提供导入操作（截图导入、图层导入、连接检查、调试提取）
- 生命周期：start() 启动 WebSocket 服务器，close() 全部释放

每个 Session 独立持有自己的连接状态，测试可以创建全新的 Session。
"""

import asyncio
import re
from dataclasses import dataclass, field

from .. import config
from ..bridge import BridgeServer, FigmaBridge
from ..capture import CaptureService
from ..extraction.types import LayerTree, Screenshot
from ..summary import summarize_layers
from ..telemetry import get_logger

logger = get_logger(__name__)

NOT_CONNECTED_HINT = (
    "Figma plugin is not connected. Please open Figma and run the figify plugin first."
)

_SCRIPT_EXT_RE = re.compile(r"\.(tsx?|jsx?)$")


@dataclass
class ImportResult:
    """导入操作结果"""
    success: bool
    message: str
    frame_id: str = ""
    layers_created: int = 0
    screenshots: list[Screenshot] = field(default_factory=list)
    layer_trees: list[LayerTree] = field(default_factory=list)


def extract_page_name(source: str) -> str:
    """从源路径/URL 推导页面名

    - @/app/journey/page.tsx → journey
    - app/about.tsx → about
    - 其他原样返回
    """
    if "/" in source:
        parts = source.split("/")
        for index, part in enumerate(parts):
            if part in ("page.tsx", "page.ts") and index > 0:
                return parts[index - 1]
        name = _SCRIPT_EXT_RE.sub("", parts[-1])
        return name or source
    return source


def resolve_url(source: str) -> str:
    """把源解析为 URL（完整 URL 或 localhost 简写）

    Raises:
        ValueError: 无法解析（启动本地开发服务器不在本工具职责内）
    """
    source = source.strip()
    if source.startswith(("http://", "https://", "file://")):
        return source
    if re.match(r"^(localhost|127\.0\.0\.1)(:\d+)?(/|$)", source):
        return f"http://{source}"
    raise ValueError(f"Cannot resolve source to a URL: {source}")


class Session:
    """运行时会话"""

    def __init__(
        self,
        bridge: FigmaBridge | None = None,
        capture: CaptureService | None = None,
        server: BridgeServer | None = None,
    ):
        self.bridge = bridge or FigmaBridge()
        self.capture = capture or CaptureService()
        self.server = server or BridgeServer(self.bridge)

    async def start(self) -> None:
        await self.server.start()
        logger.info("[Session] Started")

    async def close(self) -> None:
        await self.capture.close()
        await self.server.stop()
        logger.info("[Session] Closed")

    async def wait_for_connection(self, timeout: float | None = None) -> bool:
        """等待插件连接

        Returns:
            超时前是否已连接
        """
        if timeout is None:
            timeout = config.PLUGIN_CONNECT_WAIT_SECONDS
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not self.bridge.is_connected():
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(0.1)
        return True

    def check_connection(self) -> ImportResult:
        if self.bridge.is_connected():
            return ImportResult(True, "Figma plugin is connected and ready.")
        return ImportResult(False, NOT_CONNECTED_HINT)

    async def import_page(self, source: str, viewports: list[str]) -> ImportResult:
        """截图导入：每个视口一张整页截图，发送 CREATE_FRAME"""
        if not self.bridge.is_connected():
            return ImportResult(False, NOT_CONNECTED_HINT)

        page_name = extract_page_name(source)
        try:
            url = resolve_url(source)
            screenshots = []
            for viewport in viewports:
                screenshots.append(await self.capture.capture(url, viewport))
        except Exception as e:
            logger.error(f"[Session] Capture failed: {e}")
            return ImportResult(False, f"Error importing page: {e}")

        result = await self.bridge.create_frame(page_name, screenshots)
        if not result.success:
            return ImportResult(
                False, f"Failed to create Figma frame: {result.error}", screenshots=screenshots
            )

        return ImportResult(
            True,
            f'Successfully imported "{page_name}" to Figma!\n\n'
            f"Frame ID: {result.frame_id}\n"
            f"Viewports: {', '.join(viewports)}\n"
            f"Screenshots: {len(screenshots)}",
            frame_id=result.frame_id,
            screenshots=screenshots,
        )

    async def import_page_as_layers(self, source: str, viewports: list[str]) -> ImportResult:
        """图层导入：每个视口一棵图层树，发送 CREATE_LAYERS"""
        if not self.bridge.is_connected():
            return ImportResult(False, NOT_CONNECTED_HINT)

        page_name = extract_page_name(source)
        try:
            url = resolve_url(source)
            layer_trees = []
            for viewport in viewports:
                captured = await self.capture.capture_with_layers(url, viewport, page_name)
                layer_trees.append(captured.layer_tree)
        except Exception as e:
            logger.error(f"[Session] Capture failed: {e}")
            return ImportResult(False, f"Error importing page as layers: {e}")

        result = await self.bridge.create_layers(page_name, layer_trees)
        if not result.success:
            return ImportResult(
                False, f"Failed to create Figma layers: {result.error}", layer_trees=layer_trees
            )

        return ImportResult(
            True,
            f'Successfully imported "{page_name}" as editable layers to Figma!\n\n'
            f"Frame ID: {result.frame_id}\n"
            f"Viewports: {', '.join(viewports)}\n"
            f"Layers created: {result.layers_created}",
            frame_id=result.frame_id,
            layers_created=result.layers_created,
            layer_trees=layer_trees,
        )

    async def capture_screenshots(self, url: str, viewports: list[str]) -> ImportResult:
        """只截图，不发送"""
        try:
            screenshots = [await self.capture.capture(url, viewport) for viewport in viewports]
        except Exception as e:
            logger.error(f"[Session] Capture failed: {e}")
            return ImportResult(False, f"Error capturing screenshot: {e}")

        lines = "\n".join(f"- {s.viewport}: {s.width}x{s.height}" for s in screenshots)
        return ImportResult(
            True, f"Captured {len(screenshots)} screenshot(s):\n{lines}", screenshots=screenshots
        )

    async def debug_extraction(self, url: str) -> ImportResult:
        """提取桌面视口图层树并输出摘要"""
        try:
            captured = await self.capture.capture_with_layers(url, "desktop", "debug")
        except Exception as e:
            logger.error(f"[Session] Extraction failed: {e}")
            return ImportResult(False, f"Error extracting DOM: {e}")

        tree = captured.layer_tree
        summary = summarize_layers(tree.root_layer)
        return ImportResult(
            True,
            f"DOM Extraction Debug for {url}\n\n"
            f"Layer Tree (max depth {config.DEBUG_SUMMARY_MAX_DEPTH}):\n{summary}\n"
            f"Root layer dimensions: {tree.width}x{tree.height}",
            layer_trees=[tree],
        )


def create_session(request_timeout: float | None = None, port: int | None = None) -> Session:
    """构造一个新 Session（尚未启动）"""
    bridge = FigmaBridge(request_timeout=request_timeout)
    server = BridgeServer(bridge, port=port)
    return Session(bridge=bridge, capture=CaptureService(), server=server)
