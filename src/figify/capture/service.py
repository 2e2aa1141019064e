"""截图服务 - 用 Playwright 渲染页面，截图并提取图层树

浏览器只负责渲染和执行 SNAPSHOT_SCRIPT；图层树的全部转换逻辑在
figify.extraction 中完成。
"""

import base64
from contextlib import asynccontextmanager
from dataclasses import dataclass

from playwright.async_api import Browser, Error as PlaywrightError, Page, async_playwright

from .. import config
from ..extraction import DomNode, ExtractionResult, extract_layers
from ..extraction.snapshot import PAGE_DIMENSIONS_SCRIPT, SNAPSHOT_SCRIPT
from ..extraction.types import LayerTree, Screenshot
from ..telemetry import get_logger
from .viewports import get_viewport

logger = get_logger(__name__)


@dataclass
class CaptureResult:
    """一次带图层的捕获"""
    layer_tree: LayerTree
    screenshot: Screenshot
    layer_count: int


async def snapshot_page(page) -> DomNode:
    """在页面中执行快照脚本并解析为 DomNode"""
    raw = await page.evaluate(SNAPSHOT_SCRIPT)
    return DomNode.from_dict(raw or {})


async def extract_page(page) -> ExtractionResult:
    """页面 → 图层树"""
    logger.info("[DOMExtractor] Extracting DOM structure")
    body = await snapshot_page(page)
    return extract_layers(body)


async def page_dimensions(page) -> tuple[int, int]:
    """渲染后的文档滚动尺寸"""
    dims = await page.evaluate(PAGE_DIMENSIONS_SCRIPT) or {}
    return int(dims.get("width", 0)), int(dims.get("height", 0))


async def full_page_screenshot(page, viewport_key: str) -> Screenshot:
    buffer = await page.screenshot(full_page=True, type="png")
    width, height = await page_dimensions(page)
    return Screenshot(
        viewport=viewport_key,
        width=width,
        height=height,
        data=base64.b64encode(buffer).decode("ascii"),
    )


class CaptureService:
    """Playwright 截图服务

    浏览器懒启动，close() 释放。
    """

    def __init__(self, headless: bool = True):
        self._headless = headless
        self._playwright = None
        self._browser: Browser | None = None

    async def initialize(self) -> None:
        if self._browser is None:
            logger.info("[CaptureService] Launching browser")
            playwright = await async_playwright().start()
            try:
                self._browser = await playwright.chromium.launch(headless=self._headless)
            except Exception:
                await playwright.stop()
                raise
            self._playwright = playwright

    async def close(self) -> None:
        if self._browser is not None:
            logger.info("[CaptureService] Closing browser")
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    @asynccontextmanager
    async def open_page(self, url: str, viewport_key: str):
        """打开页面并等待稳定，退出时关闭 context"""
        await self.initialize()
        viewport = get_viewport(viewport_key)
        logger.info(
            f"[CaptureService] Capturing {viewport.name} "
            f"({viewport.width}x{viewport.height}) for {url}"
        )

        context = await self._browser.new_context(
            viewport={"width": viewport.width, "height": viewport.height},
            device_scale_factor=config.DEVICE_SCALE_FACTOR,
        )
        try:
            page = await context.new_page()
            await page.goto(
                url, wait_until="domcontentloaded", timeout=config.PAGE_LOAD_TIMEOUT_MS
            )
            await self._wait_for_network_idle(page)
            await page.wait_for_timeout(config.SETTLE_DELAY_MS)
            yield page
        finally:
            await context.close()

    async def _wait_for_network_idle(self, page: Page) -> None:
        try:
            await page.wait_for_load_state("networkidle", timeout=config.NETWORK_IDLE_TIMEOUT_MS)
        except PlaywrightError:
            # 长轮询页面可能永远不空闲
            logger.warning("[CaptureService] Network idle timeout - continuing anyway")

    async def capture(self, url: str, viewport_key: str) -> Screenshot:
        """整页截图"""
        async with self.open_page(url, viewport_key) as page:
            return await full_page_screenshot(page, viewport_key)

    async def capture_with_layers(
        self, url: str, viewport_key: str, page_name: str
    ) -> CaptureResult:
        """提取图层树，同时截图作为兜底"""
        async with self.open_page(url, viewport_key) as page:
            return await capture_layers_from_page(page, viewport_key, page_name)


async def capture_layers_from_page(page, viewport_key: str, page_name: str) -> CaptureResult:
    """在已打开的页面上提取图层树并截图"""
    extraction = await extract_page(page)
    screenshot = await full_page_screenshot(page, viewport_key)
    layer_tree = LayerTree(
        name=f"{page_name} - {viewport_key}",
        viewport=viewport_key,
        width=screenshot.width,
        height=screenshot.height,
        root_layer=extraction.root,
        screenshot_fallback=screenshot.data,
    )
    return CaptureResult(
        layer_tree=layer_tree,
        screenshot=screenshot,
        layer_count=extraction.layer_count,
    )
