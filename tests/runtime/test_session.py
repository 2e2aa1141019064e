"""Session 导入流程测试"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from figify.bridge import FigmaBridge
from figify.capture import CaptureResult
from figify.extraction.types import FrameLayer, LayerTree, Screenshot, TextLayer
from figify.runtime import Session, extract_page_name, resolve_url
from figify.runtime.session import NOT_CONNECTED_HINT


class AutoReplyPeer:
    """收到请求后立即以给定类型和 payload 回复"""

    def __init__(self, bridge: FigmaBridge, reply_type: str, payload: dict):
        self.bridge = bridge
        self.reply_type = reply_type
        self.payload = payload
        self.sent: list[dict] = []
        self._tasks: list[asyncio.Task] = []

    async def send_text(self, data: str) -> None:
        message = json.loads(data)
        self.sent.append(message)
        reply = json.dumps({"id": message["id"], "type": self.reply_type, "payload": self.payload})
        self._tasks.append(asyncio.create_task(self.bridge.handle_message(reply)))


def _layer_tree(name: str, viewport: str) -> LayerTree:
    root = FrameLayer(
        id="root", name="root", x=0, y=0, width=1440, height=900,
        children=[TextLayer(id="layer_1", name="h1", x=0, y=0, width=100, height=20, characters="Hello")],
    )
    return LayerTree(name=f"{name} - {viewport}", viewport=viewport, width=1440, height=900, root_layer=root)


def _make_capture():
    capture = MagicMock()

    async def fake_capture(url, viewport):
        return Screenshot(viewport=viewport, width=1440, height=3000, data="cG5n")

    async def fake_capture_with_layers(url, viewport, page_name):
        tree = _layer_tree(page_name, viewport)
        return CaptureResult(layer_tree=tree, screenshot=MagicMock(), layer_count=2)

    capture.capture = AsyncMock(side_effect=fake_capture)
    capture.capture_with_layers = AsyncMock(side_effect=fake_capture_with_layers)
    capture.close = AsyncMock()
    return capture


def _make_server():
    server = MagicMock()
    server.start = AsyncMock()
    server.stop = AsyncMock()
    return server


def _make_session(bridge: FigmaBridge | None = None, capture=None) -> Session:
    return Session(
        bridge=bridge or FigmaBridge(request_timeout=1.0),
        capture=capture or _make_capture(),
        server=_make_server(),
    )


class TestExtractPageName:
    """页面名推导"""

    @pytest.mark.parametrize("source,expected", [
        ("@/app/journey/page.tsx", "journey"),
        ("src/app/settings/page.ts", "settings"),
        ("app/about.tsx", "about"),
        ("components/Hero.jsx", "Hero"),
        ("http://localhost:3000/pricing", "pricing"),
        ("home", "home"),
    ])
    def test_names(self, source, expected):
        assert extract_page_name(source) == expected

    def test_trailing_slash_falls_back_to_source(self):
        assert extract_page_name("http://localhost:3000/") == "http://localhost:3000/"


class TestResolveUrl:
    """源 → URL"""

    @pytest.mark.parametrize("source,expected", [
        ("http://localhost:3000", "http://localhost:3000"),
        ("https://example.com/a", "https://example.com/a"),
        ("file:///tmp/page.html", "file:///tmp/page.html"),
        ("localhost:5173/about", "http://localhost:5173/about"),
        ("127.0.0.1:8000", "http://127.0.0.1:8000"),
    ])
    def test_resolves(self, source, expected):
        assert resolve_url(source) == expected

    def test_unresolvable(self):
        with pytest.raises(ValueError):
            resolve_url("@/app/journey/page.tsx")


class TestConnection:
    """连接检查"""

    def test_check_connection(self):
        session = _make_session()
        assert not session.check_connection().success
        assert session.check_connection().message == NOT_CONNECTED_HINT

        session.bridge.attach(MagicMock())
        assert session.check_connection().success

    @pytest.mark.asyncio
    async def test_wait_for_connection_times_out(self):
        session = _make_session()
        assert await session.wait_for_connection(0.05) is False

    @pytest.mark.asyncio
    async def test_wait_for_connection_succeeds(self):
        session = _make_session()
        asyncio.get_running_loop().call_later(0.05, session.bridge.attach, MagicMock())
        assert await session.wait_for_connection(1.0) is True

    @pytest.mark.asyncio
    async def test_start_and_close(self):
        session = _make_session()
        await session.start()
        await session.close()
        session.server.start.assert_awaited_once()
        session.server.stop.assert_awaited_once()
        session.capture.close.assert_awaited_once()


class TestImportPage:
    """截图导入"""

    @pytest.mark.asyncio
    async def test_not_connected_skips_capture(self):
        session = _make_session()
        result = await session.import_page("http://localhost:3000/home", ["desktop"])

        assert not result.success
        assert result.message == NOT_CONNECTED_HINT
        session.capture.capture.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success(self):
        bridge = FigmaBridge(request_timeout=1.0)
        peer = AutoReplyPeer(bridge, "FRAME_CREATED", {"frameId": "10:1"})
        bridge.attach(peer)
        session = _make_session(bridge)

        result = await session.import_page("http://localhost:3000/home", ["desktop", "mobile"])

        assert result.success
        assert result.frame_id == "10:1"
        assert "Frame ID: 10:1" in result.message
        assert "Viewports: desktop, mobile" in result.message
        assert len(result.screenshots) == 2

        payload = peer.sent[0]["payload"]
        assert payload["name"] == "home"
        assert [s["viewport"] for s in payload["screenshots"]] == ["desktop", "mobile"]

    @pytest.mark.asyncio
    async def test_remote_error(self):
        bridge = FigmaBridge(request_timeout=1.0)
        bridge.attach(AutoReplyPeer(bridge, "ERROR", {"error": "No page selected"}))
        session = _make_session(bridge)

        result = await session.import_page("http://localhost:3000/home", ["desktop"])
        assert not result.success
        assert result.message == "Failed to create Figma frame: No page selected"

    @pytest.mark.asyncio
    async def test_capture_failure(self):
        bridge = FigmaBridge(request_timeout=1.0)
        bridge.attach(AutoReplyPeer(bridge, "FRAME_CREATED", {}))
        capture = _make_capture()
        capture.capture.side_effect = RuntimeError("browser crashed")
        session = _make_session(bridge, capture)

        result = await session.import_page("http://localhost:3000", ["desktop"])
        assert not result.success
        assert result.message == "Error importing page: browser crashed"

    @pytest.mark.asyncio
    async def test_unresolvable_source(self):
        bridge = FigmaBridge(request_timeout=1.0)
        bridge.attach(AutoReplyPeer(bridge, "FRAME_CREATED", {}))
        session = _make_session(bridge)

        result = await session.import_page("@/app/journey/page.tsx", ["desktop"])
        assert not result.success
        assert "Cannot resolve source" in result.message


class TestImportPageAsLayers:
    """图层导入"""

    @pytest.mark.asyncio
    async def test_success(self):
        bridge = FigmaBridge(request_timeout=1.0)
        peer = AutoReplyPeer(bridge, "LAYERS_CREATED", {"frameId": "2:3", "layersCreated": 4})
        bridge.attach(peer)
        session = _make_session(bridge)

        result = await session.import_page_as_layers("http://localhost:3000/about", ["mobile"])

        assert result.success
        assert result.layers_created == 4
        assert "Layers created: 4" in result.message
        layers = peer.sent[0]["payload"]["layers"]
        assert layers[0]["name"] == "about - mobile"
        assert layers[0]["rootLayer"]["children"][0]["characters"] == "Hello"

    @pytest.mark.asyncio
    async def test_timeout(self):
        bridge = FigmaBridge(request_timeout=0.1)
        bridge.attach(AsyncMock())
        session = _make_session(bridge)

        result = await session.import_page_as_layers("http://localhost:3000/about", ["desktop"])
        assert not result.success
        assert "timed out" in result.message


class TestDiagnostics:
    """只截图与调试提取"""

    @pytest.mark.asyncio
    async def test_capture_screenshots(self):
        session = _make_session()
        result = await session.capture_screenshots("http://localhost:3000", ["desktop", "mobile"])
        assert result.success
        assert "Captured 2 screenshot(s)" in result.message
        assert "- mobile: 1440x3000" in result.message

    @pytest.mark.asyncio
    async def test_debug_extraction(self):
        session = _make_session()
        result = await session.debug_extraction("http://localhost:3000")
        assert result.success
        assert "root (FRAME)" in result.message
        assert 'h1 (TEXT) - text: "Hello..."' in result.message
        assert "Root layer dimensions: 1440x900" in result.message

    @pytest.mark.asyncio
    async def test_debug_extraction_failure(self):
        capture = _make_capture()
        capture.capture_with_layers.side_effect = RuntimeError("boom")
        session = _make_session(capture=capture)
        result = await session.debug_extraction("http://localhost:3000")
        assert not result.success
        assert result.message == "Error extracting DOM: boom"
