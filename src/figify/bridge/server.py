"""Bridge WebSocket 服务器 - Figma 插件通过固定端口连接"""

import asyncio

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from .. import config
from ..telemetry import get_logger
from .engine import FigmaBridge

logger = get_logger(__name__)


class BridgeServer:
    """WebSocket 服务器

    路由:
    - WS  /            插件连接（单一有效连接）
    - GET /api/status  连接状态与 pending 数量
    """

    def __init__(
        self,
        bridge: FigmaBridge,
        host: str | None = None,
        port: int | None = None,
    ):
        self.bridge = bridge
        self.host = host if host is not None else config.BRIDGE_HOST
        self.port = port if port is not None else config.BRIDGE_PORT
        self.app = FastAPI(title="Figify Bridge")
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task | None = None

        self._setup_routes()

    def _setup_routes(self):
        @self.app.websocket("/")
        async def plugin_endpoint(websocket: WebSocket):
            await websocket.accept()
            self.bridge.attach(websocket)
            reason = "closed"
            try:
                while True:
                    data = await websocket.receive_text()
                    await self.bridge.handle_message(data, peer=websocket)
            except WebSocketDisconnect:
                pass
            except Exception as e:
                reason = "error"
                logger.error(f"[BridgeServer] WebSocket error: {e}")
            finally:
                self.bridge.detach(websocket, reason=reason)

        @self.app.get("/api/status")
        async def status():
            """获取 Bridge 状态"""
            return {
                "state": self.bridge.state.value,
                "connected": self.bridge.is_connected(),
                "pending": self.bridge.pending_count,
            }

    @property
    def is_running(self) -> bool:
        return self._server is not None and self._server.started

    async def serve(self) -> None:
        """前台运行，直到被停止"""
        uvicorn_config = uvicorn.Config(
            self.app, host=self.host, port=self.port, log_level="warning"
        )
        self._server = uvicorn.Server(uvicorn_config)
        logger.info(f"[BridgeServer] WebSocket server listening on port {self.port}")
        await self._server.serve()

    async def start(self) -> None:
        """后台启动，等待端口开始监听"""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self.serve())
        while not self.is_running:
            if self._task.done():
                # 启动失败（例如端口被占用）时把异常抛给调用方
                self._task.result()
                raise RuntimeError(f"Bridge server exited before listening on port {self.port}")
            await asyncio.sleep(0.05)

    async def stop(self) -> None:
        """停止服务器并关闭当前插件连接"""
        peer = self.bridge.peer
        if isinstance(peer, WebSocket):
            try:
                await peer.close()
            except Exception as e:
                logger.debug(f"[BridgeServer] Close peer failed: {e}")
        self.bridge.detach(peer, reason="server stopped")

        if self._server is not None:
            self._server.should_exit = True
        if self._task is not None:
            try:
                await self._task
            except (asyncio.CancelledError, SystemExit):
                pass
            self._task = None
        self._server = None
        logger.info("[BridgeServer] WebSocket server stopped")
