"""FigmaBridge - 与 Figma 插件之间的请求/响应关联引擎

状态机:
    DISCONNECTED --(插件连接)--> CONNECTED
    CONNECTED --(关闭/传输错误)--> DISCONNECTED

同一时间只有一个插件连接有效，新连接直接取代旧连接。

请求生命周期:
1. 未连接 → 立即返回失败结果，不做任何 IO，不登记 pending
2. 生成关联 ID，登记 pending（future + 超时句柄），发送
3. 先到者结算（至多一次）:
   - 同 ID 响应 → 成功
   - 同 ID ERROR → 失败（携带远端消息）
   - 超时 → 失败（超时专用消息），移除 pending
断开连接不会主动让 pending 失败，由各自的超时结算。

PING 立即回 PONG，不占用关联槽位。
"""

import asyncio
import itertools
import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from pydantic import ValidationError

from .. import config
from ..telemetry import get_logger, metrics
from .protocol import (
    BridgeMessage,
    MessageType,
    create_frame_payload,
    create_layers_payload,
    pong,
)

logger = get_logger(__name__)

NOT_CONNECTED_MESSAGE = "Figma plugin is not connected"
TIMEOUT_MESSAGE = "Request timed out waiting for Figma plugin response"


class BridgeError(Exception):
    """Bridge 请求失败基类"""


class BridgeNotConnectedError(BridgeError):
    """插件未连接"""


class BridgeTimeoutError(BridgeError):
    """远端在超时时间内没有响应"""


class BridgeRemoteError(BridgeError):
    """远端明确返回错误"""


class BridgeSendError(BridgeError):
    """传输层发送失败"""


class ConnectionState(Enum):
    """连接状态"""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class FailureKind(Enum):
    """失败类型，便于调用方区分"没响应"和"被拒绝" """
    NOT_CONNECTED = "not_connected"
    TIMEOUT = "timeout"
    REMOTE = "remote"
    SEND = "send"


_FAILURE_KINDS: dict[type, FailureKind] = {
    BridgeNotConnectedError: FailureKind.NOT_CONNECTED,
    BridgeTimeoutError: FailureKind.TIMEOUT,
    BridgeRemoteError: FailureKind.REMOTE,
    BridgeSendError: FailureKind.SEND,
}


class BridgePeer(Protocol):
    """远端连接（FastAPI WebSocket 满足此接口）"""

    async def send_text(self, data: str) -> None: ...


@dataclass
class BridgeResult:
    """请求结果"""
    success: bool
    frame_id: str = ""
    layers_created: int = 0
    error: str | None = None
    failure: FailureKind | None = None

    @classmethod
    def from_error(cls, error: BridgeError) -> "BridgeResult":
        return cls(success=False, error=str(error), failure=_FAILURE_KINDS.get(type(error)))

    @classmethod
    def from_payload(cls, payload: dict) -> "BridgeResult":
        return cls(
            success=True,
            frame_id=str(payload.get("frameId") or ""),
            layers_created=_count(payload.get("layersCreated")),
        )


def _count(value: Any) -> int:
    """远端上报的图层数，无法解析时为 0"""
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError, OverflowError):
        return 0


@dataclass
class PendingRequest:
    """一个等待中的请求"""
    message_type: str
    future: asyncio.Future
    timer: asyncio.TimerHandle


class FigmaBridge:
    """Figma 插件桥接引擎

    不关心传输细节：由 server 在连接建立/断开时调用 attach/detach，
    收到文本帧时调用 handle_message。
    """

    def __init__(self, request_timeout: float | None = None):
        """初始化

        Args:
            request_timeout: 请求超时（秒），None 使用 config.REQUEST_TIMEOUT_SECONDS
        """
        self._request_timeout = (
            request_timeout if request_timeout is not None else config.REQUEST_TIMEOUT_SECONDS
        )
        self._peer: BridgePeer | None = None
        self._pending: dict[str, PendingRequest] = {}
        self._message_seq = itertools.count(1)

    # === 连接状态 ===

    @property
    def state(self) -> ConnectionState:
        return ConnectionState.CONNECTED if self._peer is not None else ConnectionState.DISCONNECTED

    def is_connected(self) -> bool:
        return self._peer is not None

    @property
    def peer(self) -> BridgePeer | None:
        return self._peer

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def request_timeout(self) -> float:
        return self._request_timeout

    def attach(self, peer: BridgePeer) -> None:
        """插件连接建立，新连接取代旧连接"""
        if self._peer is not None and self._peer is not peer:
            logger.info("[FigmaBridge] New plugin connection supersedes the previous one")
        self._peer = peer
        logger.info("[FigmaBridge] Figma plugin connected")

    def detach(self, peer: BridgePeer | None = None, reason: str = "closed") -> None:
        """连接关闭或出错

        Args:
            peer: 断开的连接；不是当前连接时忽略（已被新连接取代）
            reason: 日志用原因
        """
        if peer is not None and peer is not self._peer:
            return
        if self._peer is None:
            return
        self._peer = None
        logger.info(f"[FigmaBridge] Figma plugin disconnected ({reason})")

    # === 请求 ===

    def _generate_message_id(self) -> str:
        return f"msg_{next(self._message_seq)}_{int(time.time() * 1000)}"

    async def request(self, message_type: MessageType, payload: dict) -> dict:
        """发送请求并等待关联响应

        Returns:
            响应 payload

        Raises:
            BridgeNotConnectedError: 未连接（不做 IO，不登记 pending）
            BridgeTimeoutError: 超时
            BridgeRemoteError: 远端返回错误
            BridgeSendError: 发送失败
        """
        peer = self._peer
        if peer is None:
            metrics.inc("bridge.not_connected")
            raise BridgeNotConnectedError(NOT_CONNECTED_MESSAGE)

        loop = asyncio.get_running_loop()
        message_id = self._generate_message_id()
        future: asyncio.Future = loop.create_future()
        timer = loop.call_later(self._request_timeout, self._expire, message_id)
        self._pending[message_id] = PendingRequest(
            message_type=message_type.value,
            future=future,
            timer=timer,
        )
        metrics.inc("bridge.requests", {"type": message_type.value})
        metrics.gauge("bridge.pending", len(self._pending))

        message = BridgeMessage(id=message_id, type=message_type.value, payload=payload)
        try:
            await peer.send_text(message.to_json())
        except Exception as e:
            logger.error(f"[FigmaBridge] Failed to send {message_type.value}: {e}")
            self._settle(message_id, error=BridgeSendError(f"Failed to send message: {e}"))
            self.detach(peer, reason="send error")
        else:
            logger.debug(f"[FigmaBridge] Sent {message_type.value} ({message_id})")

        try:
            return await future
        finally:
            # 调用方被取消时清理残留条目
            entry = self._pending.pop(message_id, None)
            if entry is not None:
                entry.timer.cancel()
                metrics.gauge("bridge.pending", len(self._pending))

    async def create_frame(self, name: str, screenshots: list) -> BridgeResult:
        """以截图创建 Frame（CREATE_FRAME）"""
        return await self._request_result(
            MessageType.CREATE_FRAME, create_frame_payload(name, screenshots)
        )

    async def create_layers(self, name: str, layer_trees: list) -> BridgeResult:
        """以图层树创建可编辑图层（CREATE_LAYERS）"""
        return await self._request_result(
            MessageType.CREATE_LAYERS, create_layers_payload(name, layer_trees)
        )

    async def _request_result(self, message_type: MessageType, payload: dict) -> BridgeResult:
        try:
            response = await self.request(message_type, payload)
        except BridgeError as e:
            return BridgeResult.from_error(e)
        return BridgeResult.from_payload(response)

    # === 结算 ===

    def _settle(self, message_id: str, result: Any = None, error: BridgeError | None = None) -> bool:
        """结算一个 pending 请求（幂等：已移除的 ID 直接返回 False）"""
        entry = self._pending.pop(message_id, None)
        metrics.gauge("bridge.pending", len(self._pending))
        if entry is None:
            return False
        entry.timer.cancel()
        if entry.future.done():
            return False
        if error is not None:
            entry.future.set_exception(error)
        else:
            entry.future.set_result(result)
        return True

    def _expire(self, message_id: str) -> None:
        """超时回调"""
        if self._settle(message_id, error=BridgeTimeoutError(TIMEOUT_MESSAGE)):
            metrics.inc("bridge.timeouts")
            logger.warning(f"[FigmaBridge] Request {message_id} timed out")

    # === 入站消息 ===

    async def handle_message(self, data: str, peer: BridgePeer | None = None) -> None:
        """处理一条入站文本帧

        无法解析的信封记录日志后丢弃，不影响其他请求。

        Args:
            data: 原始文本
            peer: 消息来源（PING 回复到这里），None 使用当前连接
        """
        try:
            message = BridgeMessage.model_validate(json.loads(data))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            metrics.inc("bridge.dropped")
            logger.error(f"[FigmaBridge] Failed to parse message: {e}")
            return

        message_type = message.message_type
        if message_type == MessageType.PING:
            await self._reply_pong(message, peer or self._peer)
        elif message_type is not None and message_type.is_response:
            self._handle_response(message)
        elif message_type == MessageType.ERROR:
            self._handle_error(message)
        else:
            logger.debug(f"[FigmaBridge] Ignoring message type {message.type}")

    async def _reply_pong(self, message: BridgeMessage, peer: BridgePeer | None) -> None:
        if peer is None:
            return
        try:
            await peer.send_text(pong(message.id).to_json())
        except Exception as e:
            logger.error(f"[FigmaBridge] Failed to answer PING: {e}")

    def _handle_response(self, message: BridgeMessage) -> None:
        body = message.body
        if body.get("success") is False:
            error = BridgeRemoteError(str(body.get("error") or "Figma plugin reported failure"))
            if self._settle(message.id, error=error):
                metrics.inc("bridge.remote_errors")
            return
        if self._settle(message.id, result=body):
            metrics.inc("bridge.responses")
        else:
            logger.debug(f"[FigmaBridge] No pending request for {message.id}")

    def _handle_error(self, message: BridgeMessage) -> None:
        if isinstance(message.payload, str) and message.payload:
            error_text = message.payload
        else:
            body = message.body
            error_text = str(body.get("error") or body.get("message") or "Unknown error")
        if self._settle(message.id, error=BridgeRemoteError(error_text)):
            metrics.inc("bridge.remote_errors")
            logger.warning(f"[FigmaBridge] Plugin reported error for {message.id}: {error_text}")
