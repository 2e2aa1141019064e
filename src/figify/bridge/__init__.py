"""Bridge 模块 - 与 Figma 插件的 WebSocket 请求/响应协议"""

from .engine import (
    BridgeError,
    BridgeNotConnectedError,
    BridgeRemoteError,
    BridgeResult,
    BridgeSendError,
    BridgeTimeoutError,
    ConnectionState,
    FailureKind,
    FigmaBridge,
)
from .protocol import BridgeMessage, MessageType
from .server import BridgeServer

__all__ = [
    "FigmaBridge",
    "BridgeServer",
    "BridgeResult",
    "BridgeMessage",
    "MessageType",
    "ConnectionState",
    "FailureKind",
    "BridgeError",
    "BridgeNotConnectedError",
    "BridgeTimeoutError",
    "BridgeRemoteError",
    "BridgeSendError",
]
