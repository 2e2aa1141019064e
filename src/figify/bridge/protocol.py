"""Bridge 协议 - 消息类型与信封

信封: {"id": str, "type": str, "payload": object}

方向:
- 出站: CREATE_FRAME (name + screenshots), CREATE_LAYERS (name + layers)
- 入站: FRAME_CREATED, LAYERS_CREATED, ERROR
- 双向: PING / PONG（payload 为空）
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MessageType(str, Enum):
    """协议消息类型"""
    CREATE_FRAME = "CREATE_FRAME"
    CREATE_LAYERS = "CREATE_LAYERS"
    FRAME_CREATED = "FRAME_CREATED"
    LAYERS_CREATED = "LAYERS_CREATED"
    ERROR = "ERROR"
    PING = "PING"
    PONG = "PONG"

    @property
    def is_response(self) -> bool:
        """是否是对出站请求的成功响应"""
        return self in {MessageType.FRAME_CREATED, MessageType.LAYERS_CREATED}


class BridgeMessage(BaseModel):
    """协议信封

    插件 UI 有时转发不带 payload 的扁平消息，此时其余顶层字段视为 payload。
    """

    id: str
    type: str
    payload: Any = Field(default=None)

    model_config = {"extra": "allow"}

    @property
    def message_type(self) -> MessageType | None:
        try:
            return MessageType(self.type)
        except ValueError:
            return None

    @property
    def body(self) -> dict:
        """消息体（兼容扁平消息）"""
        if isinstance(self.payload, dict):
            return self.payload
        return dict(self.model_extra or {})

    def to_json(self) -> str:
        return json.dumps({
            "id": self.id,
            "type": self.type,
            "payload": self.payload if self.payload is not None else {},
        })


def create_frame_payload(name: str, screenshots: list) -> dict:
    """CREATE_FRAME 消息体"""
    return {"name": name, "screenshots": [s.to_dict() for s in screenshots]}


def create_layers_payload(name: str, layer_trees: list) -> dict:
    """CREATE_LAYERS 消息体"""
    return {"name": name, "layers": [tree.to_dict() for tree in layer_trees]}


def pong(message_id: str) -> BridgeMessage:
    return BridgeMessage(id=message_id, type=MessageType.PONG.value, payload={})
