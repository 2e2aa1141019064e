"""Pytest 配置"""

import pytest

from figify.extraction.snapshot import ComputedStyle, DomNode, Rect
from figify.telemetry import metrics


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def make_node():
    """构造快照节点的工厂

    用法: make_node("DIV", rect=(0, 0, 100, 50), style={"display": "flex"}, children=[...])
    """

    def _make(
        tag: str = "DIV",
        rect: tuple[float, float, float, float] = (0, 0, 100, 100),
        style: dict | None = None,
        text: str = "",
        children: list[DomNode] | None = None,
        element_id: str = "",
        class_name: str = "",
    ) -> DomNode:
        x, y, width, height = rect
        return DomNode(
            tag=tag,
            rect=Rect(x=x, y=y, width=width, height=height),
            style=ComputedStyle.from_dict(style or {}),
            element_id=element_id,
            class_name=class_name,
            text=text,
            children=children or [],
        )

    return _make
