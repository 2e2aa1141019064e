"""视口配置"""

from dataclasses import dataclass

from .. import config


@dataclass(frozen=True)
class ViewportConfig:
    """一个视口"""
    key: str
    name: str
    width: int
    height: int


def get_viewport(key: str) -> ViewportConfig:
    """按 key（desktop / mobile）取视口

    Raises:
        KeyError: 未知视口
    """
    entry = config.VIEWPORTS[key]
    return ViewportConfig(
        key=key,
        name=str(entry["name"]),
        width=int(entry["width"]),
        height=int(entry["height"]),
    )


def get_all_viewports() -> list[ViewportConfig]:
    return [get_viewport(key) for key in config.VIEWPORTS]
