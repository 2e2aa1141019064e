"""Runtime 模块 - 会话与生命周期"""

from .session import ImportResult, Session, create_session, extract_page_name, resolve_url

__all__ = [
    "Session",
    "ImportResult",
    "create_session",
    "extract_page_name",
    "resolve_url",
]
