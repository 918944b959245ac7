# Database configuration and session management
from .base import Base
from .session import async_engine, async_session_maker, get_async_session

__all__ = ["Base", "async_engine", "async_session_maker", "get_async_session"]
