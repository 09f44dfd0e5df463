"""Database utilities - engine and session."""

from src.app.core.db.engine import dispose_engine, get_engine
from src.app.core.db.session import SessionFactory, get_session

__all__ = [
    "SessionFactory",
    "dispose_engine",
    "get_engine",
    "get_session",
]
