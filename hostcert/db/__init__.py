"""Database package — async SQLAlchemy engine, session factory, Base."""
from hostcert.db.base import Base, async_session_factory, engine, get_session_factory

__all__ = ["Base", "async_session_factory", "engine", "get_session_factory"]
