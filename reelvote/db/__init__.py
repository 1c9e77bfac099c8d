"""Database package."""
from reelvote.db.session import engine, SessionLocal, get_db, get_db_context, create_tables
from reelvote.db.base import Base

__all__ = ["engine", "SessionLocal", "get_db", "get_db_context", "create_tables", "Base"]
