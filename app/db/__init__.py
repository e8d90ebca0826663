"""
Database module - SQLAlchemy engine, sessions and declarative base.
"""
from app.db.postgres import Base, get_db, get_db_session, init_db, test_postgres_connection

__all__ = [
    "Base",
    "get_db",
    "get_db_session",
    "init_db",
    "test_postgres_connection",
]
