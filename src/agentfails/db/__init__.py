# src/agentfails/db/__init__.py
"""Engine, session factory and declarative base for the Agent Fails schema."""

from .session import Base, SessionLocal, create_tables, enable_sqlite_savepoints, get_db, utcnow

__all__ = ["Base", "SessionLocal", "create_tables", "enable_sqlite_savepoints", "get_db", "utcnow"]
