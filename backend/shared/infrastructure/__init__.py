"""
Infrastructure module: Database sessions and transactions (db.py).
"""

from shared.infrastructure.db import (
    SessionLocal,
    get_db,
    get_db_context,
    get_engine,
    safe_commit,
)

__all__ = [
    "SessionLocal",
    "get_db",
    "get_db_context",
    "get_engine",
    "safe_commit",
]
