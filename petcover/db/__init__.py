"""
Database module for the Benefit Adjudication Engine.

Exports database connection utilities.
"""

from petcover.db.connection import (
    check_db_connection,
    close_db_connection,
    get_engine,
    get_session,
    get_session_maker,
    init_db,
)

__all__ = [
    "get_engine",
    "get_session_maker",
    "get_session",
    "init_db",
    "close_db_connection",
    "check_db_connection",
]
