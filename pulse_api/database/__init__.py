"""Database package for connection and session management."""

from pulse_api.database.database import (
    DatabaseConfig,
    dispose_engine,
    get_db,
    get_engine,
    get_session_factory,
    init_db,
)

__all__ = [
    "DatabaseConfig",
    "dispose_engine",
    "get_db",
    "get_engine",
    "get_session_factory",
    "init_db",
]
