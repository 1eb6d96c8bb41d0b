"""commentctl database layer: Base, engine, session factory, exceptions."""

from commentctl.db.base import Base
from commentctl.db.engine import connection_error, create_engine, normalize_url, query_error
from commentctl.db.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    QueryError,
)
from commentctl.db.session import create_session_factory

__all__ = [
    "Base",
    "create_engine",
    "normalize_url",
    "connection_error",
    "query_error",
    "create_session_factory",
    "DatabaseError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "AuthenticationError",
    "QueryError",
]
