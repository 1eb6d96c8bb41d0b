"""Async engines for the comment database: URL checks, pooling, error mapping."""

import logging
import os

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from commentctl.db.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    QueryError,
)

logger = logging.getLogger(__name__)

DATABASE_URL_ENV = "COMMENTCTL_DATABASE_URL"

# backend name -> async driver
_ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "mysql": "mysql+aiomysql",
    "sqlite": "sqlite+aiosqlite",
}
_DEFAULT_PORTS = {"postgresql": 5432, "mysql": 3306}
_AUTH_FAILURE_MARKERS = ("password authentication failed", "access denied", "authentication failed")
_MISSING_TABLE_MARKERS = ("no such table", "does not exist", "doesn't exist")
_UNSUPPORTED_URL = "Database URL must be postgresql://, mysql:// or sqlite:// (optionally with async driver)."


def normalize_url(url: str) -> str:
    """Rewrite a supported URL onto its async driver.

    Raises:
        ConfigurationError: unparsable URL, other dialect, or a sync driver.
    """
    try:
        parsed = make_url(url.strip())
    except (ArgumentError, ValueError) as exc:
        raise ConfigurationError(_UNSUPPORTED_URL) from exc
    backend = parsed.get_backend_name()
    driver = _ASYNC_DRIVERS.get(backend)
    if driver is None or parsed.drivername not in (backend, driver):
        raise ConfigurationError(_UNSUPPORTED_URL)
    return parsed.set(drivername=driver).render_as_string(hide_password=False)


def _get_url(database_url: str | None) -> str:
    if database_url:
        return normalize_url(database_url)
    url = os.environ.get(DATABASE_URL_ENV, "").strip()
    if not url:
        raise ConfigurationError(f"Database URL not set. Set {DATABASE_URL_ENV} or pass database_url.")
    return normalize_url(url)


def create_engine(
    database_url: str | None = None,
    *,
    pool_size: int = 5,
    max_overflow: int = 5,
    pool_timeout: float = 30.0,
    pool_recycle: int = 1800,
    pool_pre_ping: bool = True,
    echo: bool = False,
) -> AsyncEngine:
    """Create an async engine for a PostgreSQL, MySQL or SQLite database.

    Args:
        database_url: Database URL. If None, uses COMMENTCTL_DATABASE_URL.
        pool_size: Connection pool size. SQLite engines keep SQLAlchemy's own pool.
        max_overflow: Extra connections beyond pool_size when busy.
        pool_timeout: Seconds to wait for a connection.
        pool_recycle: Seconds after which connections are recycled.
        pool_pre_ping: Ping connections before use.
        echo: Log SQL (for development).

    Raises:
        ConfigurationError: URL missing or invalid.
    """
    url = _get_url(database_url)
    if make_url(url).get_backend_name() == "sqlite":
        return create_async_engine(url, echo=echo)
    logger.debug("creating engine pool_size=%d max_overflow=%d", pool_size, max_overflow)
    return create_async_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        pool_pre_ping=pool_pre_ping,
        echo=echo,
    )


def _reason(exc: DBAPIError | OSError) -> str:
    orig = exc.orig if isinstance(exc, DBAPIError) else exc
    text = str(orig).strip()
    return text.splitlines()[0] if text else type(orig).__name__


def connection_error(exc: DBAPIError | OSError, url: URL | None) -> DatabaseError:
    """Map a driver-level connect failure to AuthenticationError or DatabaseConnectionError."""
    reason = _reason(exc)
    if url is None:
        return DatabaseConnectionError(host="unknown", port=0, message=reason)
    if any(marker in reason.lower() for marker in _AUTH_FAILURE_MARKERS):
        return AuthenticationError(user=url.username or "", database=url.database or "")
    port = url.port or _DEFAULT_PORTS.get(url.get_backend_name(), 0)
    return DatabaseConnectionError(host=url.host or "localhost", port=port, message=reason)


def query_error(exc: DBAPIError) -> QueryError:
    """Wrap a statement failure, keeping only the driver's first message line."""
    reason = _reason(exc)
    if any(marker in reason.lower() for marker in _MISSING_TABLE_MARKERS):
        reason += " (run `commentctl db migrate` first)"
    return QueryError(reason)
