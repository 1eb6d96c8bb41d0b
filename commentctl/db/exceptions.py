"""Database errors raised by commentctl.

Messages name hosts, users and databases but never credentials.
"""


class DatabaseError(Exception):
    """Base class for commentctl database failures."""


class ConfigurationError(DatabaseError):
    """No database URL configured, or one commentctl cannot drive."""


class DatabaseConnectionError(DatabaseError):
    """The database server could not be reached or refused the connection."""

    def __init__(self, host: str, port: int, message: str) -> None:
        self.host = host
        self.port = port
        self.reason = message
        super().__init__(f"Connection failed to {host}:{port}: {message}")


class AuthenticationError(DatabaseError):
    """The server rejected the configured credentials."""

    def __init__(self, user: str, database: str) -> None:
        self.user = user
        self.database = database
        super().__init__(f"Authentication failed for user '{user}' accessing database '{database}'")


class QueryError(DatabaseError):
    """A statement failed on a reachable database (missing table, bad data, constraint)."""

    def __init__(self, message: str) -> None:
        self.reason = message
        super().__init__(f"Database query failed: {message}")
