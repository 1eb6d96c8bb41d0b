"""Per-invocation CLI state and database URL resolution."""

import os
from dataclasses import dataclass, field

import typer

from commentctl.config import CommentCtlConfig, load_config
from commentctl.db import ConfigurationError
from commentctl.db.engine import DATABASE_URL_ENV


@dataclass
class CliState:
    """Settings loaded by the root callback and stored on the Typer context."""

    config: CommentCtlConfig = field(default_factory=load_config)


def cli_state(ctx: typer.Context) -> CliState:
    obj = ctx.find_root().obj
    return obj if isinstance(obj, CliState) else CliState()


def resolve_database_url(database_url: str, config: CommentCtlConfig) -> str:
    """--database-url, then COMMENTCTL_DATABASE_URL, then the config file.

    Raises:
        ConfigurationError: none of them is set.
    """
    url = database_url.strip() or os.environ.get(DATABASE_URL_ENV, "").strip() or config.database.url.strip()
    if not url:
        raise ConfigurationError(f"Set {DATABASE_URL_ENV} or pass --database-url.")
    return url
