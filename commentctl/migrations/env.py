"""Alembic environment for the commentctl schema (async engines only)."""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from commentctl.cli.db_migrate import DATABASE_URL_ATTRIBUTE
# Attach the comment tables to Base.metadata.
from commentctl.comments.store_sql import CommentMetaORM, CommentORM, PostORM  # noqa: F401
from commentctl.db import Base
from commentctl.db.engine import DATABASE_URL_ENV, normalize_url

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def _database_url() -> str:
    """URL set by `commentctl db migrate`, else COMMENTCTL_DATABASE_URL, else alembic.ini."""
    url = (
        config.attributes.get(DATABASE_URL_ATTRIBUTE)
        or os.environ.get(DATABASE_URL_ENV)
        or config.get_main_option("sqlalchemy.url")
    )
    if not url or not url.strip():
        raise RuntimeError(f"Set {DATABASE_URL_ENV} or sqlalchemy.url in alembic.ini for migrations.")
    return normalize_url(url)


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without connecting."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_on_connection(connection: Connection) -> None:
    # batch mode lets ALTERs run on SQLite
    context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    section = dict(config.get_section(config.config_ini_section) or {})
    section["sqlalchemy.url"] = _database_url()
    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_on_connection)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
