"""commentctl db migrate: bring the posts/comments/commentmeta schema to a revision."""

import logging
from pathlib import Path

import typer
from alembic import command
from alembic.config import Config

from commentctl.cli.state import cli_state, resolve_database_url
from commentctl.db import ConfigurationError
from commentctl.db.engine import normalize_url

logger = logging.getLogger(__name__)

# Key under Config.attributes read by migrations/env.py.
DATABASE_URL_ATTRIBUTE = "commentctl_database_url"
PACKAGED_MIGRATIONS = "commentctl:migrations"


def alembic_config(database_url: str, alembic_ini: str = "alembic.ini") -> Config:
    """Alembic Config pointing migrations/env.py at `database_url` (normalized to its async driver).

    Without an ini file the migrations shipped inside the package are used.
    """
    if Path(alembic_ini).is_file():
        cfg = Config(alembic_ini)
    else:
        logger.debug("%s not found, using packaged migrations", alembic_ini)
        cfg = Config()
        cfg.set_main_option("script_location", PACKAGED_MIGRATIONS)
    cfg.attributes[DATABASE_URL_ATTRIBUTE] = normalize_url(database_url)
    return cfg


def migrate_command(
    ctx: typer.Context,
    target: str = typer.Option("head", "--target", "-t", help="Revision to upgrade to (default: head)."),
    database_url: str = typer.Option("", "--database-url", help="Database URL (default: COMMENTCTL_DATABASE_URL)."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show current and head revisions without applying."),
    alembic_ini: str = typer.Option("alembic.ini", "--alembic-ini", help="Path to alembic.ini."),
) -> None:
    """Run schema migrations (Alembic upgrade)."""
    revision = target.strip()
    if not revision:
        typer.echo("Error: --target must be a non-empty revision string.", err=True)
        raise typer.Exit(2)
    try:
        cfg = alembic_config(resolve_database_url(database_url, cli_state(ctx).config), alembic_ini)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2) from e
    if dry_run:
        command.current(cfg)
        command.heads(cfg)
        typer.echo("--dry-run: run without --dry-run to apply migrations.")
        return
    logger.info("upgrading schema to %s", revision)
    command.upgrade(cfg, revision)
    typer.echo("Migrations applied.")
