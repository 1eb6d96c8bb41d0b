"""commentctl db: schema migrations."""

import typer

from commentctl.cli.db_migrate import migrate_command


def build_db_app() -> typer.Typer:
    db_app = typer.Typer(name="db", help="Database operations: migrate.", no_args_is_help=True)
    db_app.command("migrate")(migrate_command)
    return db_app
