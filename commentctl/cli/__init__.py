"""CLI entry point: commentctl comment, commentctl db."""

import logging
import sys
from importlib import metadata

import typer
from pydantic import ValidationError

from commentctl.cli.comment import StoreFactory, build_comment_app
from commentctl.cli.db import build_db_app
from commentctl.cli.state import CliState
from commentctl.config import ConfigLoadError, load_config


def _print_version_and_exit(value: bool) -> None:
    """Print installed package version and exit."""
    if not value:
        return
    try:
        version = metadata.version("commentctl")
    except metadata.PackageNotFoundError:
        version = "unknown"
    typer.echo(f"commentctl {version}")
    raise typer.Exit(0)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _root_callback(
    ctx: typer.Context,
    config: str = typer.Option("", "--config", help="Path to commentctl.yaml."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_print_version_and_exit,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    try:
        loaded = load_config(config or None)
    except (ConfigLoadError, ValidationError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2) from e
    _configure_logging("DEBUG" if verbose else loaded.logging.level)
    ctx.obj = CliState(config=loaded)


def build_app(store_factory: StoreFactory | None = None) -> typer.Typer:
    """Build the commentctl app; `store_factory` replaces the SQL store (tests)."""
    root = typer.Typer(
        name="commentctl",
        help="Manage comments in a CMS database.",
        no_args_is_help=True,
    )
    root.callback()(_root_callback)
    root.add_typer(build_comment_app(store_factory), name="comment")
    root.add_typer(build_db_app(), name="db")
    return root


app = build_app()


def main() -> None:
    """CLI entry point."""
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
