"""commentctl comment: create, delete, trash, spam, approve, count, status, last."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import typer

from commentctl.cli.output import render_outcome
from commentctl.cli.state import cli_state, resolve_database_url
from commentctl.comments.dispatcher import CommentCommandDispatcher
from commentctl.comments.outcome import Outcome
from commentctl.comments.store import CommentStore
from commentctl.comments.store_sql import SqlCommentStore
from commentctl.comments.transitions import TransitionVerb
from commentctl.config import CommentCtlConfig
from commentctl.db import ConfigurationError, DatabaseError, create_engine

logger = logging.getLogger(__name__)

# (raw --database-url value, "" when not given; effective config) -> store
StoreFactory = Callable[[str, CommentCtlConfig], CommentStore]
Operation = Callable[[CommentCommandDispatcher], Awaitable[Outcome]]


def create_sql_store(database_url: str, config: CommentCtlConfig) -> CommentStore:
    """Build a SqlCommentStore: --database-url, then COMMENTCTL_DATABASE_URL, then config file.

    Raises:
        ConfigurationError: no URL configured, or an unsupported one.
    """
    url = resolve_database_url(database_url, config)
    engine = create_engine(url, pool_size=config.database.pool_size, echo=config.database.echo)
    return SqlCommentStore.from_engine(engine)


async def log_status_change(comment_id: int, status: str) -> None:
    """Status listener leaving a moderation trail (approve/unapprove) in the log."""
    logger.info("comment %s status changed to %s", comment_id, status)


async def _run(store: CommentStore, operation: Operation) -> Outcome:
    try:
        return await operation(CommentCommandDispatcher(store))
    finally:
        await store.close()


def _execute(ctx: typer.Context, factory: StoreFactory, database_url: str, operation: Operation) -> None:
    state = cli_state(ctx)
    try:
        store = factory(database_url, state.config)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2) from e
    store.add_status_listener(log_status_change)
    try:
        outcome = asyncio.run(_run(store, operation))
    except DatabaseError as e:
        logger.debug("database failure", exc_info=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    if outcome.failed:
        logger.debug("command failed: %s", outcome.error)
    render_outcome(outcome, color=state.config.output.color)


def parse_field_args(args: list[str]) -> dict[str, str]:
    """Parse `--field=value` (or `--field value`) tokens into an ordered field map."""
    fields: dict[str, str] = {}
    i = 0
    while i < len(args):
        token = args[i]
        if not token.startswith("--") or len(token) <= 2:
            raise typer.BadParameter(f"expected --<field>=<value>, got {token!r}.")
        name, sep, value = token[2:].partition("=")
        if not sep:
            if i + 1 >= len(args) or args[i + 1].startswith("--"):
                raise typer.BadParameter(f"missing value for --{name}.")
            value = args[i + 1]
            i += 1
        fields[name] = value
        i += 1
    return fields


def _database_url_option() -> Any:
    return typer.Option("", "--database-url", help="Database URL (default: COMMENTCTL_DATABASE_URL).")


def _id_argument(help_text: str) -> Any:
    return typer.Argument(..., metavar="<id>", help=help_text)


def _make_create(factory: StoreFactory) -> Callable[..., None]:
    def create_command(
        ctx: typer.Context,
        porcelain: bool = typer.Option(False, "--porcelain", help="Output just the new comment id."),
        database_url: str = _database_url_option(),
    ) -> None:
        fields = parse_field_args(list(ctx.args))
        _execute(ctx, factory, database_url, lambda d: d.create(fields, porcelain=porcelain))

    return create_command


def _make_delete(factory: StoreFactory) -> Callable[..., None]:
    def delete_command(
        ctx: typer.Context,
        comment_id: str = _id_argument("The ID of the comment to delete."),
        force: bool = typer.Option(False, "--force", help="Skip the trash bin."),
        database_url: str = _database_url_option(),
    ) -> None:
        _execute(ctx, factory, database_url, lambda d: d.delete(comment_id, force=force))

    return delete_command


def _make_transition(verb: TransitionVerb) -> Callable[[StoreFactory], Callable[..., None]]:
    def make(factory: StoreFactory) -> Callable[..., None]:
        def transition_command(
            ctx: typer.Context,
            comment_id: str = _id_argument(f"The ID of the comment to {verb.value}."),
            database_url: str = _database_url_option(),
        ) -> None:
            _execute(ctx, factory, database_url, lambda d: d.transition(verb, comment_id))

        return transition_command

    return make


def _make_approve(factory: StoreFactory) -> Callable[..., None]:
    def approve_command(
        ctx: typer.Context,
        comment_id: str = _id_argument("The ID of the comment to approve."),
        database_url: str = _database_url_option(),
    ) -> None:
        _execute(ctx, factory, database_url, lambda d: d.approve(comment_id))

    return approve_command


def _make_unapprove(factory: StoreFactory) -> Callable[..., None]:
    def unapprove_command(
        ctx: typer.Context,
        comment_id: str = _id_argument("The ID of the comment to unapprove."),
        database_url: str = _database_url_option(),
    ) -> None:
        _execute(ctx, factory, database_url, lambda d: d.unapprove(comment_id))

    return unapprove_command


def _make_count(factory: StoreFactory) -> Callable[..., None]:
    def count_command(
        ctx: typer.Context,
        post_id: str | None = typer.Argument(
            None, metavar="[<post-id>]", help="The ID of the post to count comments in."
        ),
        database_url: str = _database_url_option(),
    ) -> None:
        _execute(ctx, factory, database_url, lambda d: d.count(post_id))

    return count_command


def _make_status(factory: StoreFactory) -> Callable[..., None]:
    def status_command(
        ctx: typer.Context,
        comment_id: str = _id_argument("The ID of the comment to check."),
        database_url: str = _database_url_option(),
    ) -> None:
        _execute(ctx, factory, database_url, lambda d: d.status(comment_id))

    return status_command


def _make_last(factory: StoreFactory) -> Callable[..., None]:
    def last_command(
        ctx: typer.Context,
        id_only: bool = typer.Option(False, "--id", help="Output just the last comment id."),
        full: bool = typer.Option(False, "--full", help="Output complete comment information."),
        database_url: str = _database_url_option(),
    ) -> None:
        _execute(ctx, factory, database_url, lambda d: d.last(id_only=id_only, full=full))

    return last_command


@dataclass(frozen=True)
class CommandSpec:
    """One row of the comment command table."""

    name: str
    help: str
    make: Callable[[StoreFactory], Callable[..., None]]
    context_settings: dict[str, Any] = field(default_factory=dict)


COMMENT_COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec(
        "create",
        "Insert a comment: --<field>=<value> pairs (comment_post_ID required).",
        _make_create,
        {"allow_extra_args": True, "ignore_unknown_options": True},
    ),
    CommandSpec("delete", "Delete a comment.", _make_delete),
    CommandSpec("trash", "Trash a comment.", _make_transition(TransitionVerb.TRASH)),
    CommandSpec("untrash", "Untrash a comment.", _make_transition(TransitionVerb.UNTRASH)),
    CommandSpec("spam", "Mark a comment as spam.", _make_transition(TransitionVerb.SPAM)),
    CommandSpec("unspam", "Unmark a comment as spam.", _make_transition(TransitionVerb.UNSPAM)),
    CommandSpec("approve", "Approve a comment.", _make_approve),
    CommandSpec("unapprove", "Unapprove a comment.", _make_unapprove),
    CommandSpec("count", "Count comments, on the whole site or on a given post.", _make_count),
    CommandSpec("status", "Get status of a comment.", _make_status),
    CommandSpec("last", "Get the last approved comment.", _make_last),
)


def build_comment_app(
    store_factory: StoreFactory | None = None,
    commands: tuple[CommandSpec, ...] = COMMENT_COMMANDS,
) -> typer.Typer:
    """Build the `comment` Typer app from a command table."""
    factory = store_factory or create_sql_store
    comment_app = typer.Typer(name="comment", help="Manage comments.", no_args_is_help=True)
    for entry in commands:
        comment_app.command(entry.name, help=entry.help, context_settings=entry.context_settings or None)(
            entry.make(factory)
        )
    return comment_app
