"""Unit tests for commentctl comment CLI commands."""

from __future__ import annotations

import asyncio
import logging

import pytest
import typer
from typer.testing import CliRunner

from commentctl.cli import build_app
from commentctl.cli.comment import COMMENT_COMMANDS, build_comment_app, create_sql_store, parse_field_args
from commentctl.comments.store_inmemory import InMemoryCommentStore
from commentctl.comments.store_sql import SqlCommentStore
from commentctl.config import CommentCtlConfig

runner = CliRunner()


@pytest.fixture
def app(memory_store: InMemoryCommentStore) -> typer.Typer:
    return build_app(store_factory=lambda _url, _config: memory_store)


def _seed(store: InMemoryCommentStore, make_fields, **overrides: str) -> int:
    comment_id = asyncio.run(store.insert(make_fields(**overrides)))
    assert comment_id is not None
    return comment_id


def test_comment_commands_registered_from_table() -> None:
    names = [entry.name for entry in COMMENT_COMMANDS]
    assert names == [
        "create",
        "delete",
        "trash",
        "untrash",
        "spam",
        "unspam",
        "approve",
        "unapprove",
        "count",
        "status",
        "last",
    ]
    comment_app = build_comment_app(store_factory=lambda _url, _config: InMemoryCommentStore())
    assert [c.name for c in comment_app.registered_commands] == names


def test_create_prints_success(app, memory_store) -> None:
    result = runner.invoke(
        app, ["comment", "create", "--comment_post_ID=15", "--comment_content=hello blog", "--comment_author=cli"]
    )
    assert result.exit_code == 0, result.output
    assert "Success: Inserted comment 1." in result.output
    comment = asyncio.run(memory_store.get_comment(1))
    assert comment is not None
    assert comment.comment_author == "cli"


def test_create_porcelain_prints_only_id(app) -> None:
    result = runner.invoke(app, ["comment", "create", "--comment_post_ID", "15", "--porcelain"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "1"


def test_create_unknown_post_exits_one(app) -> None:
    result = runner.invoke(app, ["comment", "create", "--comment_post_ID=999"])
    assert result.exit_code == 1
    assert "Error: Cannot find post 999" in result.output


def test_create_rejects_positional_tokens(app) -> None:
    result = runner.invoke(app, ["comment", "create", "comment_post_ID=15"])
    assert result.exit_code == 2


def test_delete_force(app, memory_store, make_fields) -> None:
    comment_id = _seed(memory_store, make_fields)
    result = runner.invoke(app, ["comment", "delete", str(comment_id), "--force"])
    assert result.exit_code == 0, result.output
    assert f"Success: Deleted comment {comment_id}." in result.output
    assert asyncio.run(memory_store.get_comment(comment_id)) is None


def test_delete_missing_exits_one(app) -> None:
    result = runner.invoke(app, ["comment", "delete", "31"])
    assert result.exit_code == 1
    assert "Error: Failed deleting comment 31" in result.output


@pytest.mark.parametrize(
    ("command", "message"),
    [
        ("trash", "Trashed comment 1."),
        ("spam", "Marked as spam comment 1."),
    ],
)
def test_transition_commands(app, memory_store, make_fields, command, message) -> None:
    _seed(memory_store, make_fields)
    result = runner.invoke(app, ["comment", command, "1"])
    assert result.exit_code == 0, result.output
    assert f"Success: {message}" in result.output


@pytest.mark.parametrize("command", ["trash", "untrash", "spam", "unspam"])
def test_transition_commands_fail_on_missing_comment(app, command) -> None:
    result = runner.invoke(app, ["comment", command, "5"])
    assert result.exit_code == 1
    assert "comment 5" in result.output
    assert "does not exist" not in result.output


def test_approve_missing_reports_literal_argument(app) -> None:
    result = runner.invoke(app, ["comment", "approve", "0x1"])
    assert result.exit_code == 1
    assert "Error: Comment with ID 0x1 does not exist." in result.output


def test_unapprove_then_status(app, memory_store, make_fields) -> None:
    _seed(memory_store, make_fields)
    result = runner.invoke(app, ["comment", "unapprove", "1"])
    assert result.exit_code == 0, result.output
    assert "Success: Unapproved comment 1" in result.output
    status = runner.invoke(app, ["comment", "status", "1"])
    assert status.output == "unapproved\n"


def test_status_prints_exactly_spam(app, memory_store, make_fields) -> None:
    _seed(memory_store, make_fields, comment_approved="spam")
    result = runner.invoke(app, ["comment", "status", "1"])
    assert result.exit_code == 0
    assert result.output == "spam\n"


def test_status_missing_exits_one(app) -> None:
    result = runner.invoke(app, ["comment", "status", "8"])
    assert result.exit_code == 1
    assert "Could not check status of comment 8." in result.output


def test_count_prints_total_last(app, memory_store, make_fields) -> None:
    _seed(memory_store, make_fields)
    _seed(memory_store, make_fields, post_id=42)
    site = runner.invoke(app, ["comment", "count"])
    assert site.exit_code == 0, site.output
    lines = site.output.strip().splitlines()
    assert lines[-1] == "total_comments:  2"

    scoped = runner.invoke(app, ["comment", "count", "42"])
    assert scoped.output.strip().splitlines()[-1] == "total_comments:  1"


def test_last_compact_and_full(app, memory_store, make_fields) -> None:
    _seed(memory_store, make_fields)
    compact = runner.invoke(app, ["comment", "last"])
    assert compact.exit_code == 0, compact.output
    lines = compact.output.strip().splitlines()
    assert lines[0] == "Last approved comment:"
    assert len(lines) == 6

    full = runner.invoke(app, ["comment", "last", "--full"])
    assert len(full.output.strip().splitlines()) == 16
    assert "comment_agent:" in full.output


def test_last_id_prints_id_and_exits_non_zero(app, memory_store, make_fields) -> None:
    _seed(memory_store, make_fields)
    _seed(memory_store, make_fields, minutes=5)
    result = runner.invoke(app, ["comment", "last", "--id"])
    assert result.exit_code == 1
    assert result.output.strip() == "2"


def test_missing_database_url_exits_two() -> None:
    result = runner.invoke(build_app(), ["comment", "status", "1"])
    assert result.exit_code == 2
    assert "COMMENTCTL_DATABASE_URL" in result.output


def test_unsupported_database_url_exits_two() -> None:
    result = runner.invoke(build_app(), ["comment", "count", "--database-url", "oracle://u:p@host/db"])
    assert result.exit_code == 2
    assert "Error:" in result.output


def test_create_sql_store_prefers_option_then_env(monkeypatch) -> None:
    monkeypatch.setenv("COMMENTCTL_DATABASE_URL", "sqlite:///from-env.db")
    store = create_sql_store("  sqlite:///from-option.db  ", CommentCtlConfig())
    try:
        assert isinstance(store, SqlCommentStore)
        assert str(store._engine.url).endswith("from-option.db")  # noqa: SLF001
    finally:
        asyncio.run(store.close())

    store = create_sql_store("", CommentCtlConfig())
    try:
        assert str(store._engine.url).endswith("from-env.db")  # noqa: SLF001
    finally:
        asyncio.run(store.close())


def test_parse_field_args_supports_both_forms() -> None:
    fields = parse_field_args(["--comment_post_ID=15", "--comment_author", "wp cli", "--comment_content=a=b"])
    assert fields == {"comment_post_ID": "15", "comment_author": "wp cli", "comment_content": "a=b"}


@pytest.mark.parametrize("args", [["plain"], ["--comment_author"], ["--"], ["--a", "--b=1"]])
def test_parse_field_args_rejects_malformed(args) -> None:
    with pytest.raises(typer.BadParameter):
        parse_field_args(args)


def test_unreachable_database_exits_one(tmp_path) -> None:
    url = f"sqlite:///{tmp_path}/missing-dir/comments.db"
    result = runner.invoke(build_app(), ["comment", "status", "1", "--database-url", url])
    assert result.exit_code == 1
    assert "Error: Connection failed to localhost:0" in result.output


@pytest.fixture
def migrated_url(tmp_path) -> str:
    url = f"sqlite:///{tmp_path}/site.db"
    result = runner.invoke(build_app(), ["db", "migrate", "--database-url", url])
    assert result.exit_code == 0, result.output
    return url


@pytest.mark.parametrize(
    ("command", "message"),
    [
        ("status", "Error: Could not check status of comment 99999999999999999999."),
        ("approve", "Error: Comment with ID 99999999999999999999 does not exist."),
        ("trash", "Error: Failed trashing comment 99999999999999999999"),
        ("delete", "Error: Failed deleting comment 99999999999999999999"),
    ],
)
def test_id_wider_than_bigint_is_a_missing_comment(migrated_url, command, message) -> None:
    result = runner.invoke(build_app(), ["comment", command, "99999999999999999999", "--database-url", migrated_url])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert message in result.output


def test_create_and_count_on_migrated_database(migrated_url) -> None:
    result = runner.invoke(
        build_app(), ["comment", "create", "--comment_post_ID=99999999999999999999", "--database-url", migrated_url]
    )
    assert result.exit_code == 1
    assert "Error: Cannot find post 99999999999999999999" in result.output

    count = runner.invoke(build_app(), ["comment", "count", "99999999999999999999", "--database-url", migrated_url])
    assert count.exit_code == 0, count.output
    assert count.output.strip().splitlines()[-1] == "total_comments:  0"


def test_unmigrated_database_reports_query_failure(tmp_path) -> None:
    url = f"sqlite:///{tmp_path}/empty.db"
    result = runner.invoke(build_app(), ["comment", "status", "1", "--database-url", url])
    assert result.exit_code == 1
    assert "Error: Database query failed: no such table: comments" in result.output
    assert "commentctl db migrate" in result.output
    assert "Connection failed" not in result.output


def test_approve_logs_moderation_change(app, memory_store, make_fields, caplog) -> None:
    _seed(memory_store, make_fields, comment_approved="0")
    caplog.set_level(logging.INFO, logger="commentctl.cli.comment")
    result = runner.invoke(app, ["comment", "approve", "1"])
    assert result.exit_code == 0, result.output
    assert "comment 1 status changed to approve" in caplog.messages
