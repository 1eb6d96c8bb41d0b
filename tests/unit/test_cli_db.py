"""Unit tests for commentctl db CLI (migrate)."""

from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine, inspect
from typer.testing import CliRunner

from commentctl.cli import app
from commentctl.cli.db_migrate import DATABASE_URL_ATTRIBUTE, PACKAGED_MIGRATIONS, alembic_config
from commentctl.db import ConfigurationError

runner = CliRunner()


def test_db_migrate_without_url():
    """migrate without COMMENTCTL_DATABASE_URL exits 2."""
    result = runner.invoke(app, ["db", "migrate"])
    assert result.exit_code == 2
    assert "COMMENTCTL_DATABASE_URL" in result.output


def test_db_migrate_rejects_blank_target(monkeypatch):
    """migrate with blank --target should fail fast."""
    monkeypatch.setenv("COMMENTCTL_DATABASE_URL", "sqlite:///comments.db")
    with patch("commentctl.cli.db_migrate.command.upgrade") as mock_upgrade:
        result = runner.invoke(app, ["db", "migrate", "--target", "   "])
    assert result.exit_code == 2
    mock_upgrade.assert_not_called()


def test_db_migrate_rejects_unsupported_url():
    result = runner.invoke(app, ["db", "migrate", "--database-url", "oracle://u:p@host/db"])
    assert result.exit_code == 2
    assert "postgresql://" in result.output


def test_db_migrate_dry_run_only_inspects(monkeypatch):
    monkeypatch.setenv("COMMENTCTL_DATABASE_URL", "  sqlite:///comments.db  ")
    with patch("commentctl.cli.db_migrate.command.current") as mock_current, patch(
        "commentctl.cli.db_migrate.command.heads"
    ) as mock_heads, patch("commentctl.cli.db_migrate.command.upgrade") as mock_upgrade:
        result = runner.invoke(app, ["db", "migrate", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "--dry-run" in result.output
    assert mock_current.call_count == 1
    assert mock_heads.call_count == 1
    mock_upgrade.assert_not_called()


def test_db_migrate_upgrades_to_target(monkeypatch):
    monkeypatch.setenv("COMMENTCTL_DATABASE_URL", "postgresql://ignored/db")
    with patch("commentctl.cli.db_migrate.command.upgrade") as mock_upgrade:
        result = runner.invoke(
            app, ["db", "migrate", "--database-url", "sqlite:///comments.db", "--target", "001_comment_tables"]
        )
    assert result.exit_code == 0, result.output
    assert "Migrations applied." in result.output
    cfg, revision = mock_upgrade.call_args[0]
    assert revision == "001_comment_tables"
    assert cfg.attributes[DATABASE_URL_ATTRIBUTE] == "sqlite+aiosqlite:///comments.db"


def test_db_migrate_falls_back_to_config_file(tmp_path: Path):
    (tmp_path / "commentctl.yaml").write_text("database:\n  url: mysql://blog@db/blog\n", encoding="utf-8")
    with patch("commentctl.cli.db_migrate.command.upgrade") as mock_upgrade:
        result = runner.invoke(app, ["db", "migrate"])
    assert result.exit_code == 0, result.output
    assert mock_upgrade.call_args[0][0].attributes[DATABASE_URL_ATTRIBUTE] == "mysql+aiomysql://blog@db/blog"


def test_alembic_config_without_ini_uses_packaged_migrations(tmp_path: Path):
    cfg = alembic_config("sqlite:///comments.db", str(tmp_path / "missing.ini"))
    assert cfg.config_file_name is None
    assert cfg.get_main_option("script_location") == PACKAGED_MIGRATIONS


def test_db_migrate_creates_tables_from_empty_cwd(tmp_path: Path):
    db_file = tmp_path / "site.db"
    result = runner.invoke(app, ["db", "migrate", "--database-url", f"sqlite:///{db_file}"])
    assert result.exit_code == 0, result.output
    assert "Migrations applied." in result.output

    engine = create_engine(f"sqlite:///{db_file}")
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert {"posts", "comments", "commentmeta", "alembic_version"} <= tables


def test_alembic_config_rejects_sync_driver():
    with pytest.raises(ConfigurationError):
        alembic_config("postgresql+psycopg2://u@h/db")
