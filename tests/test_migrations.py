# tests/test_migrations.py
"""Tests for the migration and database bootstrap scripts."""

from pathlib import Path

import pytest
from alembic import command
from sqlalchemy import create_engine, inspect

from agentfails.db.session import Base
from agentfails.scripts.ensure_db import split_maintenance_url, to_libpq_url
from agentfails.scripts.migrate import build_config, run_upgrade_head


def test_upgrade_creates_every_model_table(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Migrating an empty database yields the same tables as the models."""
    monkeypatch.delenv("ALEMBIC_URL", raising=False)
    url = f"sqlite:///{tmp_path / 'migrated.db'}"

    run_upgrade_head(url)

    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert set(Base.metadata.tables) <= tables
    assert "alembic_version" in tables


def test_downgrade_drops_tables(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The initial revision can be rolled back."""
    monkeypatch.delenv("ALEMBIC_URL", raising=False)
    url = f"sqlite:///{tmp_path / 'rollback.db'}"
    config = build_config(url)

    command.upgrade(config, "head")
    command.downgrade(config, "base")

    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert not set(Base.metadata.tables) & tables


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgresql+psycopg://u:p@db:5432/fails", "postgresql://u:p@db:5432/fails"),
        ("'postgres://u@db/fails'", "postgresql://u@db/fails"),
    ],
)
def test_to_libpq_url(url: str, expected: str) -> None:
    assert to_libpq_url(url) == expected


@pytest.mark.parametrize("url", ["", "sqlite:///./agentfails.db"])
def test_to_libpq_url_rejects_non_postgres(url: str) -> None:
    with pytest.raises(ValueError):
        to_libpq_url(url)


def test_split_maintenance_url() -> None:
    maintenance, database = split_maintenance_url("postgresql+psycopg://u:p@db:5432/fails?sslmode=require")
    assert maintenance == "postgresql://u:p@db:5432/postgres?sslmode=require"
    assert database == "fails"
