# mypy: ignore-errors
"""Run the Alembic migrations against a throwaway SQLite file."""

from alembic import command
from sqlalchemy import create_engine, inspect

from loadout_hub.db.session import Base
from loadout_hub.scripts.migrate import build_config


def test_upgrade_creates_model_tables_and_downgrade_removes_them(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("ALEMBIC_URL", raising=False)
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = build_config()
    cfg.set_main_option("sqlalchemy.url", url)

    command.upgrade(cfg, "head")
    engine = create_engine(url)
    try:
        tables = set(inspect(engine).get_table_names())
        assert set(Base.metadata.tables) <= tables
        assert "alembic_version" in tables

        command.downgrade(cfg, "base")
        assert set(inspect(engine).get_table_names()) == {"alembic_version"}
    finally:
        engine.dispose()
