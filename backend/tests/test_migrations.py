"""Tests for the alembic migration chain."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"


def _config(db_path: Path) -> Config:
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")
    return cfg


class TestMigrations:
    def test_upgrade_creates_payment_links(self, tmp_path: Path) -> None:
        db_path = tmp_path / "migrate.db"
        command.upgrade(_config(db_path), "head")

        inspector = inspect(create_engine(f"sqlite:///{db_path}"))
        assert "payment_links" in inspector.get_table_names()
        columns = {col["name"] for col in inspector.get_columns("payment_links")}
        assert {
            "link_id",
            "customer_email",
            "status",
            "expires_at",
            "masked_card_number",
            "processor_customer_id",
        } <= columns
        indexes = {ix["name"] for ix in inspector.get_indexes("payment_links")}
        assert "ix_payment_links_status" in indexes

    def test_downgrade_drops_payment_links(self, tmp_path: Path) -> None:
        db_path = tmp_path / "migrate.db"
        cfg = _config(db_path)
        command.upgrade(cfg, "head")
        command.downgrade(cfg, "base")

        inspector = inspect(create_engine(f"sqlite:///{db_path}"))
        assert "payment_links" not in inspector.get_table_names()
