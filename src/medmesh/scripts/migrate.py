# src/medmesh/scripts/migrate.py
"""Apply Alembic migrations up to head for the configured database."""
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from medmesh.core.settings import settings

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def run_upgrade_head(url: str | None = None) -> None:
    """Upgrade the schema at ``url`` (default: the effective settings URL)."""
    cfg = Config(os.path.join(MIGRATIONS_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", url or settings.effective_database_url)
    command.upgrade(cfg, "head")


if __name__ == "__main__":
    run_upgrade_head()
