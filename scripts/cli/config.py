"""CLI configuration: database URL and paths."""

import os
from pathlib import Path

# Project root (parent of scripts/)
ROOT = Path(__file__).resolve().parent.parent.parent

DATABASE_URL_ENV = "LEDGER_DATABASE_URL"
DEFAULT_DB_URL = f"sqlite:///{ROOT / 'agency_ledger.db'}"


def database_url(override: str | None = None) -> str:
    """Command-line value, then LEDGER_DATABASE_URL, then a local SQLite file."""
    return override or os.environ.get(DATABASE_URL_ENV) or DEFAULT_DB_URL
