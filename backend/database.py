"""Database bootstrap helpers."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from core import DEFAULT_DB_PATH

# SQL script creating every table used by the application.
SCHEMA_PATH = Path(__file__).resolve().parents[1] / "data" / "workout_schema.sql"


def init_database(db_path: Path = DEFAULT_DB_PATH) -> Path:
    """Create ``db_path`` (and its tables) if they do not exist yet.

    The schema only uses ``CREATE ... IF NOT EXISTS`` statements so calling
    this on an existing database is harmless.
    """

    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    script = SCHEMA_PATH.read_text(encoding="utf-8")
    with sqlite3.connect(str(path)) as conn:
        conn.executescript(script)
    return path
