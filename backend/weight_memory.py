"""Per-exercise memory of previously used training loads.

Two values are kept for every exercise:

``last_weight``
    The most recent load ever recorded. Survives across sessions.
``last_session_weight``
    The most recent load recorded in the current session run. It is
    cleared whenever a new session starts or is reset and takes precedence
    when a default weight is suggested for the next set.
"""

from __future__ import annotations

import sqlite3
import time
from pathlib import Path

from core import DEFAULT_DB_PATH


class WeightMemory:
    """SQLite backed weight memory keyed by exercise id."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH) -> None:
        self.db_path = Path(db_path)

    def _fetch(self, column: str, exercise_id: str) -> float | None:
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {column} FROM weight_memory WHERE exercise_id = ?",
                (exercise_id,),
            )
            row = cursor.fetchone()
        return row[0] if row else None

    def get_last_weight(self, exercise_id: str) -> float | None:
        return self._fetch("last_weight", exercise_id)

    def get_last_session_weight(self, exercise_id: str) -> float | None:
        return self._fetch("last_session_weight", exercise_id)

    def set_last_weight(self, exercise_id: str, weight: float) -> None:
        """Record ``weight`` as both the all-time and last-session load."""

        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(
                """
                INSERT INTO weight_memory (exercise_id, last_weight, last_session_weight, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(exercise_id) DO UPDATE SET
                    last_weight = excluded.last_weight,
                    last_session_weight = excluded.last_session_weight,
                    updated_at = excluded.updated_at
                """,
                (exercise_id, float(weight), float(weight), time.time()),
            )

    def suggest_weight(self, exercise_id: str) -> float | None:
        """Return the default load to pre-fill for ``exercise_id``."""

        session_weight = self.get_last_session_weight(exercise_id)
        if session_weight is not None:
            return session_weight
        return self.get_last_weight(exercise_id)

    def forget_session_weights(self) -> None:
        """Drop the last-session cache, keeping all-time values."""

        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute("UPDATE weight_memory SET last_session_weight = NULL")
