"""Storage of the single active live session.

The session snapshot is written to two redundant JSON recovery files so a
crash while writing one of them still leaves a readable copy behind.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from backend.workout_session import Session

RECOVERY_BASE = Path(__file__).resolve().parents[1] / "data" / "session_recovery"


class SessionStore:
    """Keep at most one :class:`Session` across application restarts."""

    def __init__(self, base: Path = RECOVERY_BASE) -> None:
        base = Path(base)
        self.paths = (
            base.with_name(base.name + "_1.json"),
            base.with_name(base.name + "_2.json"),
        )

    def get(self) -> Session | None:
        """Return the stored session or ``None``.

        The second recovery file is consulted when the first one is missing
        or unreadable.
        """

        for path in self.paths:
            if not path.exists():
                continue
            try:
                text = path.read_text(encoding="utf-8").strip()
                if not text:
                    continue
                return Session.from_dict(json.loads(text))
            except (OSError, ValueError, KeyError, TypeError):
                logging.warning("Unreadable session recovery file %s", path, exc_info=True)
                continue
        return None

    def put(self, session: Session) -> None:
        """Replace the stored session with ``session``."""

        payload = json.dumps(session.to_dict())
        self.paths[0].parent.mkdir(parents=True, exist_ok=True)
        for path in self.paths:
            path.write_text(payload, encoding="utf-8")

    def clear(self) -> None:
        for path in self.paths:
            try:
                path.unlink()
            except FileNotFoundError:
                pass

    def has_session(self) -> bool:
        return self.get() is not None
