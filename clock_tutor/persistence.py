from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .quiz_generator import Difficulty, coerce_difficulty

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
SETTINGS_VERSION = 1


@dataclass(frozen=True, slots=True)
class PersistedSettings:
    """The only slice of game state that survives a restart.

    Quiz questions, the word problem and the clock's current time are always
    regenerated fresh and never written here.
    """

    score: int = 0
    difficulty: Difficulty = Difficulty.MEDIUM
    sound_enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": SETTINGS_VERSION,
            "score": int(self.score),
            "difficulty": self.difficulty.value,
            "sound_enabled": bool(self.sound_enabled),
        }

    @classmethod
    def from_dict(cls, data: object) -> "PersistedSettings":
        if not isinstance(data, dict):
            return cls()
        return cls(
            score=max(0, _as_int(data.get("score"), 0)),
            difficulty=coerce_difficulty(data.get("difficulty")),
            sound_enabled=_as_bool(data.get("sound_enabled"), True),
        )


def _as_int(value: object, fallback: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return fallback


def _as_bool(value: object, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    return fallback


def open_db(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    _migrate(conn)
    return conn


def _utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def _migrate(conn: sqlite3.Connection) -> None:
    row = conn.execute("PRAGMA user_version;").fetchone()
    ver = int(row[0]) if row else 0
    if ver >= SCHEMA_VERSION:
        return

    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS setting (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")


class SettingsStore:
    """Key-value persistence of :class:`PersistedSettings` in SQLite."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PersistedSettings:
        if not self._path.exists():
            return PersistedSettings()
        try:
            conn = open_db(self._path)
            try:
                rows = conn.execute("SELECT key, value FROM setting").fetchall()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            logger.warning("could not read settings from %s: %s", self._path, exc)
            return PersistedSettings()

        data = {str(key): value for key, value in rows}
        settings = PersistedSettings.from_dict(data)
        logger.debug("loaded settings %s", settings)
        return settings

    def save(self, settings: PersistedSettings) -> bool:
        """Write ``settings``; returns False when the database is unwritable."""
        now = _utc_now_iso()
        payload = settings.to_dict()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            conn = open_db(self._path)
            try:
                with conn:
                    for key, value in payload.items():
                        conn.execute(
                            """
                            INSERT INTO setting(key, value, updated_at_utc)
                            VALUES (?, ?, ?)
                            ON CONFLICT(key) DO UPDATE SET
                                value = excluded.value,
                                updated_at_utc = excluded.updated_at_utc
                            """,
                            (key, _encode(value), now),
                        )
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as exc:
            logger.warning("could not save settings to %s: %s", self._path, exc)
            return False
        return True


def _encode(value: object) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)
