from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .quiz_generator import Difficulty, coerce_difficulty
from .time_model import Period, Time

DB_PATH_ENV = "CLOCK_TUTOR_DB_PATH"
LOG_LEVEL_ENV = "CLOCK_TUTOR_LOG_LEVEL"
DISABLE_TTS_ENV = "CLOCK_TUTOR_DISABLE_TTS"
SNAP_TO_FIVE_ENV = "CLOCK_TUTOR_SNAP_TO_FIVE"
DEFAULT_DIFFICULTY_ENV = "CLOCK_TUTOR_DEFAULT_DIFFICULTY"


def default_db_path() -> Path:
    explicit = os.environ.get(DB_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".clock_tutor.sqlite3"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True, slots=True)
class TutorConfig:
    db_path: Path = field(default_factory=default_db_path)
    log_level: str = "INFO"
    quiz_question_count: int = 3
    default_time: Time = Time(3, 0, Period.PM)
    default_difficulty: Difficulty = Difficulty.MEDIUM
    snap_to_five: bool = True
    tts_enabled: bool = True

    @classmethod
    def from_env(cls) -> "TutorConfig":
        return cls(
            db_path=default_db_path(),
            log_level=os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper() or "INFO",
            default_difficulty=coerce_difficulty(os.environ.get(DEFAULT_DIFFICULTY_ENV, "medium")),
            snap_to_five=_env_flag(SNAP_TO_FIVE_ENV, True),
            tts_enabled=not _env_flag(DISABLE_TTS_ENV, False),
        )
