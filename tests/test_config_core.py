from __future__ import annotations

import logging
from pathlib import Path

import pytest

from clock_tutor.config import TutorConfig, default_db_path
from clock_tutor.logging_config import configure_logging
from clock_tutor.quiz_generator import Difficulty
from clock_tutor.time_model import Period, Time


def test_defaults() -> None:
    config = TutorConfig(db_path=Path("x.sqlite3"))
    assert config.quiz_question_count == 3
    assert config.default_time == Time(3, 0, Period.PM)
    assert config.default_difficulty is Difficulty.MEDIUM
    assert config.snap_to_five is True
    assert config.tts_enabled is True


def test_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLOCK_TUTOR_DB_PATH", str(tmp_path / "custom.sqlite3"))
    monkeypatch.setenv("CLOCK_TUTOR_LOG_LEVEL", "debug")
    monkeypatch.setenv("CLOCK_TUTOR_DISABLE_TTS", "yes")
    monkeypatch.setenv("CLOCK_TUTOR_SNAP_TO_FIVE", "0")
    monkeypatch.setenv("CLOCK_TUTOR_DEFAULT_DIFFICULTY", "hard")

    config = TutorConfig.from_env()
    assert config.db_path == tmp_path / "custom.sqlite3"
    assert config.log_level == "DEBUG"
    assert config.tts_enabled is False
    assert config.snap_to_five is False
    assert config.default_difficulty is Difficulty.HARD


def test_default_db_path_lives_in_home(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CLOCK_TUTOR_DB_PATH", raising=False)
    assert default_db_path() == Path.home() / ".clock_tutor.sqlite3"


def test_configure_logging_accepts_names() -> None:
    logger = configure_logging("warning")
    assert logger.name == "clock_tutor"
    assert logger.level == logging.WARNING

    assert configure_logging("not-a-level").level == logging.INFO
    assert configure_logging(logging.DEBUG).level == logging.DEBUG
