from __future__ import annotations

import os
import random
from pathlib import Path

# Headless SDL for CI.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from clock_tutor.app import App, ClockDrag, ClockScreen, DragTarget, MenuScreen, QuizScreen, run  # noqa: E402
from clock_tutor.config import TutorConfig  # noqa: E402
from clock_tutor.game_state import GameEngine  # noqa: E402
from clock_tutor.persistence import SettingsStore  # noqa: E402
from clock_tutor.quiz_generator import Difficulty  # noqa: E402
from clock_tutor.time_model import Period, Time  # noqa: E402
from clock_tutor.time_words import time_to_words  # noqa: E402


def _key(key: int) -> None:
    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": key, "unicode": "", "mod": 0}))


def _mouse(kind: int, pos: tuple[int, int]) -> None:
    if kind == pygame.MOUSEMOTION:
        data = {"pos": pos, "rel": (0, 0), "buttons": (1, 0, 0)}
    else:
        data = {"pos": pos, "button": 1}
    pygame.event.post(pygame.event.Event(kind, data))


def test_clock_drag_maps_angles_to_engine_calls() -> None:
    engine = GameEngine(rng=random.Random(1))
    drag = ClockDrag(engine, snap_to_five=True)
    center = (100, 100)

    assert drag.move(center, (200, 100)) is False

    drag.start_minute()
    assert drag.target is DragTarget.MINUTE
    assert drag.move(center, (200, 100)) is True
    assert engine.current_time == Time(3, 15, Period.PM)
    # 17 minutes snaps to 15.
    assert drag.move(center, (198, 121)) is False

    drag.start_hour()
    assert drag.move(center, (100, 0)) is True
    assert engine.current_time == Time(12, 15, Period.PM)
    drag.end()
    assert drag.target is DragTarget.NONE


def test_ui_drag_minute_hand_across_twelve(tmp_path: Path) -> None:
    # Window 960x600: clock centre (320, 310), radius 240.
    steps = {
        1: lambda: _key(pygame.K_RETURN),  # "Play with the clock"
        2: lambda: _mouse(pygame.MOUSEBUTTONDOWN, (320, 125)),  # minute tip at 12
        3: lambda: _mouse(pygame.MOUSEMOTION, (520, 310)),  # 15
        4: lambda: _mouse(pygame.MOUSEMOTION, (320, 510)),  # 30
        5: lambda: _mouse(pygame.MOUSEMOTION, (220, 137)),  # 55
        6: lambda: _mouse(pygame.MOUSEMOTION, (420, 137)),  # 5, carries the hour
        7: lambda: _mouse(pygame.MOUSEBUTTONUP, (420, 137)),
        8: lambda: _key(pygame.K_p),
        9: lambda: _key(pygame.K_ESCAPE),
    }
    captured: list[App] = []

    def inject(frame: int) -> None:
        step = steps.get(frame)
        if step is not None:
            step()

    config = TutorConfig(db_path=tmp_path / "tutor.sqlite3", tts_enabled=False)
    assert run(max_frames=12, event_injector=inject, config=config, on_app=captured.append) == 0

    app = captured[0]
    assert app.engine.current_time == Time(4, 5, Period.AM)
    assert isinstance(app.top, MenuScreen)


def test_ui_quiz_answer_scores_and_persists(tmp_path: Path) -> None:
    captured: list[App] = []

    def inject(frame: int) -> None:
        if frame == 1:
            _key(pygame.K_DOWN)
        elif frame == 2:
            _key(pygame.K_RETURN)  # "Clock quiz"
        elif frame == 3:
            target = captured[0].engine.quiz_questions[0].time
            # Answer starts at 12:00; each Up adds an hour, each Right five minutes.
            for _ in range(target.hours % 12):
                _key(pygame.K_UP)
            for _ in range(target.minutes // 5):
                _key(pygame.K_RIGHT)
        elif frame == 4:
            _key(pygame.K_RETURN)

    db_path = tmp_path / "tutor.sqlite3"
    config = TutorConfig(db_path=db_path, tts_enabled=False, default_difficulty=Difficulty.MEDIUM)
    assert run(max_frames=10, event_injector=inject, config=config, on_app=captured.append) == 0

    app = captured[0]
    assert isinstance(app.top, QuizScreen)
    question = app.engine.quiz_questions[0]
    assert question.answered is True
    assert question.correct is True
    assert app.engine.score == 1
    assert SettingsStore(db_path).load().score == 1


def test_ui_clock_readouts_agree_and_24_hour_picker_crosses_noon(tmp_path: Path) -> None:
    captured: list[App] = []

    def start(app: App) -> None:
        captured.append(app)
        app.engine.set_current_time(Time(11, 47, Period.AM))

    def inject(frame: int) -> None:
        if frame == 1:
            _key(pygame.K_RETURN)  # "Play with the clock"
        elif frame == 2:
            _key(pygame.K_h)
        elif frame == 3:
            _key(pygame.K_UP)

    config = TutorConfig(db_path=tmp_path / "tutor.sqlite3", tts_enabled=False, snap_to_five=False)
    assert run(max_frames=6, event_injector=inject, config=config, on_app=start) == 0

    app = captured[0]
    assert app.engine.current_time == Time(12, 47, Period.PM)
    screen = app.top
    assert isinstance(screen, ClockScreen)
    assert screen.use_24_hour is True

    display = screen.readout()
    assert display.display_time == Time(12, 45, Period.PM)
    assert display.time12 == "12:45 PM"
    assert display.time24 == "12:45"
    assert display.words == time_to_words(display.display_time)
