"""Pygame UI shell for the clock tutor.

Screens:
- Clock: a large analog clock with draggable hands and a digital readout
- Quiz: three mini clocks to read plus a word challenge
- Difficulty: easy / medium / hard

Time arithmetic, phrasing, generation and scoring live in the core modules;
this file only draws state and turns input into engine calls.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

import pygame

from .config import TutorConfig
from .game_state import GameEngine, GameSnapshot, QuizQuestion, WordProblem
from .logging_config import configure_logging
from .persistence import PersistedSettings, SettingsStore
from .quiz_generator import Difficulty
from .sounds import SoundEffects, SoundKind
from .speech import (
    SpeechPlayer,
    format_time24_for_speech,
    format_time_for_speech,
    word_problem_prompt,
)
from .time_model import (
    Period,
    Time,
    angle_to_hour,
    angle_to_minute,
    calculate_angle,
    format_time_12,
    from_24_hour_value,
    hour_to_angle,
    minute_to_angle,
    next_hour,
    previous_hour,
    snap_to_five_minutes,
    to_24_hour,
)
from .time_words import TimeDisplay, describe_time

logger = logging.getLogger(__name__)

WINDOW_SIZE = (960, 600)
TARGET_FPS = 60

BG = (18, 28, 72)
PANEL_BG = (28, 42, 110)
BORDER = (226, 236, 255)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)
FACE = (250, 250, 244)
FACE_BORDER = (70, 110, 200)
HOUR_HAND = (40, 60, 140)
MINUTE_HAND = (220, 80, 120)
GOOD = (90, 200, 120)
BAD = (235, 110, 100)

DEFAULT_ANSWER = Time(12, 0, Period.AM)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(
        self,
        surface: pygame.Surface,
        font: pygame.font.Font,
        *,
        engine: GameEngine,
        speech: SpeechPlayer,
        sounds: SoundEffects,
        config: TutorConfig,
    ) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True
        self.engine = engine
        self.speech = speech
        self.sounds = sounds
        self.config = config

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    @property
    def size(self) -> tuple[int, int]:
        return self._surface.get_size()

    @property
    def top(self) -> Screen | None:
        return self._screens[-1] if self._screens else None

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the root screen; it handles its own quit.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def play(self, kind: SoundKind) -> None:
        if self.engine.sound_enabled:
            self.sounds.play(kind)

    def speak(self, text: str) -> None:
        if self.engine.sound_enabled:
            self.speech.speak(text)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def update(self) -> None:
        self.speech.update()

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


def _hand_point(center: tuple[int, int], angle_deg: float, length: float) -> tuple[int, int]:
    rad = math.radians(angle_deg)
    return (
        int(round(center[0] + math.sin(rad) * length)),
        int(round(center[1] - math.cos(rad) * length)),
    )


def draw_clock(
    surface: pygame.Surface,
    *,
    center: tuple[int, int],
    radius: int,
    time: Time,
    font: pygame.font.Font | None = None,
    highlight: tuple[int, int, int] | None = None,
) -> None:
    pygame.draw.circle(surface, FACE, center, radius)
    pygame.draw.circle(surface, highlight or FACE_BORDER, center, radius, max(2, radius // 18))

    for tick in range(60):
        outer = _hand_point(center, tick * 6, radius * 0.92)
        inner_len = radius * (0.80 if tick % 5 == 0 else 0.87)
        inner = _hand_point(center, tick * 6, inner_len)
        width = 3 if tick % 5 == 0 else 1
        if radius < 60 and tick % 5 != 0:
            continue
        pygame.draw.line(surface, (90, 90, 110), inner, outer, width)

    if font is not None:
        for hour in range(1, 13):
            pos = _hand_point(center, hour * 30, radius * 0.68)
            label = font.render(str(hour), True, (30, 30, 50))
            surface.blit(label, label.get_rect(center=pos))

    hour_tip = _hand_point(center, hour_to_angle(time.hours, time.minutes), radius * 0.5)
    minute_tip = _hand_point(center, minute_to_angle(time.minutes), radius * 0.78)
    pygame.draw.line(surface, HOUR_HAND, center, hour_tip, max(3, radius // 14))
    pygame.draw.line(surface, MINUTE_HAND, center, minute_tip, max(2, radius // 22))
    pygame.draw.circle(surface, (30, 30, 50), center, max(3, radius // 16))


class DragTarget(StrEnum):
    NONE = "none"
    MINUTE = "minute"
    HOUR = "hour"


class ClockDrag:
    """Turns pointer positions into minute/hour values for the engine.

    Only one hand can be dragged at a time. Minute drags optionally snap to
    five-minute steps; hour drags snap to whole hours.
    """

    def __init__(self, engine: GameEngine, *, snap_to_five: bool = True) -> None:
        self._engine = engine
        self._snap_to_five = snap_to_five
        self._target = DragTarget.NONE

    @property
    def target(self) -> DragTarget:
        return self._target

    def start_minute(self) -> None:
        self._target = DragTarget.MINUTE

    def start_hour(self) -> None:
        self._target = DragTarget.HOUR

    def end(self) -> None:
        self._target = DragTarget.NONE

    def move(self, center: tuple[float, float], pos: tuple[float, float]) -> bool:
        """Apply a pointer move; returns True when the clock time changed."""
        if self._target is DragTarget.NONE:
            return False
        before = self._engine.current_time
        angle = calculate_angle(center[0], center[1], pos[0], pos[1])
        if self._target is DragTarget.MINUTE:
            minutes = angle_to_minute(angle)
            if self._snap_to_five:
                minutes = snap_to_five_minutes(minutes)
            self._engine.set_minutes(minutes)
        else:
            hour = int(round(angle_to_hour(angle))) % 12
            self._engine.set_hours(12 if hour == 0 else hour)
        return self._engine.current_time != before


class ClockScreen:
    def __init__(self, app: App) -> None:
        self._app = app
        self._drag = ClockDrag(app.engine, snap_to_five=app.config.snap_to_five)
        self._use_24_hour = False
        self._title_font = pygame.font.Font(None, 40)
        self._num_font = pygame.font.Font(None, 34)
        self._big_font = pygame.font.Font(None, 64)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def drag(self) -> ClockDrag:
        return self._drag

    @property
    def use_24_hour(self) -> bool:
        return self._use_24_hour

    def readout(self) -> TimeDisplay:
        return describe_time(self._app.engine.current_time)

    def layout(self) -> tuple[tuple[int, int], int]:
        w, h = self._app.size
        radius = max(80, min(w // 4, (h - 120) // 2))
        center = (w // 3, 70 + radius)
        return center, radius

    def handle_event(self, event: pygame.event.Event) -> None:
        engine = self._app.engine
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self._begin_drag(event.pos)
            return
        if event.type == pygame.MOUSEMOTION:
            center, _ = self.layout()
            if self._drag.move(center, event.pos):
                self._app.play(SoundKind.TICK)
            return
        if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
            self._drag.end()
            return
        if event.type != pygame.KEYDOWN:
            return

        time = engine.current_time
        if event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._drag.end()
            self._app.pop()
        elif event.key == pygame.K_s:
            shown = describe_time(time).display_time
            self._app.speak(format_time_for_speech(shown.hours, shown.minutes, shown.period))
        elif event.key == pygame.K_m:
            shown = describe_time(time).display_time
            self._app.speak(format_time24_for_speech(shown.hours, shown.minutes, shown.period))
        elif event.key == pygame.K_p:
            engine.set_period(Period.PM if time.period is Period.AM else Period.AM)
            self._app.play(SoundKind.CLICK)
        elif event.key == pygame.K_RIGHT:
            engine.set_minutes((time.minutes + 5) % 60)
            self._app.play(SoundKind.TICK)
        elif event.key == pygame.K_LEFT:
            engine.set_minutes((time.minutes - 5) % 60)
            self._app.play(SoundKind.TICK)
        elif event.key == pygame.K_h:
            self._use_24_hour = not self._use_24_hour
            self._app.play(SoundKind.CLICK)
        elif event.key in (pygame.K_UP, pygame.K_DOWN):
            step = 1 if event.key == pygame.K_UP else -1
            if self._use_24_hour:
                # The 24-hour picker also moves AM/PM across noon and midnight.
                hour24 = (to_24_hour(time).hours + step) % 24
                engine.set_current_time(from_24_hour_value(hour24, time))
            else:
                engine.set_hours(next_hour(time.hours) if step > 0 else previous_hour(time.hours))

    def _begin_drag(self, pos: tuple[int, int]) -> None:
        center, radius = self.layout()
        dist = math.hypot(pos[0] - center[0], pos[1] - center[1])
        if dist > radius:
            return
        time = self._app.engine.current_time
        minute_tip = _hand_point(center, minute_to_angle(time.minutes), radius * 0.78)
        hour_tip = _hand_point(center, hour_to_angle(time.hours, time.minutes), radius * 0.5)
        to_minute = math.hypot(pos[0] - minute_tip[0], pos[1] - minute_tip[1])
        to_hour = math.hypot(pos[0] - hour_tip[0], pos[1] - hour_tip[1])
        if to_hour < to_minute and to_hour <= radius * 0.25:
            self._drag.start_hour()
        elif to_minute <= radius * 0.25 or dist >= radius * 0.6:
            self._drag.start_minute()
        else:
            self._drag.start_hour()

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(BG)
        engine = self._app.engine
        center, radius = self.layout()
        time = engine.current_time
        draw_clock(surface, center=center, radius=radius, time=time, font=self._num_font)

        display = self.readout()
        primary, secondary = display.time12, display.time24
        if self._use_24_hour:
            primary, secondary = secondary, primary
        w, _ = surface.get_size()
        x = center[0] + radius + 40
        title = self._title_font.render("Drag the hands!", True, TEXT_MAIN)
        surface.blit(title, (x, 40))
        big = self._big_font.render(primary, True, TEXT_MAIN)
        surface.blit(big, (x, 100))
        surface.blit(self._title_font.render(secondary, True, TEXT_MUTED), (x, 170))
        words = self._title_font.render(display.words, True, TEXT_MAIN)
        surface.blit(words, (x, 220))
        score = self._hint_font.render(
            f"Score {engine.score}   Streak {engine.streak}   {engine.difficulty.value.title()}",
            True,
            TEXT_MUTED,
        )
        surface.blit(score, (x, 280))

        footer = "Drag hands | Arrows: adjust | P: AM/PM | H: 12/24h | S: speak | M: speak 24h | Esc: back"
        foot = self._hint_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, surface.get_height() - 10)))


class QuizScreen:
    """Three mini clocks and a word challenge, driven from the keyboard.

    Up/Down change the hour, Left/Right change minutes (hold Shift for single
    minutes), Tab flips AM/PM, Enter checks the answer or moves on.
    """

    _slots = 4  # three clocks + word problem

    def __init__(self, app: App) -> None:
        self._app = app
        self._selected = 0
        self._answers: list[Time] = [DEFAULT_ANSWER] * self._slots
        self._title_font = pygame.font.Font(None, 40)
        self._item_font = pygame.font.Font(None, 30)
        self._hint_font = pygame.font.Font(None, 22)

    @property
    def selected(self) -> int:
        return self._selected

    def answer_for(self, slot: int) -> Time:
        return self._answers[slot]

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        shift = bool(getattr(event, "mod", 0) & pygame.KMOD_SHIFT)
        if key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._app.pop()
        elif key in (pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4):
            self._selected = key - pygame.K_1
        elif key == pygame.K_n:
            self._app.engine.refresh_questions()
            self._answers = [DEFAULT_ANSWER] * self._slots
            self._app.play(SoundKind.WHOOSH)
        elif key == pygame.K_s and self._selected == 3:
            problem = self._app.engine.word_problem
            if problem is not None:
                self._app.speak(word_problem_prompt(problem.time_in_words))
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._submit_or_advance()
        else:
            self._edit_answer(key, shift)

    def _edit_answer(self, key: int, shift: bool) -> None:
        current = self._answers[self._selected]
        step = 1 if shift else 5
        if key == pygame.K_UP:
            updated = current.replace(hours=1 if current.hours == 12 else current.hours + 1)
        elif key == pygame.K_DOWN:
            updated = current.replace(hours=12 if current.hours == 1 else current.hours - 1)
        elif key == pygame.K_RIGHT:
            updated = current.replace(minutes=(current.minutes + step) % 60)
        elif key == pygame.K_LEFT:
            updated = current.replace(minutes=(current.minutes - step) % 60)
        elif key == pygame.K_TAB:
            updated = current.replace(period=Period.PM if current.period is Period.AM else Period.AM)
        else:
            return
        self._answers[self._selected] = updated

    def _submit_or_advance(self) -> None:
        engine = self._app.engine
        slot = self._selected
        if slot < 3:
            questions = engine.quiz_questions
            if slot >= len(questions):
                return
            question = questions[slot]
            if question.answered:
                engine.refresh_question(question.id)
                self._answers[slot] = DEFAULT_ANSWER
                return
            correct = engine.answer_quiz_question(question.id, self._answers[slot])
        else:
            problem = engine.word_problem
            if problem is None:
                return
            if problem.answered:
                engine.refresh_questions()
                self._answers = [DEFAULT_ANSWER] * self._slots
                self._app.play(SoundKind.WHOOSH)
                return
            correct = engine.answer_word_problem(self._answers[slot])
        self._app.play(SoundKind.CORRECT if correct else SoundKind.INCORRECT)

    def render(self, surface: pygame.Surface) -> None:
        surface.fill(BG)
        w, h = surface.get_size()
        snap: GameSnapshot = self._app.engine.snapshot()

        title = self._title_font.render("What time is shown?", True, TEXT_MAIN)
        surface.blit(title, (30, 20))
        status = self._hint_font.render(
            f"Score {snap.score}  Streak {snap.streak}  {snap.difficulty.value.title()}  -  {snap.encouragement}",
            True,
            TEXT_MUTED,
        )
        surface.blit(status, (30, 60))

        card_w = max(160, (w - 80) // 3)
        radius = max(40, min(card_w // 3, h // 7))
        for i, question in enumerate(snap.quiz_questions[:3]):
            cx = 30 + card_w * i + card_w // 2
            cy = 100 + radius + 10
            self._render_question(surface, i, question, (cx, cy), radius)

        if snap.word_problem is not None:
            self._render_word_problem(surface, snap.word_problem, top=100 + radius * 2 + 110)

        footer = "1-4: select | Arrows: set time | Tab: AM/PM | Enter: check/next | N: new | S: read aloud | Esc: back"
        foot = self._hint_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 10)))

    def _feedback_color(self, answered: bool, correct: bool | None) -> tuple[int, int, int] | None:
        if not answered:
            return None
        return GOOD if correct else BAD

    def _render_question(
        self,
        surface: pygame.Surface,
        slot: int,
        question: QuizQuestion,
        center: tuple[int, int],
        radius: int,
    ) -> None:
        highlight = self._feedback_color(question.answered, question.correct)
        if slot == self._selected and highlight is None:
            highlight = (250, 200, 60)
        draw_clock(surface, center=center, radius=radius, time=question.time, highlight=highlight)

        answer = self._answers[slot]
        if question.answered:
            text = "Correct!" if question.correct else (
                f"It was {question.time.hours}:{question.time.minutes:02d}"
            )
        else:
            text = f"{answer.hours}:{answer.minutes:02d}"
        label = self._item_font.render(text, True, TEXT_MAIN)
        surface.blit(label, label.get_rect(midtop=(center[0], center[1] + radius + 10)))

    def _render_word_problem(self, surface: pygame.Surface, problem: WordProblem, *, top: int) -> None:
        w, _ = surface.get_size()
        panel = pygame.Rect(30, top, w - 60, 110)
        pygame.draw.rect(surface, PANEL_BG, panel)
        border = self._feedback_color(problem.answered, problem.correct)
        if border is None:
            border = (250, 200, 60) if self._selected == 3 else BORDER
        pygame.draw.rect(surface, border, panel, 2)

        prompt = self._item_font.render(f'Word challenge: what time is "{problem.time_in_words}"?', True, TEXT_MAIN)
        surface.blit(prompt, (panel.x + 14, panel.y + 14))
        if problem.answered:
            expected = problem.correct_time
            text = "Amazing!" if problem.correct else (
                f"Not quite! The answer is {expected.hours}:{expected.minutes:02d} {expected.period.value}"
            )
        else:
            text = f"Your answer: {format_time_12(self._answers[3])}"
        line = self._item_font.render(text, True, TEXT_MUTED)
        surface.blit(line, (panel.x + 14, panel.y + 60))


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._app.play(SoundKind.CLICK)
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)
        engine = self._app.engine

        title = self._title_font.render(self._title, True, TEXT_MAIN)
        surface.blit(title, title.get_rect(center=(w // 2, 50)))
        status = self._hint_font.render(
            f"Score {engine.score}  |  Level {engine.difficulty.value}  |  Sound {'on' if engine.sound_enabled else 'off'}",
            True,
            TEXT_MUTED,
        )
        surface.blit(status, status.get_rect(center=(w // 2, 85)))

        row_h = 44
        y = 120
        for idx, item in enumerate(self._items):
            row = pygame.Rect(w // 2 - 200, y, 400, row_h - 6)
            selected = idx == self._selected
            pygame.draw.rect(surface, (244, 248, 255) if selected else PANEL_BG, row)
            pygame.draw.rect(surface, BORDER, row, 1)
            color = (14, 26, 74) if selected else TEXT_MAIN
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, text.get_rect(center=row.center))
            y += row_h

        footer = "Enter/Space: Select  |  Esc/Backspace: Back"
        foot = self._hint_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(w // 2, h - 10)))


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    config: TutorConfig | None = None,
    on_app: Callable[[App], None] | None = None,
) -> int:
    cfg = config or TutorConfig.from_env()
    configure_logging(cfg.log_level)

    pygame.mixer.pre_init(frequency=22050, size=-16, channels=1, buffer=512)
    pygame.init()
    pygame.display.set_caption("Clock Tutor")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    store = SettingsStore(cfg.db_path)
    speech = SpeechPlayer(enabled=cfg.tts_enabled)
    sounds = SoundEffects()

    def on_settings_changed(settings: PersistedSettings) -> None:
        store.save(settings)
        sounds.set_enabled(settings.sound_enabled)
        speech.set_muted(not settings.sound_enabled)

    engine = GameEngine(config=cfg, settings=store.load(), on_settings_changed=on_settings_changed)
    sounds.set_enabled(engine.sound_enabled)
    speech.set_muted(not engine.sound_enabled)
    logger.info(
        "starting clock tutor (difficulty=%s, score=%d)",
        engine.difficulty.value,
        engine.score,
    )

    app = App(surface=surface, font=font, engine=engine, speech=speech, sounds=sounds, config=cfg)

    def choose(difficulty: Difficulty) -> Callable[[], None]:
        def action() -> None:
            engine.set_difficulty(difficulty)
            app.pop()

        return action

    difficulty_menu = MenuScreen(
        app,
        "Difficulty",
        [
            MenuItem("Easy - o'clock", choose(Difficulty.EASY)),
            MenuItem("Medium - quarters", choose(Difficulty.MEDIUM)),
            MenuItem("Hard - any minute", choose(Difficulty.HARD)),
            MenuItem("Back", app.pop),
        ],
    )

    main_items = [
        MenuItem("Play with the clock", lambda: app.push(ClockScreen(app))),
        MenuItem("Clock quiz", lambda: app.push(QuizScreen(app))),
        MenuItem("Difficulty", lambda: app.push(difficulty_menu)),
        MenuItem("Toggle sound", engine.toggle_sound),
        MenuItem("Reset score", engine.reset_game),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Clock Tutor", main_items, is_root=True))
    if on_app is not None:
        on_app(app)

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.update()
            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        speech.stop()
        pygame.quit()

    return 0
