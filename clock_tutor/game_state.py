"""Quiz and scoring state for the clock tutor.

A single :class:`GameEngine` owns the live clock time, the three mini-clock
questions, the word problem, score, streak, difficulty and the sound flag.
All mutation goes through its methods. The engine is synchronous and not
thread-safe; it belongs to whichever thread runs the UI loop.

Each question and word problem moves through ``Unanswered -> Answered`` once.
Answered is terminal: a second answer for the same instance is ignored and
the recorded result is returned again.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, replace
from uuid import uuid4

from .config import TutorConfig
from .persistence import PersistedSettings
from .quiz_generator import Difficulty, generate_multiple_quiz_times
from .time_model import (
    Period,
    Time,
    clamp_hours,
    clamp_minutes,
    coerce_period,
    next_hour,
    previous_hour,
)
from .time_words import time_to_words

logger = logging.getLogger(__name__)

ENCOURAGING_MESSAGES: dict[str, tuple[str, ...]] = {
    "start": ("Let's learn about time!", "Ready to tell time?", "Time for fun!"),
    "streak1": ("Great start!", "Nice one!", "You got it!"),
    "streak3": ("You're on fire!", "Amazing!", "Keep it up!"),
    "streak5": ("Incredible!", "Time master!", "Unstoppable!"),
    "streak10": ("LEGENDARY!", "Clock champion!", "Perfect timing!"),
}


def encouragement_tier(streak: int) -> str:
    if streak >= 10:
        return "streak10"
    if streak >= 5:
        return "streak5"
    if streak >= 3:
        return "streak3"
    if streak >= 1:
        return "streak1"
    return "start"


@dataclass(slots=True)
class QuizQuestion:
    """Mini-clock question: read the clock, enter the time."""

    id: str
    time: Time
    answered: bool = False
    correct: bool | None = None


@dataclass(slots=True)
class WordProblem:
    """Phrase-to-clock question. ``time_in_words`` is fixed at creation."""

    id: str
    time_in_words: str
    correct_time: Time
    answered: bool = False
    correct: bool | None = None


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """View model for the UI (pure data, detached from the engine)."""

    current_time: Time
    score: int
    streak: int
    difficulty: Difficulty
    quiz_questions: tuple[QuizQuestion, ...]
    word_problem: WordProblem | None
    sound_enabled: bool
    encouragement: str


def _new_id() -> str:
    return str(uuid4())


class GameEngine:
    def __init__(
        self,
        *,
        config: TutorConfig | None = None,
        settings: PersistedSettings | None = None,
        rng: random.Random | None = None,
        on_settings_changed: Callable[[PersistedSettings], None] | None = None,
    ) -> None:
        cfg = config or TutorConfig()
        if cfg.quiz_question_count < 1:
            raise ValueError("quiz_question_count must be >= 1")

        self._config = cfg
        self._rng = rng if rng is not None else random.Random()
        self._on_settings_changed = on_settings_changed

        self._current_time: Time = cfg.default_time
        self._score = 0
        self._streak = 0
        self._difficulty: Difficulty = cfg.default_difficulty
        self._sound_enabled = True

        self._quiz_questions: list[QuizQuestion] = []
        self._word_problem: WordProblem | None = None

        if settings is not None:
            self._restore(settings)
        self._encouragement = self._pick_encouragement()

    # Read-only state

    @property
    def current_time(self) -> Time:
        return self._current_time

    @property
    def score(self) -> int:
        return self._score

    @property
    def streak(self) -> int:
        return self._streak

    @property
    def difficulty(self) -> Difficulty:
        return self._difficulty

    @property
    def sound_enabled(self) -> bool:
        return self._sound_enabled

    @property
    def quiz_questions(self) -> list[QuizQuestion]:
        if not self._quiz_questions:
            self.generate_new_quiz_questions()
        return [replace(q) for q in self._quiz_questions]

    @property
    def word_problem(self) -> WordProblem | None:
        if self._word_problem is None:
            self.generate_new_word_problem()
        return None if self._word_problem is None else replace(self._word_problem)

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            current_time=self._current_time,
            score=self._score,
            streak=self._streak,
            difficulty=self._difficulty,
            quiz_questions=tuple(self.quiz_questions),
            word_problem=self.word_problem,
            sound_enabled=self._sound_enabled,
            encouragement=self.encouragement(),
        )

    def encouragement(self) -> str:
        """Message for the current streak; it only changes when the streak does."""
        return self._encouragement

    def _pick_encouragement(self) -> str:
        return self._rng.choice(ENCOURAGING_MESSAGES[encouragement_tier(self._streak)])

    # Persistence boundary

    def settings(self) -> PersistedSettings:
        return PersistedSettings(
            score=self._score,
            difficulty=self._difficulty,
            sound_enabled=self._sound_enabled,
        )

    def _restore(self, settings: PersistedSettings) -> None:
        self._score = max(0, int(settings.score))
        self._difficulty = settings.difficulty
        self._sound_enabled = bool(settings.sound_enabled)

    def _settings_changed(self) -> None:
        if self._on_settings_changed is not None:
            self._on_settings_changed(self.settings())

    # Generation

    def generate_new_quiz_questions(self) -> None:
        times = generate_multiple_quiz_times(
            self._difficulty,
            self._config.quiz_question_count,
            self._rng,
        )
        self._quiz_questions = [QuizQuestion(id=_new_id(), time=t) for t in times]
        logger.debug(
            "new %s quiz batch: %s",
            self._difficulty.value,
            ", ".join(f"{q.time.hours}:{q.time.minutes:02d}" for q in self._quiz_questions),
        )

    def generate_new_word_problem(self) -> None:
        (time,) = generate_multiple_quiz_times(self._difficulty, 1, self._rng)
        self._word_problem = WordProblem(
            id=_new_id(),
            time_in_words=time_to_words(time, include_period=True),
            correct_time=time,
        )
        logger.debug("new word problem %r", self._word_problem.time_in_words)

    def refresh_questions(self) -> None:
        self.generate_new_quiz_questions()
        self.generate_new_word_problem()

    def refresh_question(self, question_id: str) -> bool:
        """Replace one question, keeping the batch unique by hour:minute."""
        idx = self._find_question(question_id)
        if idx < 0:
            return False
        taken = [
            (q.time.hours, q.time.minutes)
            for i, q in enumerate(self._quiz_questions)
            if i != idx
        ]
        (time,) = generate_multiple_quiz_times(self._difficulty, 1, self._rng, exclude=taken)
        self._quiz_questions[idx] = QuizQuestion(id=_new_id(), time=time)
        return True

    # Answers and scoring

    def answer_quiz_question(self, question_id: str, user_answer: Time) -> bool:
        idx = self._find_question(question_id)
        if idx < 0:
            logger.debug("ignoring answer for unknown question %s", question_id)
            return False
        question = self._quiz_questions[idx]
        if question.answered:
            return bool(question.correct)

        # The mini clock cannot show AM/PM, so only hours and minutes count.
        correct = (
            question.time.hours == user_answer.hours
            and question.time.minutes == user_answer.minutes
        )
        question.answered = True
        question.correct = correct
        self._record_result(correct)
        return correct

    def answer_word_problem(self, user_answer: Time) -> bool:
        problem = self._word_problem
        if problem is None:
            return False
        if problem.answered:
            return bool(problem.correct)

        expected = problem.correct_time
        correct = (
            expected.hours == user_answer.hours
            and expected.minutes == user_answer.minutes
            and expected.period is user_answer.period
        )
        problem.answered = True
        problem.correct = correct
        self._record_result(correct)
        return correct

    def _record_result(self, correct: bool) -> None:
        logger.debug("answer %s", "correct" if correct else "wrong")
        if correct:
            self.add_points(1)
        else:
            self.reset_streak()

    def add_points(self, points: int) -> None:
        self._score += max(0, int(points))
        self._streak += 1
        self._encouragement = self._pick_encouragement()
        self._settings_changed()

    def reset_streak(self) -> None:
        if self._streak != 0:
            self._streak = 0
            self._encouragement = self._pick_encouragement()

    def set_difficulty(self, difficulty: Difficulty) -> None:
        self._difficulty = difficulty
        logger.info("difficulty set to %s", difficulty.value)
        self.generate_new_quiz_questions()
        self.generate_new_word_problem()
        self._settings_changed()

    def reset_game(self) -> None:
        self._score = 0
        self.reset_streak()
        logger.info("game reset")
        self.generate_new_quiz_questions()
        self.generate_new_word_problem()
        self._settings_changed()

    def set_sound_enabled(self, enabled: bool) -> None:
        self._sound_enabled = bool(enabled)
        self._settings_changed()

    def toggle_sound(self) -> None:
        self.set_sound_enabled(not self._sound_enabled)

    # Draggable clock

    def set_current_time(self, time: Time) -> None:
        self._current_time = Time(time.hours, time.minutes, time.period)

    def set_minutes(self, minutes: int) -> None:
        """Move the minute hand, carrying into the hour when it crosses 12."""
        new_minutes = clamp_minutes(minutes)
        time = self._current_time
        hours = time.hours
        if time.minutes > 45 and new_minutes < 15:
            hours = next_hour(hours)
        elif time.minutes < 15 and new_minutes > 45:
            hours = previous_hour(hours)
        self._current_time = time.replace(hours=hours, minutes=new_minutes)

    def set_hours(self, hours: int) -> None:
        self._current_time = self._current_time.replace(hours=clamp_hours(hours))

    def set_period(self, period: Period | str) -> None:
        self._current_time = self._current_time.replace(period=coerce_period(period))

    def _find_question(self, question_id: str) -> int:
        for i, q in enumerate(self._quiz_questions):
            if q.id == question_id:
                return i
        return -1
