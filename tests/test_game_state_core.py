"""Tests for the quiz/scoring engine.

A seeded ``random.Random`` keeps question generation reproducible; nothing
here needs pygame.
"""

from __future__ import annotations

import random

import pytest

from clock_tutor.config import TutorConfig
from clock_tutor.game_state import (
    ENCOURAGING_MESSAGES,
    GameEngine,
    encouragement_tier,
)
from clock_tutor.persistence import PersistedSettings
from clock_tutor.quiz_generator import Difficulty
from clock_tutor.time_model import Period, Time
from clock_tutor.time_words import period_phrase, time_to_words


def _engine(seed: int = 1, **kwargs: object) -> GameEngine:
    return GameEngine(rng=random.Random(seed), **kwargs)  # type: ignore[arg-type]


def _wrong(time: Time) -> Time:
    return time.replace(minutes=(time.minutes + 1) % 60)


def test_fresh_engine_defaults() -> None:
    engine = _engine()
    assert engine.current_time == Time(3, 0, Period.PM)
    assert engine.difficulty is Difficulty.MEDIUM
    assert engine.score == 0
    assert engine.streak == 0
    assert engine.sound_enabled is True


def test_questions_are_generated_on_first_access() -> None:
    engine = _engine()
    questions = engine.quiz_questions
    assert len(questions) == 3
    assert len({q.id for q in questions}) == 3
    assert len({(q.time.hours, q.time.minutes) for q in questions}) == 3
    assert all(not q.answered and q.correct is None for q in questions)

    problem = engine.word_problem
    assert problem is not None
    assert problem.time_in_words == time_to_words(problem.correct_time, include_period=True)
    assert problem.answered is False


def test_correct_answers_build_score_and_streak() -> None:
    engine = _engine()
    for q in engine.quiz_questions:
        assert engine.answer_quiz_question(q.id, q.time) is True
    assert engine.score == 3
    assert engine.streak == 3
    assert all(q.answered and q.correct for q in engine.quiz_questions)

    engine.refresh_questions()
    q = engine.quiz_questions[0]
    assert engine.answer_quiz_question(q.id, _wrong(q.time)) is False
    assert engine.streak == 0
    assert engine.score == 3


def test_quiz_answer_ignores_period() -> None:
    engine = _engine()
    q = engine.quiz_questions[0]
    flipped = Period.AM if q.time.period is Period.PM else Period.PM
    assert engine.answer_quiz_question(q.id, q.time.replace(period=flipped)) is True


def test_unknown_question_id_is_ignored() -> None:
    engine = _engine()
    before = engine.quiz_questions
    assert engine.answer_quiz_question("no-such-id", Time()) is False
    assert engine.score == 0
    assert engine.streak == 0
    assert engine.quiz_questions == before


def test_second_answer_returns_recorded_result_without_rescoring() -> None:
    engine = _engine()
    q = engine.quiz_questions[0]
    assert engine.answer_quiz_question(q.id, q.time) is True
    assert engine.answer_quiz_question(q.id, _wrong(q.time)) is True
    assert engine.score == 1
    assert engine.streak == 1


def test_word_problem_checks_period() -> None:
    engine = _engine()
    problem = engine.word_problem
    assert problem is not None
    expected = problem.correct_time
    flipped = Period.AM if expected.period is Period.PM else Period.PM
    assert engine.answer_word_problem(expected.replace(period=flipped)) is False
    assert engine.streak == 0

    engine.generate_new_word_problem()
    problem = engine.word_problem
    assert problem is not None
    assert engine.answer_word_problem(problem.correct_time) is True
    assert engine.score == 1


_AM_PHRASES = ("at midnight", "in the morning")
_PM_PHRASES = ("at noon", "in the afternoon", "in the evening")


def _period_read_from(phrase: str, hours: int) -> Period:
    if phrase.endswith(_AM_PHRASES):
        return Period.AM
    if phrase.endswith(_PM_PHRASES):
        return Period.PM
    assert phrase.endswith("at night")
    # Night covers 9-11 PM and 1-5 AM.
    return Period.PM if hours >= 9 else Period.AM


def test_word_problem_states_the_period() -> None:
    for seed in range(200):
        engine = _engine(seed=seed)
        problem = engine.word_problem
        assert problem is not None
        expected = problem.correct_time
        assert problem.time_in_words.endswith(period_phrase(expected.hours, expected.period))

        reading = Time(expected.hours, expected.minutes, _period_read_from(problem.time_in_words, expected.hours))
        assert engine.answer_word_problem(reading) is True


def test_word_problem_answer_before_generation_is_ignored() -> None:
    engine = _engine()
    assert engine.answer_word_problem(Time()) is False
    assert engine.score == 0


def test_set_difficulty_regenerates_everything() -> None:
    engine = _engine()
    old_ids = {q.id for q in engine.quiz_questions}
    old_problem = engine.word_problem
    assert old_problem is not None

    engine.set_difficulty(Difficulty.EASY)
    assert engine.difficulty is Difficulty.EASY
    new_questions = engine.quiz_questions
    assert old_ids.isdisjoint({q.id for q in new_questions})
    assert all(q.time.minutes == 0 for q in new_questions)
    problem = engine.word_problem
    assert problem is not None
    assert problem.id != old_problem.id
    assert problem.correct_time.minutes == 0


def test_reset_game_keeps_difficulty_and_sound() -> None:
    engine = _engine()
    engine.set_difficulty(Difficulty.HARD)
    engine.set_sound_enabled(False)
    engine.add_points(1)
    old_ids = {q.id for q in engine.quiz_questions}

    engine.reset_game()
    assert engine.score == 0
    assert engine.streak == 0
    assert engine.difficulty is Difficulty.HARD
    assert engine.sound_enabled is False
    assert old_ids.isdisjoint({q.id for q in engine.quiz_questions})


def test_add_points_never_lowers_score() -> None:
    engine = _engine()
    engine.add_points(2)
    assert engine.score == 2
    engine.add_points(-5)
    assert engine.score == 2
    assert engine.streak == 2


def test_refresh_question_replaces_only_that_question() -> None:
    engine = _engine(seed=11)
    engine.set_difficulty(Difficulty.EASY)
    before = engine.quiz_questions
    target = before[1]

    assert engine.refresh_question(target.id) is True
    after = engine.quiz_questions
    assert after[0] == before[0]
    assert after[2] == before[2]
    assert after[1].id != target.id
    assert len({(q.time.hours, q.time.minutes) for q in after}) == 3

    assert engine.refresh_question("missing") is False


@pytest.mark.parametrize(
    ("start", "minutes", "expected"),
    [
        (Time(3, 50, Period.PM), 5, Time(4, 5, Period.PM)),
        (Time(3, 10, Period.PM), 55, Time(2, 55, Period.PM)),
        (Time(12, 50, Period.AM), 0, Time(1, 0, Period.AM)),
        (Time(1, 5, Period.AM), 50, Time(12, 50, Period.AM)),
        (Time(3, 20, Period.PM), 40, Time(3, 40, Period.PM)),
        (Time(11, 50, Period.PM), 5, Time(12, 5, Period.PM)),
    ],
)
def test_set_minutes_carries_into_hour(start: Time, minutes: int, expected: Time) -> None:
    engine = _engine()
    engine.set_current_time(start)
    engine.set_minutes(minutes)
    assert engine.current_time == expected


def test_set_hours_and_period_clamp() -> None:
    engine = _engine()
    engine.set_hours(15)
    assert engine.current_time.hours == 12
    engine.set_period("bogus")
    assert engine.current_time.period is Period.AM
    engine.set_period(Period.PM)
    assert engine.current_time.period is Period.PM


def test_settings_callback_fires_on_persisted_changes() -> None:
    seen: list[PersistedSettings] = []
    engine = _engine(on_settings_changed=seen.append)

    engine.add_points(1)
    engine.set_difficulty(Difficulty.HARD)
    engine.toggle_sound()
    engine.reset_game()

    assert seen == [
        PersistedSettings(score=1, difficulty=Difficulty.MEDIUM, sound_enabled=True),
        PersistedSettings(score=1, difficulty=Difficulty.HARD, sound_enabled=True),
        PersistedSettings(score=1, difficulty=Difficulty.HARD, sound_enabled=False),
        PersistedSettings(score=0, difficulty=Difficulty.HARD, sound_enabled=False),
    ]

    engine.reset_streak()
    engine.set_minutes(10)
    assert len(seen) == 4


def test_restore_from_persisted_settings() -> None:
    settings = PersistedSettings(score=7, difficulty=Difficulty.HARD, sound_enabled=False)
    engine = _engine(settings=settings)
    assert engine.score == 7
    assert engine.streak == 0
    assert engine.difficulty is Difficulty.HARD
    assert engine.sound_enabled is False
    assert engine.settings() == settings


def test_encouragement_only_changes_with_streak() -> None:
    engine = _engine()
    first = engine.snapshot().encouragement
    assert {engine.snapshot().encouragement for _ in range(60)} == {first}
    assert engine.encouragement() == first

    # Re-reading the message leaves the question RNG untouched.
    a = _engine(seed=5)
    b = _engine(seed=5)
    for _ in range(10):
        a.snapshot()
    assert [q.time for q in a.quiz_questions] == [q.time for q in b.quiz_questions]

    engine.add_points(1)
    cheer = engine.encouragement()
    assert cheer in ENCOURAGING_MESSAGES["streak1"]
    assert {engine.snapshot().encouragement for _ in range(20)} == {cheer}

    engine.reset_streak()
    assert engine.encouragement() in ENCOURAGING_MESSAGES["start"]


def test_snapshot_is_detached() -> None:
    engine = _engine()
    snap = engine.snapshot()
    snap.quiz_questions[0].answered = True
    assert engine.quiz_questions[0].answered is False
    assert snap.encouragement in ENCOURAGING_MESSAGES["start"]


def test_encouragement_tiers() -> None:
    assert encouragement_tier(0) == "start"
    assert encouragement_tier(1) == "streak1"
    assert encouragement_tier(2) == "streak1"
    assert encouragement_tier(3) == "streak3"
    assert encouragement_tier(5) == "streak5"
    assert encouragement_tier(9) == "streak5"
    assert encouragement_tier(10) == "streak10"


def test_rejects_empty_quiz_batch_config() -> None:
    with pytest.raises(ValueError):
        GameEngine(config=TutorConfig(quiz_question_count=0))
