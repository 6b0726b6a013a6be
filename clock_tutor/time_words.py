"""English phrasing of clock times, and the inverse parser.

Phrase choice within a bucket is a pure function of the time value, so the
same time always reads the same way wherever it is rendered.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .time_model import (
    Period,
    Time,
    format_time_12,
    format_time_24,
    next_hour,
    previous_hour,
    round_down_to_five_minutes,
)

NUMBER_WORDS: dict[int, str] = {
    0: "twelve",
    1: "one",
    2: "two",
    3: "three",
    4: "four",
    5: "five",
    6: "six",
    7: "seven",
    8: "eight",
    9: "nine",
    10: "ten",
    11: "eleven",
    12: "twelve",
    13: "thirteen",
    14: "fourteen",
    15: "fifteen",
    16: "sixteen",
    17: "seventeen",
    18: "eighteen",
    19: "nineteen",
    20: "twenty",
    21: "twenty-one",
    22: "twenty-two",
    23: "twenty-three",
    24: "twenty-four",
    25: "twenty-five",
    26: "twenty-six",
    27: "twenty-seven",
    28: "twenty-eight",
    29: "twenty-nine",
    30: "thirty",
}

# 0 shares "twelve" with 12; parsing must resolve to 12.
_WORD_TO_NUMBER: dict[str, int] = {word: n for n, word in NUMBER_WORDS.items() if n != 0}


def _deterministic_pick(phrases: Sequence[str], seed: int) -> str:
    return phrases[abs(seed) % len(phrases)]


def _phrase_seed(time: Time) -> int:
    return time.hours * 100 + time.minutes + (1000 if time.period is Period.PM else 0)


def period_phrase(hours: int, period: Period) -> str:
    if period is Period.AM:
        if hours == 12:
            return "at midnight"
        if hours < 6:
            return "at night"
        return "in the morning"
    if hours == 12:
        return "at noon"
    if hours < 6:
        return "in the afternoon"
    if hours < 9:
        return "in the evening"
    return "at night"


def _candidates(time: Time) -> list[str]:
    hours = time.hours
    minutes = time.minutes
    hour_word = NUMBER_WORDS[hours]
    next_word = NUMBER_WORDS[next_hour(hours)]

    if minutes == 0:
        return [
            f"{hour_word} o'clock",
            f"exactly {hour_word}",
            f"{hour_word} on the dot",
            f"precisely {hour_word} o'clock",
        ]
    if minutes == 15:
        return [
            f"quarter past {hour_word}",
            f"a quarter after {hour_word}",
            f"fifteen past {hour_word}",
            f"{hour_word} fifteen",
        ]
    if minutes == 30:
        return [
            f"half past {hour_word}",
            f"{hour_word} thirty",
            f"thirty past {hour_word}",
            f"halfway past {hour_word}",
        ]
    if minutes == 45:
        return [
            f"quarter to {next_word}",
            f"a quarter before {next_word}",
            f"fifteen to {next_word}",
            f"{hour_word} forty-five",
        ]
    if minutes < 30:
        minute_word = NUMBER_WORDS[minutes]
        return [
            f"{minute_word} past {hour_word}",
            f"{minute_word} after {hour_word}",
            f"{hour_word} {minute_word.replace('-', ' ')}",
        ]
    minute_word = NUMBER_WORDS[60 - minutes]
    return [
        f"{minute_word} to {next_word}",
        f"{minute_word} before {next_word}",
        f"{minute_word} until {next_word}",
    ]


def time_to_words(time: Time, include_period: bool = False) -> str:
    """Render ``time`` as an English phrase such as "quarter past three"."""
    phrase = _deterministic_pick(_candidates(time), _phrase_seed(time))
    if include_period:
        return f"{phrase} {period_phrase(time.hours, time.period)}"
    return phrase


_WORD = r"([a-z]+(?:-[a-z]+)?)"

_PatternParser = Callable[[str], Time | None]


def _hour_from_word(word: str) -> int | None:
    value = _WORD_TO_NUMBER.get(word)
    if value is None or value > 12:
        return None
    return value


def _minute_from_word(word: str) -> int | None:
    value = _WORD_TO_NUMBER.get(word)
    if value is None or value > 30:
        return None
    return value


def _parse_oclock(text: str) -> Time | None:
    match = re.fullmatch(_WORD + r" o'clock", text)
    if match is None:
        return None
    hour = _hour_from_word(match.group(1))
    return None if hour is None else Time(hour, 0, Period.AM)


def _fixed_minute_parser(prefix: str, minutes: int, *, to_next: bool) -> _PatternParser:
    pattern = re.compile(prefix + " " + _WORD)

    def parse(text: str) -> Time | None:
        match = pattern.fullmatch(text)
        if match is None:
            return None
        hour = _hour_from_word(match.group(1))
        if hour is None:
            return None
        return Time(previous_hour(hour) if to_next else hour, minutes, Period.AM)

    return parse


def _parse_past(text: str) -> Time | None:
    match = re.fullmatch(_WORD + " past " + _WORD, text)
    if match is None:
        return None
    minute = _minute_from_word(match.group(1))
    hour = _hour_from_word(match.group(2))
    if minute is None or hour is None:
        return None
    return Time(hour, minute, Period.AM)


def _parse_to(text: str) -> Time | None:
    match = re.fullmatch(_WORD + " to " + _WORD, text)
    if match is None:
        return None
    minutes_to = _minute_from_word(match.group(1))
    hour = _hour_from_word(match.group(2))
    if minutes_to is None or hour is None:
        return None
    return Time(previous_hour(hour), 60 - minutes_to, Period.AM)


_PARSERS: tuple[_PatternParser, ...] = (
    _parse_oclock,
    _fixed_minute_parser("quarter past", 15, to_next=False),
    _fixed_minute_parser("half past", 30, to_next=False),
    _fixed_minute_parser("quarter to", 45, to_next=True),
    _parse_past,
    _parse_to,
)


def words_to_time(words: str) -> Time | None:
    """Parse a phrase back into a time, or return None when nothing matches.

    The phrase alone cannot tell morning from evening, so every result is AM.
    """
    normalized = " ".join(str(words).lower().split())
    for parser in _PARSERS:
        result = parser(normalized)
        if result is not None:
            return result
    return None


@dataclass(frozen=True, slots=True)
class TimeDisplay:
    display_time: Time
    time12: str
    time24: str
    words: str


def describe_time(time: Time) -> TimeDisplay:
    """Readout for the main clock, with minutes rounded down to five."""
    shown = round_down_to_five_minutes(time)
    return TimeDisplay(
        display_time=shown,
        time12=format_time_12(shown),
        time24=format_time_24(shown),
        words=time_to_words(shown),
    )
