"""Clock time model and hand-angle geometry.

Everything here is pure and total: malformed inputs are clamped or defaulted
rather than rejected, so UI code can pass through whatever a picker or a drag
gesture produced without guarding each call.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

DEGREES_IN_CIRCLE = 360
HOURS_ON_CLOCK = 12
MINUTES_IN_HOUR = 60
DEGREES_PER_HOUR = DEGREES_IN_CIRCLE / HOURS_ON_CLOCK  # 30
DEGREES_PER_MINUTE = DEGREES_IN_CIRCLE / MINUTES_IN_HOUR  # 6
HOUR_HAND_DEGREES_PER_MINUTE = DEGREES_PER_HOUR / MINUTES_IN_HOUR  # 0.5
SNAP_INCREMENT = 5


class Period(StrEnum):
    AM = "AM"
    PM = "PM"


def _as_int(value: object, fallback: int) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    if math.isnan(number) or math.isinf(number):
        return fallback
    return int(number)


def _clamp(value: int, lo: int, hi: int) -> int:
    return lo if value < lo else hi if value > hi else value


def coerce_period(value: object) -> Period:
    """Return the matching period, defaulting to AM for anything unrecognized."""
    if isinstance(value, Period):
        return value
    return Period.PM if str(value).strip().upper() == "PM" else Period.AM


def clamp_hours(value: object) -> int:
    return _clamp(_as_int(value, HOURS_ON_CLOCK), 1, HOURS_ON_CLOCK)


def clamp_minutes(value: object) -> int:
    return _clamp(_as_int(value, 0), 0, MINUTES_IN_HOUR - 1)


@dataclass(frozen=True, slots=True)
class Time:
    """12-hour clock time. Fields are normalized on construction."""

    hours: int = 12
    minutes: int = 0
    period: Period = Period.AM

    def __post_init__(self) -> None:
        object.__setattr__(self, "hours", clamp_hours(self.hours))
        object.__setattr__(self, "minutes", clamp_minutes(self.minutes))
        object.__setattr__(self, "period", coerce_period(self.period))

    def replace(self, **changes: object) -> "Time":
        return Time(
            hours=changes.get("hours", self.hours),  # type: ignore[arg-type]
            minutes=changes.get("minutes", self.minutes),  # type: ignore[arg-type]
            period=changes.get("period", self.period),  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class Time24:
    hours: int = 0
    minutes: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "hours", _clamp(_as_int(self.hours, 0), 0, 23))
        object.__setattr__(self, "minutes", clamp_minutes(self.minutes))


def to_24_hour(time: Time) -> Time24:
    hours = time.hours
    if time.period is Period.AM:
        if hours == 12:
            hours = 0
    elif hours != 12:
        hours += 12
    return Time24(hours=hours, minutes=time.minutes)


def to_12_hour(time24: Time24) -> Time:
    hours = time24.hours
    if hours == 0:
        return Time(12, time24.minutes, Period.AM)
    if hours == 12:
        return Time(12, time24.minutes, Period.PM)
    if hours > 12:
        return Time(hours - 12, time24.minutes, Period.PM)
    return Time(hours, time24.minutes, Period.AM)


def from_24_hour_value(hour24: object, time: Time) -> Time:
    """Apply a 0-23 hour picker value to ``time``, keeping its minutes."""
    return to_12_hour(Time24(hours=hour24, minutes=time.minutes))  # type: ignore[arg-type]


def hour_to_angle(hours: int, minutes: int) -> float:
    """Hour-hand angle in degrees. The hand advances continuously with minutes."""
    hour_angle = (clamp_hours(hours) % HOURS_ON_CLOCK) * DEGREES_PER_HOUR
    return hour_angle + clamp_minutes(minutes) * HOUR_HAND_DEGREES_PER_MINUTE


def minute_to_angle(minutes: int) -> float:
    return clamp_minutes(minutes) * DEGREES_PER_MINUTE


def _normalize_angle(angle: float) -> float:
    return float(angle) % DEGREES_IN_CIRCLE


def angle_to_hour(angle: float) -> float:
    """Fractional hour (0, 12] for an angle; 0 degrees reads as 12."""
    hour = _normalize_angle(angle) / DEGREES_PER_HOUR
    return float(HOURS_ON_CLOCK) if hour == 0 else hour


def angle_to_minute(angle: float) -> int:
    # round() is half-to-even.
    return int(round(_normalize_angle(angle) / DEGREES_PER_MINUTE)) % MINUTES_IN_HOUR


def snap_to_five_minutes(minutes: int) -> int:
    snapped = int(round(minutes / SNAP_INCREMENT)) * SNAP_INCREMENT
    return 0 if snapped >= MINUTES_IN_HOUR else snapped


def calculate_angle(center_x: float, center_y: float, point_x: float, point_y: float) -> float:
    """Angle of the vector center->point, clockwise from 12 o'clock, in [0, 360)."""
    delta_x = point_x - center_x
    delta_y = point_y - center_y
    # atan2 is measured from +x counter-clockwise; swapping arguments and
    # negating y measures from 12 o'clock clockwise in screen coordinates.
    angle = math.degrees(math.atan2(delta_x, -delta_y))
    if angle < 0:
        angle += DEGREES_IN_CIRCLE
    return angle


def format_time_12(time: Time) -> str:
    return f"{time.hours}:{time.minutes:02d} {time.period.value}"


def format_time_24(time: Time) -> str:
    t24 = to_24_hour(time)
    return f"{t24.hours:02d}:{t24.minutes:02d}"


def times_equal(a: Time, b: Time) -> bool:
    return a.hours == b.hours and a.minutes == b.minutes and a.period is b.period


def next_hour(hour: int) -> int:
    return 1 if hour == 12 else hour + 1


def previous_hour(hour: int) -> int:
    return 12 if hour == 1 else hour - 1


def round_down_to_five_minutes(time: Time) -> Time:
    return time.replace(minutes=(time.minutes // SNAP_INCREMENT) * SNAP_INCREMENT)
