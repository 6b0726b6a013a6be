"""Spoken-word time strings and a best-effort offline speech player.

The formatters are pure. :class:`SpeechPlayer` only sequences playback: it
launches one TTS subprocess at a time and drops requests that arrive while an
utterance is still playing.
"""

from __future__ import annotations

import importlib.util
import logging
import os
import shutil
import subprocess
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from .time_model import Period, Time, next_hour, to_24_hour

logger = logging.getLogger(__name__)

_MILITARY_WORDS: dict[int, str] = {
    0: "zero",
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
}


def format_time_for_speech(hours: int, minutes: int, period: Period | str) -> str:
    """12-hour phrasing with one canonical form per bucket, e.g. "quarter to 9 AM"."""
    t = Time(hours, minutes, period)  # type: ignore[arg-type]
    h = t.hours
    m = t.minutes

    if m == 0:
        text = f"{h} o'clock"
    elif m == 15:
        text = f"quarter past {h}"
    elif m == 30:
        text = f"half past {h}"
    elif m == 45:
        text = f"quarter to {next_hour(h)}"
    elif m < 30:
        text = f"{m} minutes past {h}"
    else:
        text = f"{60 - m} minutes to {next_hour(h)}"

    return f"{text} {t.period.value}"


def _military_hour(hour24: int) -> str:
    if hour24 == 0:
        return "zero"
    if hour24 < 10:
        return f"oh {_MILITARY_WORDS[hour24]}"
    return _MILITARY_WORDS[hour24]


def _military_minute(minutes: int) -> str:
    if minutes < 10:
        return f"oh {_MILITARY_WORDS[minutes]}"
    return _MILITARY_WORDS.get(minutes, str(minutes))


def format_time24_for_speech(hours: int, minutes: int, period: Period | str) -> str:
    """Military phrasing, e.g. "fourteen hundred hours" or "oh nine oh five"."""
    t24 = to_24_hour(Time(hours, minutes, period))  # type: ignore[arg-type]
    hour_text = _military_hour(t24.hours)
    if t24.minutes == 0:
        return f"{hour_text} hundred hours"
    return f"{hour_text} {_military_minute(t24.minutes)}"


def word_problem_prompt(time_in_words: str) -> str:
    return f"What time is {time_in_words}?"


class _Process(Protocol):
    def poll(self) -> int | None: ...
    def terminate(self) -> None: ...
    def wait(self, timeout: float | None = None) -> int: ...
    def kill(self) -> None: ...


Launcher = Callable[[str], "_Process | None"]


class SpeechPlayer:
    """Offline TTS through isolated subprocesses, one utterance at a time.

    Backends are tried in platform order; one that fails to launch is dropped
    and the next is used. With no backend left the player disables itself.
    """

    _max_utterance_s = 12.0

    def __init__(
        self,
        *,
        enabled: bool = True,
        launcher: Launcher | None = None,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._now = now
        self._active_proc: _Process | None = None
        self._active_started_s = 0.0
        self._backends: list[str] = []
        self._backend: str | None = None
        self._launcher = launcher
        self._enabled = False
        self._muted = False

        if not enabled:
            return
        if launcher is not None:
            self._enabled = True
            return
        if os.environ.get("SDL_AUDIODRIVER", "").strip().lower() == "dummy":
            # Keep automated/headless runs silent.
            return

        self._backends = self._resolve_backends()
        self._backend = self._backends[0] if self._backends else None
        self._enabled = self._backend is not None
        if not self._enabled:
            logger.info("no offline TTS backend found; speech disabled")

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def busy(self) -> bool:
        self._reap()
        return self._active_proc is not None

    def set_muted(self, muted: bool) -> None:
        self._muted = bool(muted)
        if self._muted:
            self.stop()

    def speak(self, text: str) -> bool:
        """Start speaking ``text``. Returns False if the request was dropped."""
        if not self._enabled or self._muted:
            return False
        phrase = " ".join(str(text).strip().split())
        if phrase == "":
            return False
        if self.busy:
            logger.debug("speech busy, dropping %r", phrase)
            return False

        while self._enabled:
            proc = self._launch(phrase)
            if proc is not None:
                self._active_proc = proc
                self._active_started_s = self._now()
                return True
            if self._launcher is not None:
                return False
            self._drop_current_backend()
        return False

    def speak_time(self, time: Time) -> bool:
        return self.speak(format_time_for_speech(time.hours, time.minutes, time.period))

    def speak_time24(self, time: Time) -> bool:
        return self.speak(format_time24_for_speech(time.hours, time.minutes, time.period))

    def update(self) -> None:
        self._reap()

    def stop(self) -> None:
        proc = self._active_proc
        self._active_proc = None
        if proc is not None:
            self._terminate_process(proc)

    def _reap(self) -> None:
        proc = self._active_proc
        if proc is None:
            return
        if proc.poll() is not None:
            self._active_proc = None
            return
        if (self._now() - self._active_started_s) > self._max_utterance_s:
            logger.warning("utterance exceeded %.0fs, terminating", self._max_utterance_s)
            self._terminate_process(proc)
            self._active_proc = None

    @staticmethod
    def _terminate_process(proc: _Process) -> None:
        try:
            proc.terminate()
        except OSError:
            return
        try:
            proc.wait(timeout=0.5)
        except subprocess.TimeoutExpired:
            try:
                proc.kill()
            except OSError:
                pass

    @staticmethod
    def _resolve_backends() -> list[str]:
        candidates: list[str] = []
        if sys.platform == "darwin":
            candidates.append("say")
        if os.name == "nt":
            candidates.append("powershell")
        candidates.extend(("pyttsx3-subprocess", "espeak"))
        return [name for name in candidates if SpeechPlayer._backend_available(name)]

    @staticmethod
    def _backend_available(name: str) -> bool:
        if name == "say":
            return (shutil.which("say") is not None) or Path("/usr/bin/say").exists()
        if name == "powershell":
            return (shutil.which("powershell") is not None) or (shutil.which("pwsh") is not None)
        if name == "pyttsx3-subprocess":
            return importlib.util.find_spec("pyttsx3") is not None
        if name == "espeak":
            return shutil.which("espeak") is not None
        return False

    def _drop_current_backend(self) -> None:
        backend = self._backend
        if backend is not None:
            logger.warning("TTS backend %s failed; dropping it", backend)
            self._backends = [name for name in self._backends if name != backend]
        self._backend = self._backends[0] if self._backends else None
        self._enabled = self._backend is not None

    def _launch(self, text: str) -> _Process | None:
        if self._launcher is not None:
            return self._launcher(text)
        backend = self._backend
        if backend is None:
            return None

        # Rates sit below each engine's default.
        try:
            if backend == "pyttsx3-subprocess":
                script = (
                    "import sys\n"
                    "txt=' '.join(sys.argv[1:]).strip()\n"
                    "import pyttsx3\n"
                    "e=pyttsx3.init()\n"
                    "e.setProperty('rate', 150)\n"
                    "e.say(txt)\n"
                    "e.runAndWait()\n"
                )
                return subprocess.Popen(
                    [sys.executable, "-c", script, text],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )

            if backend == "say":
                return subprocess.Popen(
                    [shutil.which("say") or "/usr/bin/say", "-r", "150", text],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )

            if backend == "powershell":
                ps_bin = shutil.which("powershell") or shutil.which("pwsh")
                if ps_bin is None:
                    return None
                script = (
                    "Add-Type -AssemblyName System.Speech; "
                    "$s=New-Object System.Speech.Synthesis.SpeechSynthesizer; "
                    "$s.Rate=-1; "
                    "$txt=($args -join ' '); "
                    "$s.Speak($txt);"
                )
                return subprocess.Popen(
                    [ps_bin, "-NoProfile", "-NonInteractive", "-Command", script, text],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )

            if backend == "espeak":
                return subprocess.Popen(
                    ["espeak", "-s", "150", "-p", "60", text],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
        except OSError:
            return None
        return None
