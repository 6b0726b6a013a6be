"""Short synthesized sound effects played through pygame.mixer.

This stays outside the core logic. Tones are rendered to 16-bit mono PCM once
at startup; when the mixer cannot initialise every call is a silent no-op.
"""

from __future__ import annotations

import logging
import math
from array import array
from enum import StrEnum

import pygame

logger = logging.getLogger(__name__)


class SoundKind(StrEnum):
    TICK = "tick"
    CLICK = "click"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    WHOOSH = "whoosh"


class SoundEffects:
    _sample_rate = 22050
    _amp = 32767

    def __init__(self, *, enabled: bool = True) -> None:
        self._enabled = bool(enabled)
        self._available = False
        self._sounds: dict[SoundKind, pygame.mixer.Sound] = {}
        self._channel: pygame.mixer.Channel | None = None
        self._channels = 1

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=1, buffer=512)
            freq, _size, channels = pygame.mixer.get_init()
            self._sample_rate = int(freq)
            self._channels = max(1, int(channels))
            self._sounds = {
                SoundKind.TICK: self._build((self._render_tone_pcm(800.0, 0.05, gain=0.25),)),
                SoundKind.CLICK: self._build((self._render_tone_pcm(600.0, 0.05, gain=0.30),)),
                # C5, E5, G5
                SoundKind.CORRECT: self._build(
                    (
                        self._render_tone_pcm(523.0, 0.10, gain=0.30),
                        self._render_tone_pcm(659.0, 0.10, gain=0.30),
                        self._render_tone_pcm(784.0, 0.20, gain=0.30),
                    )
                ),
                SoundKind.INCORRECT: self._build(
                    (
                        self._render_tone_pcm(400.0, 0.15, gain=0.30),
                        self._render_tone_pcm(350.0, 0.20, gain=0.30),
                    )
                ),
                SoundKind.WHOOSH: self._build((self._render_sweep_pcm(300.0, 900.0, 0.18, gain=0.20),)),
            }
            self._channel = pygame.mixer.Channel(0)
            self._available = True
        except pygame.error as exc:
            logger.info("sound effects unavailable: %s", exc)
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)
        if not self._enabled and self._channel is not None:
            self._channel.stop()

    def play(self, kind: SoundKind) -> bool:
        if not (self._enabled and self._available):
            return False
        assert self._channel is not None
        self._channel.play(self._sounds[kind])
        return True

    def _build(self, parts: tuple[array[int], ...]) -> pygame.mixer.Sound:
        mono = array("h")
        for part in parts:
            mono.extend(part)
        if self._channels == 1:
            return pygame.mixer.Sound(buffer=mono.tobytes())
        out = array("h", (sample for sample in mono for _ in range(self._channels)))
        return pygame.mixer.Sound(buffer=out.tobytes())

    def _render_tone_pcm(self, frequency_hz: float, duration_s: float, *, gain: float) -> array[int]:
        return self._render_sweep_pcm(frequency_hz, frequency_hz, duration_s, gain=gain)

    def _render_sweep_pcm(
        self,
        start_hz: float,
        end_hz: float,
        duration_s: float,
        *,
        gain: float,
    ) -> array[int]:
        sample_count = max(1, int(self._sample_rate * duration_s))
        fade_n = max(1, int(self._sample_rate * 0.008))
        out = array("h")
        phase = 0.0
        for idx in range(sample_count):
            envelope = 1.0
            if idx < fade_n:
                envelope = idx / float(fade_n)
            tail = sample_count - idx - 1
            if tail < fade_n:
                envelope = min(envelope, tail / float(fade_n))
            freq = start_hz + (end_hz - start_hz) * (idx / float(sample_count))
            phase += (2.0 * math.pi * freq) / float(self._sample_rate)
            sample = math.sin(phase) * gain * max(0.0, envelope)
            out.append(int(max(-1.0, min(1.0, sample)) * self._amp))
        return out
