"""Thin speech and tone HAL with offline fakes."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


class SpeechBackend(Protocol):
    """Cancellable text-to-speech capability."""

    async def speak(self, text: str) -> None:
        """Speak ``text``; cancelling the awaiting task interrupts it."""

    def close(self) -> None:
        """Release the speech engine."""


class ToneBackend(Protocol):
    """Tone and clip playback capability."""

    async def play_sequence(
        self,
        count: int,
        duration_ms: int,
        gap_ms: int,
        frequency_hz: float,
    ) -> None:
        """Play ``count`` beeps separated by ``gap_ms`` of silence."""

    async def play_clip(self, path: Path) -> None:
        """Play a WAV clip."""


@dataclass
class FakeSpeechBackend:
    """Fake speech backend that records utterances."""

    delay_s: float = 0.0
    fail_on: set[str] = field(default_factory=set)
    spoken: list[str] = field(default_factory=list)
    started: list[str] = field(default_factory=list)
    interrupted: list[str] = field(default_factory=list)
    closed: bool = False

    async def speak(self, text: str) -> None:
        self.started.append(text)
        if text in self.fail_on:
            raise RuntimeError(f"Fake speech failure for {text!r}")
        try:
            if self.delay_s > 0:
                await asyncio.sleep(self.delay_s)
        except asyncio.CancelledError:
            self.interrupted.append(text)
            raise
        self.spoken.append(text)

    def close(self) -> None:
        self.closed = True


@dataclass
class FakeToneBackend:
    """Fake tone backend for offline diagnostics and tests."""

    can_play: bool = True
    delay_s: float = 0.0
    sequences: list[tuple[int, int, int, float]] = field(default_factory=list)
    clips: list[Path] = field(default_factory=list)

    async def play_sequence(
        self,
        count: int,
        duration_ms: int,
        gap_ms: int,
        frequency_hz: float,
    ) -> None:
        if not self.can_play:
            raise RuntimeError("Failed to open fake tone stream")
        if self.delay_s > 0:
            await asyncio.sleep(self.delay_s)
        self.sequences.append((count, duration_ms, gap_ms, frequency_hz))

    async def play_clip(self, path: Path) -> None:
        if not self.can_play:
            raise RuntimeError("Failed to open fake tone stream")
        self.clips.append(Path(path))
