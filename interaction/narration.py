"""Sequential narration of snapshot detections."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Iterable, Mapping

from core.logging import logger
from interaction.audio_hal import SpeechBackend


@dataclass(frozen=True)
class NarrationSettings:
    """Speech rate and inter-line pause for narration."""

    pause_ms: int = 100
    rate: float = 0.95

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "NarrationSettings":
        narration_cfg = config.get("narration") if isinstance(config, Mapping) else None
        if not isinstance(narration_cfg, Mapping):
            return cls()
        return cls(
            pause_ms=int(narration_cfg.get("pause_ms", 100)),
            rate=float(narration_cfg.get("rate", 0.95)),
        )


def compose_line(label: str, coord_x: int, coord_y: int, distance: str) -> str:
    return f"{label} detected at {coord_x}, {coord_y} at {distance}"


class NarrationQueue:
    """Speak one line per object, replacing any narration still in progress."""

    def __init__(self, speech: SpeechBackend, settings: NarrationSettings | None = None) -> None:
        self._speech = speech
        self.settings = settings or NarrationSettings()
        self._task: asyncio.Task[None] | None = None

    @property
    def current(self) -> asyncio.Task[None] | None:
        return self._task

    def is_speaking(self) -> bool:
        return self._task is not None and not self._task.done()

    def narrate(self, lines: Iterable[str]) -> asyncio.Task[None]:
        """Start a narration session, cancelling the previous one."""

        self.cancel()
        self._task = asyncio.create_task(self._speak_all(list(lines)), name="narration")
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            logger.info("[NARRATION] Interrupting previous narration")
            self._task.cancel()
        self._task = None

    async def _speak_all(self, lines: list[str]) -> None:
        pause_s = max(0, self.settings.pause_ms) / 1000.0
        for index, line in enumerate(lines):
            try:
                await self._speech.speak(line)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("[NARRATION] Failed to speak %r: %s", line, exc)
            if index < len(lines) - 1 and pause_s > 0:
                await asyncio.sleep(pause_s)

    async def close(self) -> None:
        task = self._task
        self.cancel()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
