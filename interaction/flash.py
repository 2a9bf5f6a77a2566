"""Transient full-screen flash used by hazard alerts."""

from __future__ import annotations

import asyncio
from typing import Callable


FLASH_INTENSITY = 0.12


class VisualFlash:
    """Flash state that clears itself ``duration_ms`` after the latest pulse."""

    def __init__(
        self,
        duration_ms: int = 220,
        on_change: Callable[[float], None] | None = None,
    ) -> None:
        self.duration_s = max(0, duration_ms) / 1000.0
        self._on_change = on_change
        self._intensity = 0.0
        self._generation = 0

    @property
    def intensity(self) -> float:
        return self._intensity

    @property
    def active(self) -> bool:
        return self._intensity > 0.0

    async def pulse(self) -> None:
        self._generation += 1
        generation = self._generation
        self._set(FLASH_INTENSITY)
        try:
            await asyncio.sleep(self.duration_s)
        finally:
            # A newer pulse owns the decay.
            if generation == self._generation:
                self._set(0.0)

    def clear(self) -> None:
        self._generation += 1
        self._set(0.0)

    def _set(self, intensity: float) -> None:
        if intensity == self._intensity:
            return
        self._intensity = intensity
        if self._on_change is not None:
            self._on_change(intensity)
