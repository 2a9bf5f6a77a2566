"""Multi-channel hazard alert dispatch."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Mapping

from core.logging import log_alert, logger
from interaction.audio_hal import SpeechBackend, ToneBackend
from interaction.flash import VisualFlash


@dataclass(frozen=True)
class AlertSettings:
    """Tone, speech and flash parameters for one alert."""

    beep_count: int = 3
    beep_duration_ms: int = 80
    beep_gap_ms: int = 120
    beep_frequency_hz: float = 880.0
    clip_path: Path | None = None
    flash_duration_ms: int = 220
    message_template: str = "Alert! {label} detected in the live frame"

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "AlertSettings":
        alerts_cfg = config.get("alerts") if isinstance(config, Mapping) else None
        if not isinstance(alerts_cfg, Mapping):
            return cls()
        clip_path = alerts_cfg.get("clip_path")
        return cls(
            beep_count=int(alerts_cfg.get("beep_count", 3)),
            beep_duration_ms=int(alerts_cfg.get("beep_duration_ms", 80)),
            beep_gap_ms=int(alerts_cfg.get("beep_gap_ms", 120)),
            beep_frequency_hz=float(alerts_cfg.get("beep_frequency_hz", 880.0)),
            clip_path=Path(str(clip_path)).expanduser() if clip_path else None,
            flash_duration_ms=int(alerts_cfg.get("flash_duration_ms", 220)),
            message_template=str(
                alerts_cfg.get("message_template", "Alert! {label} detected in the live frame")
            ),
        )

    def message(self, label: str) -> str:
        return self.message_template.format(label=label)


class AlertDispatcher:
    """Fire tone, speech and flash channels for a triggered alert label.

    Channels run as independent tasks. A failing channel is logged and never
    cancels its siblings; :meth:`dispatch` returns without waiting for any of
    them.
    """

    def __init__(
        self,
        speech: SpeechBackend | None,
        tones: ToneBackend | None,
        flash: VisualFlash | None,
        settings: AlertSettings | None = None,
    ) -> None:
        self._speech = speech
        self._tones = tones
        self._flash = flash
        self.settings = settings or AlertSettings()
        self._tasks: set[asyncio.Task[None]] = set()
        self.dispatched: int = 0

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, label: str) -> list[asyncio.Task[None]]:
        message = self.settings.message(label)
        log_alert(label, message)
        self.dispatched += 1

        tasks: list[asyncio.Task[None]] = []
        if self._tones is not None:
            tasks.append(self._spawn(label, "tone", self._play_tone))
        if self._speech is not None:
            tasks.append(self._spawn(label, "speech", lambda: self._speech.speak(message)))
        if self._flash is not None:
            tasks.append(self._spawn(label, "flash", self._flash.pulse))
        return tasks

    def _play_tone(self) -> Awaitable[None]:
        settings = self.settings
        if settings.clip_path is not None:
            return self._tones.play_clip(settings.clip_path)
        return self._tones.play_sequence(
            settings.beep_count,
            settings.beep_duration_ms,
            settings.beep_gap_ms,
            settings.beep_frequency_hz,
        )

    def _spawn(
        self,
        label: str,
        channel: str,
        start: Callable[[], Awaitable[None]],
    ) -> asyncio.Task[None]:
        task = asyncio.create_task(
            self._run_channel(label, channel, start),
            name=f"alert-{channel}-{label}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_channel(
        self,
        label: str,
        channel: str,
        start: Callable[[], Awaitable[None]],
    ) -> None:
        try:
            await start()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("[ALERT] %s channel failed for %s: %s", channel, label, exc)

    async def close(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
