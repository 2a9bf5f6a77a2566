"""Tests for multi-channel alert dispatch."""

from __future__ import annotations

import asyncio
from pathlib import Path

from interaction.alerts import AlertDispatcher, AlertSettings
from interaction.audio_hal import FakeSpeechBackend, FakeToneBackend
from interaction.flash import VisualFlash


def test_dispatch_fires_all_channels() -> None:
    async def _run() -> None:
        speech = FakeSpeechBackend()
        tones = FakeToneBackend()
        changes: list[float] = []
        flash = VisualFlash(duration_ms=0, on_change=changes.append)
        dispatcher = AlertDispatcher(speech, tones, flash, AlertSettings())

        tasks = dispatcher.dispatch("vehicle")

        assert len(tasks) == 3
        assert speech.spoken == []
        await asyncio.gather(*tasks)

        assert speech.spoken == ["Alert! vehicle detected in the live frame"]
        assert tones.sequences == [(3, 80, 120, 880.0)]
        assert changes[0] > 0.0
        assert flash.active is False
        assert dispatcher.dispatched == 1

    asyncio.run(_run())


def test_failing_channel_does_not_block_siblings() -> None:
    async def _run() -> None:
        message = AlertSettings().message("vehicle")
        speech = FakeSpeechBackend(fail_on={message})
        tones = FakeToneBackend(can_play=False)
        flash = VisualFlash(duration_ms=10)
        dispatcher = AlertDispatcher(speech, tones, flash)

        tasks = dispatcher.dispatch("vehicle")
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert results == [None, None, None]
        assert speech.started == [message]
        assert flash.active is False

    asyncio.run(_run())


def test_clip_replaces_beeps_when_configured(tmp_path: Path) -> None:
    async def _run() -> None:
        tones = FakeToneBackend()
        clip = tmp_path / "alarm.wav"
        dispatcher = AlertDispatcher(None, tones, None, AlertSettings(clip_path=clip))

        await asyncio.gather(*dispatcher.dispatch("vehicle"))

        assert tones.clips == [clip]
        assert tones.sequences == []

    asyncio.run(_run())


def test_close_cancels_running_channels() -> None:
    async def _run() -> None:
        speech = FakeSpeechBackend(delay_s=1.0)
        dispatcher = AlertDispatcher(speech, None, None)

        dispatcher.dispatch("vehicle")
        await asyncio.sleep(0.01)
        assert dispatcher.pending == 1

        await dispatcher.close()

        assert speech.interrupted == ["Alert! vehicle detected in the live frame"]
        assert dispatcher.pending == 0

    asyncio.run(_run())


def test_settings_from_config() -> None:
    settings = AlertSettings.from_config(
        {"alerts": {"beep_count": 2, "message_template": "Careful, {label}!"}}
    )

    assert settings.beep_count == 2
    assert settings.message("vehicle") == "Careful, vehicle!"
