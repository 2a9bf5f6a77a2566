"""Tests for the alert flash."""

from __future__ import annotations

import asyncio

from interaction.flash import FLASH_INTENSITY, VisualFlash


def test_pulse_decays_after_duration() -> None:
    async def _run() -> None:
        changes: list[float] = []
        flash = VisualFlash(duration_ms=20, on_change=changes.append)

        task = asyncio.create_task(flash.pulse())
        await asyncio.sleep(0)
        assert flash.intensity == FLASH_INTENSITY
        await task

        assert changes == [FLASH_INTENSITY, 0.0]
        assert flash.active is False

    asyncio.run(_run())


def test_overlapping_pulses_extend_the_flash() -> None:
    async def _run() -> None:
        changes: list[float] = []
        flash = VisualFlash(duration_ms=30, on_change=changes.append)

        first = asyncio.create_task(flash.pulse())
        await asyncio.sleep(0.015)
        second = asyncio.create_task(flash.pulse())
        await first
        assert flash.active is True
        await second

        assert changes == [FLASH_INTENSITY, 0.0]

    asyncio.run(_run())


def test_clear_resets_immediately() -> None:
    async def _run() -> None:
        flash = VisualFlash(duration_ms=1000)

        task = asyncio.create_task(flash.pulse())
        await asyncio.sleep(0)
        flash.clear()

        assert flash.active is False
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        assert flash.active is False

    asyncio.run(_run())
