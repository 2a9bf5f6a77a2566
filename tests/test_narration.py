"""Tests for sequential snapshot narration."""

from __future__ import annotations

import asyncio

from interaction.audio_hal import FakeSpeechBackend
from interaction.narration import NarrationQueue, NarrationSettings, compose_line


def test_compose_line() -> None:
    assert compose_line("book", 3, -2, "1 metres 20 centimetres") == (
        "book detected at 3, -2 at 1 metres 20 centimetres"
    )


def test_lines_are_spoken_in_order() -> None:
    async def _run() -> None:
        speech = FakeSpeechBackend()
        queue = NarrationQueue(speech, NarrationSettings(pause_ms=1))

        await queue.narrate(["first", "second", "third"])

        assert speech.spoken == ["first", "second", "third"]
        assert queue.is_speaking() is False

    asyncio.run(_run())


def test_new_session_interrupts_previous() -> None:
    async def _run() -> None:
        speech = FakeSpeechBackend(delay_s=0.05)
        queue = NarrationQueue(speech, NarrationSettings(pause_ms=0))

        old = queue.narrate(["a", "b"])
        await asyncio.sleep(0.01)
        new = queue.narrate(["c"])
        await new

        assert old.cancelled()
        assert speech.interrupted == ["a"]
        assert speech.spoken == ["c"]

    asyncio.run(_run())


def test_failed_line_does_not_stop_session() -> None:
    async def _run() -> None:
        speech = FakeSpeechBackend(fail_on={"a"})
        queue = NarrationQueue(speech, NarrationSettings(pause_ms=0))

        await queue.narrate(["a", "b"])

        assert speech.started == ["a", "b"]
        assert speech.spoken == ["b"]

    asyncio.run(_run())


def test_close_cancels_active_session() -> None:
    async def _run() -> None:
        speech = FakeSpeechBackend(delay_s=1.0)
        queue = NarrationQueue(speech)

        queue.narrate(["long line"])
        await asyncio.sleep(0.01)
        await queue.close()

        assert queue.current is None
        assert speech.interrupted == ["long line"]

    asyncio.run(_run())
