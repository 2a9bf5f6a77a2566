"""Diagnostics routines for the speech and tone channels."""

from __future__ import annotations

import asyncio
import importlib
import importlib.util

from core.logging import logger
from diagnostics.models import DiagnosticResult, DiagnosticStatus
from interaction.audio_hal import SpeechBackend, ToneBackend


def probe(
    speech: SpeechBackend | None = None,
    tones: ToneBackend | None = None,
) -> DiagnosticResult:
    """Run an audio probe to validate speech and tone availability.

    Args:
        speech: Optional offline speech backend for testing.
        tones: Optional offline tone backend for testing.

    Returns:
        Diagnostic result indicating audio output readiness.
    """

    name = "audio_output"

    if speech is not None or tones is not None:
        try:
            asyncio.run(_exercise(speech, tones))
        except Exception as exc:  # noqa: BLE001 - probe should not raise
            return DiagnosticResult(
                name=name,
                status=DiagnosticStatus.FAIL,
                details=f"Offline audio probe failed: {exc}",
            )
        channels = [label for label, backend in (("speech", speech), ("tones", tones)) if backend]
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.PASS,
            details=f"Offline channels: {', '.join(channels)}",
        )

    missing = [module for module in ("pyttsx3", "pyaudio", "numpy") if importlib.util.find_spec(module) is None]
    if len(missing) == 3:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="No speech or tone backend installed",
        )
    if missing:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"Missing audio deps: {', '.join(missing)}",
        )

    try:
        output_count = _count_output_devices()
    except Exception as exc:  # noqa: BLE001 - probe should not raise
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Audio output probe failed: {exc}",
        )
    if output_count == 0:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details="No audio output devices found",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"Audio output devices: {output_count}",
    )


async def _exercise(speech: SpeechBackend | None, tones: ToneBackend | None) -> None:
    if speech is not None:
        await speech.speak("diagnostics")
    if tones is not None:
        await tones.play_sequence(1, 40, 0, 880.0)


def _count_output_devices() -> int:
    pyaudio = importlib.import_module("pyaudio")
    audio = pyaudio.PyAudio()
    count = 0
    try:
        for i in range(audio.get_device_count()):
            info = audio.get_device_info_by_index(i)
            if info.get("maxOutputChannels", 0) <= 0:
                continue
            count += 1
            logger.info(
                "[AUDIO DIAG] Device %s: %s | Output Channels: %s",
                i,
                info.get("name"),
                info.get("maxOutputChannels"),
            )
    finally:
        audio.terminate()
    return count
