"""Alert tone synthesis and playback."""

from __future__ import annotations

import asyncio
from pathlib import Path
import threading
from typing import Any
import wave

from core.logging import logger
from interaction.utils import CHANNELS, SAMPLE_WIDTH, TONE_RATE, require_module, resolve_format


ATTACK_S = 0.01
PEAK_GAIN = 0.25


def synthesize_beep(np: Any, duration_ms: int, frequency_hz: float, rate: int = TONE_RATE) -> bytes:
    """Return one int16 sine beep with a short attack and release ramp."""

    samples = max(1, int(rate * duration_ms / 1000))
    t = np.arange(samples) / float(rate)
    tone = np.sin(2.0 * np.pi * frequency_hz * t)
    ramp = max(1, min(int(rate * ATTACK_S), samples // 2))
    envelope = np.ones(samples)
    envelope[:ramp] = np.linspace(0.0, 1.0, ramp)
    envelope[-ramp:] = np.linspace(1.0, 0.0, ramp)
    pcm = (tone * envelope * PEAK_GAIN * 32767).astype(np.int16)
    return pcm.tobytes()


def silence(duration_ms: int, rate: int = TONE_RATE) -> bytes:
    return b"\x00" * (max(0, int(rate * duration_ms / 1000)) * SAMPLE_WIDTH * CHANNELS)


class TonePlayer:
    """PyAudio tone player; every playback opens and closes its own stream."""

    def __init__(self, output_device_index: int | None = None) -> None:
        self._pyaudio = require_module("pyaudio", "audio")
        self._np = require_module("numpy", "audio")
        self._format = resolve_format()
        self._output_device_index = output_device_index
        self._lock = threading.Lock()

    async def play_sequence(
        self,
        count: int,
        duration_ms: int,
        gap_ms: int,
        frequency_hz: float,
    ) -> None:
        beep = synthesize_beep(self._np, duration_ms, frequency_hz)
        gap = silence(gap_ms)
        chunks: list[bytes] = []
        for index in range(max(0, count)):
            chunks.append(beep)
            if index < count - 1:
                chunks.append(gap)
        if not chunks:
            return
        await asyncio.to_thread(self._write, b"".join(chunks), TONE_RATE, CHANNELS, self._format)

    async def play_clip(self, path: Path) -> None:
        with wave.open(str(path), "rb") as clip:
            frames = clip.readframes(clip.getnframes())
            rate = clip.getframerate()
            channels = clip.getnchannels()
            sample_width = clip.getsampwidth()
        audio = self._pyaudio.PyAudio()
        try:
            audio_format = audio.get_format_from_width(sample_width)
        finally:
            audio.terminate()
        await asyncio.to_thread(self._write, frames, rate, channels, audio_format)

    def _write(self, data: bytes, rate: int, channels: int, audio_format: int) -> None:
        with self._lock:
            audio = self._pyaudio.PyAudio()
            try:
                stream = audio.open(
                    format=audio_format,
                    channels=channels,
                    rate=rate,
                    output=True,
                    output_device_index=self._output_device_index,
                )
                try:
                    stream.write(data)
                finally:
                    stream.stop_stream()
                    stream.close()
            finally:
                audio.terminate()
        logger.debug("[TONE] Played %d bytes at %d Hz", len(data), rate)
