"""Text-to-speech engine with a background worker."""

from __future__ import annotations

import asyncio
import concurrent.futures
import importlib
import importlib.util
import queue
import threading
from typing import Any

from core.errors import CapabilityUnavailable
from core.logging import logger


BASE_WORDS_PER_MINUTE = 200


class SpeechEngine:
    """pyttsx3 speech engine owned by a single worker thread.

    Utterances are spoken one at a time in submission order. Cancelling the
    coroutine returned by :meth:`speak` drops the utterance if it has not
    started yet, or stops it mid-sentence if it is playing.
    """

    def __init__(self, rate: float = 0.95, voice: str | None = None) -> None:
        if importlib.util.find_spec("pyttsx3") is None:
            raise CapabilityUnavailable("speech", "pyttsx3 is not installed")

        self._pyttsx3 = importlib.import_module("pyttsx3")
        self._rate = rate
        self._voice = voice
        self._q: queue.Queue[tuple[str, concurrent.futures.Future[None]] | None] = queue.Queue()
        self._lock = threading.Lock()
        self._engine: Any = None
        self._current: concurrent.futures.Future[None] | None = None
        self._ready = threading.Event()
        self._init_error: BaseException | None = None

        self._t = threading.Thread(target=self._worker, name="speech-worker", daemon=True)
        self._t.start()
        self._ready.wait(timeout=5.0)
        if self._init_error is not None:
            raise CapabilityUnavailable("speech", str(self._init_error)) from self._init_error

    def _worker(self) -> None:
        try:
            engine = self._pyttsx3.init()
            engine.setProperty("rate", int(BASE_WORDS_PER_MINUTE * self._rate))
            if self._voice:
                engine.setProperty("voice", self._voice)
        except Exception as exc:
            self._init_error = exc
            self._ready.set()
            return

        self._engine = engine
        self._ready.set()
        while True:
            item = self._q.get()
            if item is None:
                break
            text, future = item
            if not future.set_running_or_notify_cancel():
                continue
            with self._lock:
                self._current = future
            try:
                engine.say(text)
                engine.runAndWait()
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(None)
            finally:
                with self._lock:
                    self._current = None

    async def speak(self, text: str) -> None:
        future: concurrent.futures.Future[None] = concurrent.futures.Future()
        self._q.put((text, future))
        try:
            await asyncio.wrap_future(future)
        except asyncio.CancelledError:
            self._interrupt(future)
            raise

    def _interrupt(self, future: concurrent.futures.Future[None]) -> None:
        if future.cancel():
            return
        with self._lock:
            playing = self._current is future
        if playing and self._engine is not None:
            try:
                self._engine.stop()
            except Exception:
                logger.exception("[SPEECH] Failed to stop utterance")

    def flush(self) -> None:
        """Drop queued utterances that have not started yet."""

        removed = 0
        try:
            while True:
                item = self._q.get_nowait()
                if item is not None:
                    item[1].cancel()
                    removed += 1
        except queue.Empty:
            pass
        if removed:
            logger.info("[SPEECH] Dropped %d queued utterances", removed)

    def close(self) -> None:
        self.flush()
        self._q.put(None)
        self._t.join(timeout=1.0)
