"""Base class for cooperative detection loops sharing one frame source."""

from __future__ import annotations

import asyncio
from typing import Callable

from core.logging import logger
from hardware.camera import Frame, FrameSource
from vision.detections import Detection
from vision.detector import Detector
from vision.overlay import BoxAnnotation


OverlaySink = Callable[[str, "Frame | None", list[BoxAnnotation]], None]


class DetectionLoop:
    """Run ``run_once`` repeatedly on the event loop until stopped.

    ``stop`` only prevents the next iteration. An inference already in flight
    finishes in its worker thread and its result is discarded.
    """

    name = "loop"

    def __init__(
        self,
        frame_source: FrameSource,
        detector: Detector,
        period_s: float,
    ) -> None:
        self._frame_source = frame_source
        self._detector = detector
        self._period_s = max(0.0, period_s)
        self._stop_event = asyncio.Event()
        self._stop_event.set()
        self._tasks: set[asyncio.Task[None]] = set()
        self._generation = 0
        self._failure_streak = 0
        self.passes = 0

    @property
    def active_tasks(self) -> int:
        return len(self._tasks)

    def is_running(self) -> bool:
        return not self._stop_event.is_set()

    def start(self) -> bool:
        if self.is_running():
            return False
        self._generation += 1
        self._stop_event = asyncio.Event()
        task = asyncio.create_task(self._loop(self._generation), name=f"{self.name}-loop")
        # Superseded tasks stay tracked until their in-flight pass finishes.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("[%s] Started", self.name.upper())
        return True

    def stop(self) -> bool:
        if not self.is_running():
            return False
        self._stop_event.set()
        logger.info("[%s] Stopped", self.name.upper())
        return True

    async def close(self) -> None:
        self.stop()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    def is_stale(self, generation: int | None) -> bool:
        """Return whether results started under ``generation`` must be discarded."""

        if generation is None:
            return False
        return generation != self._generation or not self.is_running()

    async def _loop(self, generation: int) -> None:
        stop_event = self._stop_event
        while not stop_event.is_set():
            try:
                await self.run_once(generation)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("[%s] Pass failed", self.name.upper())
            if stop_event.is_set():
                break
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._period_s)
            except asyncio.TimeoutError:
                pass

    async def run_once(self, generation: int | None = None) -> None:
        raise NotImplementedError()

    async def read_frame(self) -> Frame | None:
        try:
            return await asyncio.to_thread(self._frame_source.read)
        except Exception as exc:
            logger.debug("[%s] Frame unavailable: %s", self.name.upper(), exc)
            return None

    async def detect(self, frame: Frame) -> list[Detection]:
        """Run inference, treating a failed call as an empty pass."""

        try:
            detections = await self._detector.detect(frame)
        except Exception as exc:
            self._failure_streak += 1
            if self._failure_streak == 1:
                logger.warning("[%s] Detection failed: %s", self.name.upper(), exc)
            return []
        if self._failure_streak:
            logger.info(
                "[%s] Detection recovered after %d failed passes",
                self.name.upper(),
                self._failure_streak,
            )
            self._failure_streak = 0
        self.passes += 1
        return detections
