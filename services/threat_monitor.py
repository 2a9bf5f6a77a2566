"""Fixed-interval hazard polling loop."""

from __future__ import annotations

import asyncio
import time
from typing import Callable

from core.alert_policy import AlertThrottle
from core.logging import logger
from hardware.camera import Frame, FrameSource
from interaction.alerts import AlertDispatcher
from interaction.flash import VisualFlash
from services.detection_loop import DetectionLoop, OverlaySink
from vision.detections import Detection
from vision.detector import Detector
from vision.overlay import THREAT_STYLE, BoxAnnotation, build_annotations
from vision.threats import ThreatClassifier, ThreatSettings


class ThreatMonitor(DetectionLoop):
    """Poll for hazard classes and dispatch throttled alerts."""

    name = "threat"

    def __init__(
        self,
        frame_source: FrameSource,
        detector: Detector,
        classifier: ThreatClassifier,
        throttle: AlertThrottle,
        dispatcher: AlertDispatcher,
        settings: ThreatSettings | None = None,
        sink: OverlaySink | None = None,
        flash: VisualFlash | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or ThreatSettings()
        super().__init__(frame_source, detector, self.settings.poll_interval_ms / 1000.0)
        self._classifier = classifier
        self._throttle = throttle
        self._dispatcher = dispatcher
        self._sink = sink
        self._flash = flash
        self._clock = clock
        self._clear_handle: asyncio.TimerHandle | None = None
        self.boxes: list[BoxAnnotation] = []

    async def run_once(self, generation: int | None = None) -> None:
        if not self._detector.ready:
            return
        frame = await self.read_frame()
        if frame is None:
            return
        detections = await self.detect(frame)
        if self.is_stale(generation):
            return
        self.handle_pass(detections, frame)

    def handle_pass(self, detections: list[Detection], frame: Frame | None = None) -> list[str]:
        """Classify, throttle and dispatch for one pass; returns the fired labels.

        Runs without yielding to the event loop.
        """

        threats = self._classifier.threats(detections)
        if not threats:
            self._clear_boxes()
            return []

        self._show_boxes(build_annotations(threats, THREAT_STYLE), frame)
        fired = self._throttle.evaluate_pass(
            self._classifier.alert_labels(threats),
            self._clock(),
        )
        for label in fired:
            self._dispatcher.dispatch(label)
        if fired:
            logger.info("[THREAT] Fired alerts: %s", ", ".join(fired))
        return fired

    def stop(self) -> bool:
        stopped = super().stop()
        self._clear_boxes()
        if self._flash is not None:
            self._flash.clear()
        return stopped

    def _show_boxes(self, boxes: list[BoxAnnotation], frame: Frame | None) -> None:
        self.boxes = boxes
        if self._sink is not None:
            self._sink(THREAT_STYLE.name, frame, boxes)
        self._cancel_clear()
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(self.settings.box_clear_ms / 1000.0, self._clear_boxes)

    def _cancel_clear(self) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None

    def _clear_boxes(self) -> None:
        self._cancel_clear()
        if not self.boxes:
            return
        self.boxes = []
        if self._sink is not None:
            self._sink(THREAT_STYLE.name, None, [])
