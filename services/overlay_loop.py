"""Continuous live overlay loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from hardware.camera import FrameSource
from services.detection_loop import DetectionLoop, OverlaySink
from vision.detector import Detector
from vision.overlay import LIVE_STYLE, BoxAnnotation, build_annotations


@dataclass(frozen=True)
class OverlaySettings:
    """Timing for the live overlay loop."""

    frame_period_ms: int = 33

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "OverlaySettings":
        overlay_cfg = config.get("overlay") if isinstance(config, Mapping) else None
        if not isinstance(overlay_cfg, Mapping):
            return cls()
        return cls(frame_period_ms=int(overlay_cfg.get("frame_period_ms", 33)))


class OverlayLoop(DetectionLoop):
    """Annotate every live frame with the detector's boxes."""

    name = "overlay"

    def __init__(
        self,
        frame_source: FrameSource,
        detector: Detector,
        sink: OverlaySink | None = None,
        settings: OverlaySettings | None = None,
    ) -> None:
        self.settings = settings or OverlaySettings()
        super().__init__(frame_source, detector, self.settings.frame_period_ms / 1000.0)
        self._sink = sink
        self.latest: list[BoxAnnotation] = []

    async def run_once(self, generation: int | None = None) -> None:
        if not self._detector.ready:
            return
        frame = await self.read_frame()
        if frame is None:
            return
        detections = await self.detect(frame)
        if self.is_stale(generation):
            return
        self.latest = build_annotations(detections, LIVE_STYLE)
        if self._sink is not None:
            self._sink(LIVE_STYLE.name, frame, self.latest)
