"""Application runtime that wires detection, alerts, narration and recording."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
import time
from typing import Any, Callable, Mapping

from core.alert_policy import AlertThrottle, ThrottleSettings
from core.errors import CapabilityUnavailable
from core.logging import log_detections, log_info, log_warning, logger
from core.session import SessionStore
from hardware.camera import CameraSettings, FrameSource, OpenCVFrameSource, UnavailableFrameSource
from interaction.alerts import AlertDispatcher, AlertSettings
from interaction.audio_hal import SpeechBackend, ToneBackend
from interaction.flash import VisualFlash
from interaction.narration import NarrationQueue, NarrationSettings, compose_line
from services.detection_loop import OverlaySink
from services.overlay_loop import OverlayLoop, OverlaySettings
from services.threat_monitor import ThreatMonitor
from storage.cycles import CycleRecorder, DetectionCycle, SaveResult
from vision.detector import Detector, DetectorSettings, build_detector
from vision.overlay import LIVE_STYLE, BoxAnnotation, build_annotations
from vision.spatial import Calibration, SpatialEstimator
from vision.threats import ThreatClassifier, ThreatSettings


STATUS_LOADING = "Loading model..."
STATUS_READY = "Ready to detect objects"
STATUS_MODEL_FAILED = "Model load failed"


@dataclass(frozen=True)
class SnapshotResult:
    """Outcome of one snapshot action."""

    accepted: bool
    summary: str
    cycle: DetectionCycle | None = None
    annotations: list[BoxAnnotation] = field(default_factory=list)
    narration: asyncio.Task[None] | None = None


class PerceptionApp:
    """One perception session: two loops, the snapshot path and saved cycles."""

    def __init__(
        self,
        *,
        config: Mapping[str, Any],
        frame_source: FrameSource,
        detector: Detector,
        speech: SpeechBackend | None = None,
        tones: ToneBackend | None = None,
        persist: Callable[[str], Any] | None = None,
        sink: OverlaySink | None = None,
        on_flash: Callable[[float], None] | None = None,
        session: SessionStore | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.session = session or SessionStore()
        self.frame_source = frame_source
        self.detector = detector
        self.speech = speech
        self.tones = tones
        self._persist = persist
        self._sink = sink
        self._on_flash_change = on_flash
        self._reported: set[str] = set()
        self.status = STATUS_LOADING

        alert_settings = AlertSettings.from_config(config)
        threat_settings = ThreatSettings.from_config(config)
        self.estimator = SpatialEstimator(Calibration.from_config(config))
        self.classifier = ThreatClassifier.from_settings(threat_settings)
        self.throttle = AlertThrottle(self.session, ThrottleSettings.from_config(config), clock)
        self.flash = VisualFlash(alert_settings.flash_duration_ms, on_change=self._on_flash)
        self.dispatcher = AlertDispatcher(speech, tones, self.flash, alert_settings)
        self.narration = (
            NarrationQueue(speech, NarrationSettings.from_config(config)) if speech is not None else None
        )
        self.recorder = CycleRecorder(self.session, self.estimator, wall_clock)
        self.overlay = OverlayLoop(frame_source, detector, sink, OverlaySettings.from_config(config))
        self.threat_monitor = ThreatMonitor(
            frame_source,
            detector,
            self.classifier,
            self.throttle,
            self.dispatcher,
            threat_settings,
            sink=sink,
            flash=self.flash,
            clock=clock,
        )

    def report_unavailable(self, exc: CapabilityUnavailable) -> None:
        """Surface a missing capability once."""

        if exc.capability in self._reported:
            return
        self._reported.add(exc.capability)
        self.status = f"{exc.capability} unavailable"
        log_warning(f"{exc.capability.capitalize()} unavailable: {exc.reason}")

    async def start(self) -> None:
        """Load the detector and start both loops."""

        self.status = STATUS_LOADING
        load = getattr(self.detector, "load", None)
        if callable(load):
            try:
                await load()
            except CapabilityUnavailable as exc:
                self.report_unavailable(exc)
                self.status = STATUS_MODEL_FAILED
            except Exception as exc:
                logger.exception("Detector load failed: %s", exc)
                self.status = STATUS_MODEL_FAILED
        if self.detector.ready:
            self.status = STATUS_READY
            log_info(f"✅ {STATUS_READY}", style="bold green")
        self.overlay.start()
        self.threat_monitor.start()

    def toggle_live(self) -> bool:
        """Pause or resume the live overlay; returns whether it is now running."""

        if self.overlay.is_running():
            self.overlay.stop()
            return False
        self.overlay.start()
        return True

    def toggle_threats(self) -> bool:
        if self.threat_monitor.is_running():
            self.threat_monitor.stop()
            return False
        self.threat_monitor.start()
        return True

    async def take_snapshot(self) -> SnapshotResult:
        """Detect on one frozen frame, record a cycle and narrate it."""

        if not self.detector.ready:
            log_warning("Model not ready")
            return SnapshotResult(accepted=False, summary="Model not ready")

        try:
            frame = await asyncio.to_thread(self.frame_source.read)
        except CapabilityUnavailable as exc:
            self.report_unavailable(exc)
            return SnapshotResult(accepted=False, summary=str(exc))
        except Exception as exc:
            logger.warning("[SNAPSHOT] Frame capture failed: %s", exc)
            return SnapshotResult(accepted=False, summary="Camera frame unavailable")

        try:
            detections = await self.detector.detect(frame)
        except Exception as exc:
            logger.warning("[SNAPSHOT] Detection failed: %s", exc)
            return SnapshotResult(accepted=False, summary="Detection failed")

        log_detections("[SNAPSHOT]", [detection.summary() for detection in detections])
        annotations = build_annotations(detections, LIVE_STYLE)
        if self._sink is not None:
            self._sink("snapshot", frame, annotations)

        cycle = self.recorder.record(detections, frame.width, frame.height)
        if not cycle.detections:
            return SnapshotResult(accepted=True, summary="No detections", cycle=cycle)

        narration = None
        if self.narration is not None:
            narration = self.narration.narrate(
                compose_line(item.label, item.coord_x, item.coord_y, item.distance)
                for item in cycle.detections
            )
        return SnapshotResult(
            accepted=True,
            summary=f"{len(cycle.detections)} object(s) detected.",
            cycle=cycle,
            annotations=annotations,
            narration=narration,
        )

    def save(self) -> SaveResult:
        """Flush pending cycles through the persist capability."""

        if self._persist is None:
            raise RuntimeError("No persist capability configured")
        result = self.recorder.flush(self._persist)
        if self._sink is not None and result.saved:
            self._sink("snapshot", None, [])
        return result

    def list_cameras(self) -> list[int]:
        return self.frame_source.list_devices()

    async def select_camera(self, device_index: int) -> bool:
        try:
            await asyncio.to_thread(self.frame_source.select_device, device_index)
        except CapabilityUnavailable as exc:
            log_warning(str(exc))
            return False
        return True

    async def close(self) -> None:
        await self.overlay.close()
        await self.threat_monitor.close()
        if self.narration is not None:
            await self.narration.close()
        await self.dispatcher.close()

    def _on_flash(self, intensity: float) -> None:
        logger.debug("[ALERT] Flash intensity %.2f", intensity)
        if self._on_flash_change is not None:
            self._on_flash_change(intensity)


def build_app(
    config: Mapping[str, Any],
    *,
    persist: Callable[[str], Any] | None = None,
    sink: OverlaySink | None = None,
    on_flash: Callable[[float], None] | None = None,
) -> PerceptionApp:
    """Construct a :class:`PerceptionApp` with the configured hardware backends.

    Missing capabilities are reported and replaced by idle stand-ins so the
    app still starts.
    """

    from interaction.speech import SpeechEngine
    from interaction.tones import TonePlayer

    unavailable: list[CapabilityUnavailable] = []

    try:
        frame_source: FrameSource = OpenCVFrameSource(CameraSettings.from_config(config))
    except CapabilityUnavailable as exc:
        unavailable.append(exc)
        frame_source = UnavailableFrameSource(exc.reason)

    detector = build_detector(DetectorSettings.from_config(config))

    speech: SpeechBackend | None
    try:
        speech = SpeechEngine(rate=NarrationSettings.from_config(config).rate)
    except CapabilityUnavailable as exc:
        unavailable.append(exc)
        speech = None

    tones: ToneBackend | None
    try:
        tones = TonePlayer()
    except CapabilityUnavailable as exc:
        unavailable.append(exc)
        tones = None

    app = PerceptionApp(
        config=config,
        frame_source=frame_source,
        detector=detector,
        speech=speech,
        tones=tones,
        persist=persist,
        sink=sink,
        on_flash=on_flash,
    )
    for exc in unavailable:
        app.report_unavailable(exc)
    return app
