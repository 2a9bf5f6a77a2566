"""Tests for the snapshot and save flow of the perception app."""

from __future__ import annotations

import asyncio
from copy import deepcopy
from datetime import datetime

from config.controller import DEFAULTS
from core.app import STATUS_MODEL_FAILED, STATUS_READY, PerceptionApp
from core.errors import CapabilityUnavailable
from hardware.camera import Frame, UnavailableFrameSource
from interaction.audio_hal import FakeSpeechBackend, FakeToneBackend
from vision.detections import Detection


BOOK = Detection(label="book", confidence=0.92, bbox=(310.0, 162.5, 50.0, 175.0))


class _FakeFrameSource:
    def __init__(self) -> None:
        self.selected: list[int] = []

    def read(self) -> Frame:
        return Frame(image=None, width=640, height=480, captured_at=0.0)

    def list_devices(self) -> list[int]:
        return [0, 1]

    def select_device(self, device_index: int) -> None:
        self.selected.append(device_index)

    def close(self) -> None:
        pass


class _FakeDetector:
    def __init__(self, detections: list[Detection] | None = None, load_error: Exception | None = None) -> None:
        self.detections = detections if detections is not None else [BOOK]
        self.load_error = load_error
        self.fail = False
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    async def load(self) -> None:
        if self.load_error is not None:
            raise self.load_error
        self._ready = True

    async def detect(self, frame: Frame) -> list[Detection]:
        if self.fail:
            raise RuntimeError("inference exploded")
        return list(self.detections)


def _app(detector: _FakeDetector, saved: list[str], frame_source=None) -> tuple[PerceptionApp, FakeSpeechBackend]:
    config = deepcopy(DEFAULTS)
    config["narration"]["pause_ms"] = 0
    speech = FakeSpeechBackend()
    app = PerceptionApp(
        config=config,
        frame_source=frame_source or _FakeFrameSource(),
        detector=detector,
        speech=speech,
        tones=FakeToneBackend(),
        persist=saved.append,
        wall_clock=lambda: datetime(2024, 1, 1, 10, 0, 0),
    )
    return app, speech


def test_snapshot_before_model_load_is_rejected() -> None:
    async def _run() -> None:
        saved: list[str] = []
        app, _ = _app(_FakeDetector(), saved)

        result = await app.take_snapshot()

        assert result.accepted is False
        assert result.summary == "Model not ready"
        assert app.recorder.pending == []

    asyncio.run(_run())


def test_snapshot_narrates_and_save_writes_cycles() -> None:
    async def _run() -> None:
        saved: list[str] = []
        app, speech = _app(_FakeDetector(), saved)
        await app.start()
        assert app.status == STATUS_READY

        result = await app.take_snapshot()
        assert result.accepted is True
        assert result.summary == "1 object(s) detected."
        assert result.annotations[0].text == "book 92%"
        await result.narration

        assert speech.spoken == ["book detected at 3, -2 at 1 metres 20 centimetres"]

        save = app.save()
        assert save.saved is True
        assert saved == ["detection 10:00:00 1st\nobject 1 {1 metres 20 centimetres}{3,-2}{92%}\n\n"]
        assert app.recorder.next_ordinal == 1

        assert app.save().saved is False
        assert len(saved) == 1
        await app.close()

    asyncio.run(_run())


def test_empty_snapshot_records_cycle_without_narration() -> None:
    async def _run() -> None:
        saved: list[str] = []
        app, speech = _app(_FakeDetector([]), saved)
        await app.detector.load()

        result = await app.take_snapshot()

        assert result.accepted is True
        assert result.summary == "No detections"
        assert result.narration is None
        assert result.cycle is not None and result.cycle.detections == ()
        app.save()
        assert saved == ["detection 10:00:00 1st\nno_objects_detected\n\n"]
        assert speech.spoken == []

    asyncio.run(_run())


def test_failed_detection_records_nothing() -> None:
    async def _run() -> None:
        saved: list[str] = []
        detector = _FakeDetector()
        app, _ = _app(detector, saved)
        await detector.load()
        detector.fail = True

        result = await app.take_snapshot()

        assert result.accepted is False
        assert app.recorder.pending == []

    asyncio.run(_run())


def test_missing_camera_is_reported_once() -> None:
    async def _run() -> None:
        saved: list[str] = []
        detector = _FakeDetector()
        app, _ = _app(detector, saved, frame_source=UnavailableFrameSource("no device"))
        await detector.load()

        first = await app.take_snapshot()
        second = await app.take_snapshot()

        assert first.accepted is False and second.accepted is False
        assert app.status == "camera unavailable"
        assert await app.select_camera(1) is False

    asyncio.run(_run())


def test_model_load_failure_sets_status() -> None:
    async def _run() -> None:
        saved: list[str] = []
        app, _ = _app(_FakeDetector(load_error=CapabilityUnavailable("detector", "missing")), saved)

        await app.start()

        assert app.status == STATUS_MODEL_FAILED
        assert (await app.take_snapshot()).summary == "Model not ready"
        await app.close()

    asyncio.run(_run())


def test_toggles_and_camera_selection() -> None:
    async def _run() -> None:
        saved: list[str] = []
        frame_source = _FakeFrameSource()
        app, _ = _app(_FakeDetector([]), saved, frame_source=frame_source)
        await app.start()

        assert app.toggle_live() is False
        assert app.toggle_live() is True
        assert app.toggle_threats() is False
        assert app.threat_monitor.is_running() is False
        assert app.list_cameras() == [0, 1]
        assert await app.select_camera(1) is True
        assert frame_source.selected == [1]
        await app.close()

    asyncio.run(_run())


def test_alert_flash_reports_on_and_off_intensity() -> None:
    async def _run() -> None:
        config = deepcopy(DEFAULTS)
        config["alerts"]["flash_duration_ms"] = 5
        flashes: list[float] = []
        sink_calls: list[str] = []
        app = PerceptionApp(
            config=config,
            frame_source=_FakeFrameSource(),
            detector=_FakeDetector(),
            tones=FakeToneBackend(),
            sink=lambda channel, frame, boxes: sink_calls.append(channel),
            on_flash=flashes.append,
        )

        await asyncio.gather(*app.dispatcher.dispatch("vehicle"))

        assert len(flashes) == 2
        assert flashes[0] > 0
        assert flashes[1] == 0
        assert "flash" not in sink_calls
        await app.close()

    asyncio.run(_run())
