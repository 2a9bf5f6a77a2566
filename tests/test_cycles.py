"""Tests for snapshot cycle recording and flushing."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from core.session import SessionStore
from storage.cycles import CycleRecorder
from vision.detections import Detection
from vision.spatial import SpatialEstimator


# Centre (335, 250) in a 640x480 frame, 175 px tall: {3,-2} at 1.2 m.
BOOK = Detection(label="book", confidence=0.92, bbox=(310.0, 162.5, 50.0, 175.0))


def _recorder() -> tuple[CycleRecorder, SessionStore]:
    session = SessionStore()
    recorder = CycleRecorder(session, SpatialEstimator(), clock=lambda: datetime(2024, 1, 1, 10, 0, 0))
    return recorder, session


def test_record_builds_cycle_entries() -> None:
    recorder, _ = _recorder()

    cycle = recorder.record([BOOK], 640, 480)

    assert cycle.timestamp == "10:00:00"
    assert cycle.ordinal == 1
    entry = cycle.detections[0]
    assert (entry.label, entry.confidence_percent) == ("book", 92)
    assert (entry.coord_x, entry.coord_y) == (3, -2)
    assert entry.distance == "1 metres 20 centimetres"
    assert recorder.serialize() == (
        "detection 10:00:00 1st\nobject 1 {1 metres 20 centimetres}{3,-2}{92%}\n\n"
    )


def test_ordinals_increase_and_reset_after_flush() -> None:
    recorder, session = _recorder()
    saved: list[str] = []

    assert [recorder.record([BOOK], 640, 480).ordinal for _ in range(3)] == [1, 2, 3]

    result = recorder.flush(saved.append)

    assert result.saved is True
    assert result.cycle_count == 3
    assert len(saved) == 1
    assert saved[0].count("detection 10:00:00") == 3
    assert session.pending_cycles == []
    assert recorder.record([], 640, 480).ordinal == 1


def test_flushing_empty_log_is_a_reported_no_op() -> None:
    recorder, _ = _recorder()
    saved: list[str] = []

    result = recorder.flush(saved.append)

    assert result.saved is False
    assert result.message == "No detections to save."
    assert saved == []


def test_failed_persist_keeps_pending_cycles() -> None:
    recorder, session = _recorder()
    recorder.record([BOOK], 640, 480)

    def _fail(content: str) -> None:
        raise OSError("disk full")

    with pytest.raises(OSError):
        recorder.flush(_fail)

    assert len(session.pending_cycles) == 1
    assert recorder.next_ordinal == 2


def test_flush_reports_persisted_path(tmp_path: Path) -> None:
    recorder, _ = _recorder()
    recorder.record([BOOK], 640, 480)
    target = tmp_path / "cycles.txt"

    def _write(content: str) -> Path:
        target.write_text(content, encoding="utf-8")
        return target

    result = recorder.flush(_write)

    assert result.path == target
    assert target.read_text(encoding="utf-8").startswith("detection 10:00:00 1st\n")
