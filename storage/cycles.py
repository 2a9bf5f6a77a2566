"""Snapshot detection cycles and the pending cycle log."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable

from core.logging import logger
from core.session import SessionStore
from storage.serialization import format_distance, serialize_cycles
from vision.detections import Detection
from vision.spatial import SpatialEstimator


@dataclass(frozen=True)
class CycleDetection:
    """One object entry inside a recorded cycle."""

    label: str
    confidence_percent: int
    coord_x: int
    coord_y: int
    distance: str


@dataclass(frozen=True)
class DetectionCycle:
    """All detections captured by one snapshot action."""

    timestamp: str
    ordinal: int
    detections: tuple[CycleDetection, ...] = ()


@dataclass(frozen=True)
class SaveResult:
    """Outcome of flushing the pending cycle log."""

    saved: bool
    cycle_count: int
    path: Path | None = None
    message: str = ""


def format_clock(now: datetime) -> str:
    return now.strftime("%H:%M:%S")


class CycleRecorder:
    """Accumulate snapshot cycles in the session store and flush them on save."""

    def __init__(
        self,
        session: SessionStore,
        estimator: SpatialEstimator,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._session = session
        self._estimator = estimator
        self._clock = clock

    @property
    def pending(self) -> list[DetectionCycle]:
        return list(self._session.pending_cycles)

    @property
    def next_ordinal(self) -> int:
        return self._session.next_ordinal

    def build_entries(
        self,
        detections: Iterable[Detection],
        frame_width: float,
        frame_height: float,
    ) -> tuple[CycleDetection, ...]:
        entries: list[CycleDetection] = []
        for detection in detections:
            estimate = self._estimator.estimate(detection, frame_width, frame_height)
            entries.append(
                CycleDetection(
                    label=detection.label,
                    confidence_percent=detection.confidence_percent,
                    coord_x=estimate.coord_x,
                    coord_y=estimate.coord_y,
                    distance=format_distance(estimate.distance_m),
                )
            )
        return tuple(entries)

    def record(
        self,
        detections: Iterable[Detection],
        frame_width: float,
        frame_height: float,
        now: datetime | None = None,
    ) -> DetectionCycle:
        """Append a cycle for one snapshot and advance the ordinal."""

        timestamp = format_clock(now or self._clock())
        cycle = DetectionCycle(
            timestamp=timestamp,
            ordinal=self._session.next_ordinal,
            detections=self.build_entries(detections, frame_width, frame_height),
        )
        self._session.pending_cycles.append(cycle)
        self._session.next_ordinal += 1
        logger.info(
            "[SNAPSHOT] Recorded cycle %s at %s (%d objects)",
            cycle.ordinal,
            cycle.timestamp,
            len(cycle.detections),
        )
        return cycle

    def serialize(self) -> str:
        return serialize_cycles(self._session.pending_cycles)

    def flush(self, persist: Callable[[str], Any]) -> SaveResult:
        """Persist all pending cycles and reset the log.

        The log is only cleared once ``persist`` returns; a failing persist
        propagates and leaves the pending cycles in place.
        """

        count = len(self._session.pending_cycles)
        if count == 0:
            logger.info("[SNAPSHOT] No detections to save.")
            return SaveResult(saved=False, cycle_count=0, message="No detections to save.")

        content = self.serialize()
        result = persist(content)
        self._session.reset_cycles()
        path = result if isinstance(result, Path) else None
        logger.info("[SNAPSHOT] Saved %d cycles%s", count, f" to {path}" if path else "")
        return SaveResult(saved=True, cycle_count=count, path=path, message="Saved and reset cycles.")
