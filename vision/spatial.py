"""Egocentric position and pinhole distance estimation for detections."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Mapping

from config.controller import DEFAULT_REFERENCE_HEIGHTS_M
from vision.detections import Detection


@dataclass(frozen=True)
class Calibration:
    """Heuristic camera calibration constants."""

    pixels_per_cm: float = 5.0
    focal_length_px: float = 700.0
    min_box_height_px: float = 5.0
    reference_heights_m: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_REFERENCE_HEIGHTS_M)
    )

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "Calibration":
        perception_cfg = config.get("perception") if isinstance(config, Mapping) else None
        if not isinstance(perception_cfg, Mapping):
            return cls()
        heights = perception_cfg.get("reference_heights_m")
        if not isinstance(heights, Mapping):
            heights = DEFAULT_REFERENCE_HEIGHTS_M
        return cls(
            pixels_per_cm=float(perception_cfg.get("pixels_per_cm", 5.0)),
            focal_length_px=float(perception_cfg.get("focal_length_px", 700.0)),
            min_box_height_px=float(perception_cfg.get("min_box_height_px", 5.0)),
            reference_heights_m={str(k).lower(): float(v) for k, v in heights.items()},
        )


@dataclass(frozen=True)
class SpatialEstimate:
    """Position relative to the frame centre in centimetres, plus distance in metres."""

    coord_x: int
    coord_y: int
    distance_m: float | None = None


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded towards positive infinity."""

    return int(math.floor(value + 0.5))


class SpatialEstimator:
    """Map a detection box to frame-centred coordinates and a distance estimate."""

    def __init__(self, calibration: Calibration | None = None) -> None:
        self.calibration = calibration or Calibration()
        if self.calibration.pixels_per_cm <= 0:
            raise ValueError("pixels_per_cm must be positive")

    def estimate(self, detection: Detection, frame_width: float, frame_height: float) -> SpatialEstimate:
        cx, cy = detection.center
        ppcm = self.calibration.pixels_per_cm
        coord_x = round_half_up((cx - frame_width / 2.0) / ppcm)
        # Image rows grow downwards; up is positive here.
        coord_y = round_half_up((frame_height / 2.0 - cy) / ppcm)
        return SpatialEstimate(
            coord_x=coord_x,
            coord_y=coord_y,
            distance_m=self.distance(detection.label, detection.height),
        )

    def distance(self, label: str, box_height_px: float) -> float | None:
        """Return the pinhole distance in metres, or ``None`` when it cannot be estimated."""

        reference_height = self.calibration.reference_heights_m.get(label.lower())
        if reference_height is None:
            return None
        if not math.isfinite(box_height_px):
            return None
        floor_px = max(self.calibration.min_box_height_px, 0.0)
        if box_height_px <= 0 or box_height_px < floor_px:
            return None
        return reference_height * self.calibration.focal_length_px / box_height_px
