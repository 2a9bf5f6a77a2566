"""Vision package exports."""

from vision.detections import Detection
from vision.spatial import Calibration, SpatialEstimate, SpatialEstimator
from vision.threats import ThreatClassifier

__all__ = [
    "Calibration",
    "Detection",
    "SpatialEstimate",
    "SpatialEstimator",
    "ThreatClassifier",
]
