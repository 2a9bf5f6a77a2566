"""Tests for detection validation at the detector boundary."""

from __future__ import annotations

from types import SimpleNamespace

from vision.detections import Detection, coerce_detection, coerce_detections


def test_dict_with_bbox_list() -> None:
    detection = coerce_detection({"class": "person", "score": 0.876, "bbox": [10, 20, 30, 40]})

    assert detection == Detection(label="person", confidence=0.876, bbox=(10.0, 20.0, 30.0, 40.0))
    assert detection.confidence_percent == 88
    assert detection.center == (25.0, 40.0)


def test_corner_coordinates_are_converted() -> None:
    detection = coerce_detection(
        {"label": "car", "confidence": 0.6, "xmin": 5, "ymin": 10, "xmax": 25, "ymax": 50}
    )

    assert detection is not None
    assert detection.bbox == (5.0, 10.0, 20.0, 40.0)


def test_object_attributes_are_read() -> None:
    raw = SimpleNamespace(name="bottle", score=0.7, x=1, y=2, width=3, height=4)

    detection = coerce_detection(raw)

    assert detection is not None
    assert detection.label == "bottle"
    assert detection.bbox == (1.0, 2.0, 3.0, 4.0)


def test_confidence_and_size_are_clamped() -> None:
    detection = coerce_detection({"label": "car", "score": 1.5, "bbox": [0, 0, -4, 10]})

    assert detection is not None
    assert detection.confidence == 1.0
    assert detection.bbox == (0.0, 0.0, 0.0, 10.0)


def test_invalid_rows_are_dropped() -> None:
    rows = [
        {"label": "", "score": 0.9, "bbox": [0, 0, 1, 1]},
        {"label": "car", "score": "high", "bbox": [0, 0, 1, 1]},
        {"label": "car", "score": 0.9, "bbox": [0, 0, 1]},
        {"label": "car", "score": 0.9, "bbox": [0, float("nan"), 1, 1]},
        {"label": "car", "score": 0.9},
        object(),
        {"label": "bus", "score": 0.9, "bbox": (1, 2, 3, 4)},
    ]

    detections = coerce_detections(rows)

    assert [d.label for d in detections] == ["bus"]
