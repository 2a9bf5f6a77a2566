"""Stable detection schemas and conversion of raw detector output.

Bounding boxes are expressed in source-frame pixels as ``(x, y, width, height)``
with ``(x, y)`` the top-left corner.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Iterable


_LABEL_KEYS = ("label", "class", "class_name", "name")
_SCORE_KEYS = ("score", "confidence")
_BOX_KEYS = ("bbox", "box", "rect", "rectangle")
_FIELDS = _LABEL_KEYS + _SCORE_KEYS + _BOX_KEYS + (
    "x",
    "y",
    "w",
    "h",
    "width",
    "height",
    "xmin",
    "ymin",
    "xmax",
    "ymax",
)


@dataclass(frozen=True)
class Detection:
    """Single object detection result."""

    label: str
    confidence: float
    bbox: tuple[float, float, float, float]

    @property
    def center(self) -> tuple[float, float]:
        x, y, w, h = self.bbox
        return x + w / 2.0, y + h / 2.0

    @property
    def height(self) -> float:
        return self.bbox[3]

    @property
    def confidence_percent(self) -> int:
        return int(math.floor(self.confidence * 100.0 + 0.5))

    def summary(self) -> str:
        return f"{self.label}:{self.confidence:.2f}"


def coerce_detections(raw_detections: Iterable[Any]) -> list[Detection]:
    """Convert raw detector rows into :class:`Detection` values, dropping invalid rows."""

    normalized: list[Detection] = []
    for raw in raw_detections:
        detection = coerce_detection(raw)
        if detection is not None:
            normalized.append(detection)
    return normalized


def coerce_detection(raw: Any) -> Detection | None:
    """Validate one raw detector row, or return ``None`` when it is unusable."""

    if isinstance(raw, Detection):
        return raw

    payload = _to_mapping(raw)
    if payload is None:
        return None

    label = _extract_label(payload)
    if label is None:
        return None
    confidence = _extract_confidence(payload)
    if confidence is None:
        return None
    bbox = _extract_bbox(payload)
    if bbox is None:
        return None
    return Detection(label=label, confidence=confidence, bbox=bbox)


def _to_mapping(raw: Any) -> dict[str, Any] | None:
    if isinstance(raw, dict):
        return raw

    mapping: dict[str, Any] = {}
    for name in _FIELDS:
        if hasattr(raw, name):
            mapping[name] = getattr(raw, name)
    return mapping or None


def _first_present(payload: dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _extract_label(payload: dict[str, Any]) -> str | None:
    value = _first_present(payload, _LABEL_KEYS)
    if value is None:
        return None
    label = str(value).strip()
    return label or None


def _extract_confidence(payload: dict[str, Any]) -> float | None:
    confidence = _to_finite_float(_first_present(payload, _SCORE_KEYS))
    if confidence is None:
        return None
    return max(0.0, min(1.0, confidence))


def _extract_bbox(payload: dict[str, Any]) -> tuple[float, float, float, float] | None:
    raw_bbox = _first_present(payload, _BOX_KEYS)

    if isinstance(raw_bbox, (list, tuple)):
        if len(raw_bbox) < 4:
            return None
        values = [_to_finite_float(value) for value in raw_bbox[:4]]
        if None in values:
            return None
        x, y, w, h = values
        return _clamp_box(x, y, w, h)

    if {"xmin", "ymin", "xmax", "ymax"}.issubset(payload.keys()):
        values = [_to_finite_float(payload[key]) for key in ("xmin", "ymin", "xmax", "ymax")]
        if None in values:
            return None
        xmin, ymin, xmax, ymax = values
        return _clamp_box(xmin, ymin, xmax - xmin, ymax - ymin)

    if not {"x", "y"}.issubset(payload.keys()):
        return None
    x = _to_finite_float(payload.get("x"))
    y = _to_finite_float(payload.get("y"))
    w = _to_finite_float(payload.get("w", payload.get("width")))
    h = _to_finite_float(payload.get("h", payload.get("height")))
    if None in (x, y, w, h):
        return None
    return _clamp_box(x, y, w, h)


def _clamp_box(x: float, y: float, w: float, h: float) -> tuple[float, float, float, float]:
    return (x, y, max(0.0, w), max(0.0, h))


def _to_finite_float(value: Any) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
