"""Overlay annotations for live, snapshot and threat views.

Annotations are plain data; whatever owns the drawing surface turns them into
pixels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from vision.detections import Detection


PALETTE = ("#00c4cc", "#4fb0ff", "#f6b352", "#9b8cff", "#ff6b6b", "#45c272", "#ff9ee3")
LABEL_BAR_HEIGHT_PX = 18


@dataclass(frozen=True)
class OverlayStyle:
    """Stroke and fill colours for one overlay layer."""

    name: str
    stroke: str
    fill: str
    text: str


LIVE_STYLE = OverlayStyle(
    name="live", stroke="rgba(0,255,200,0.95)", fill="rgba(0,255,200,0.95)", text="#002827"
)
THREAT_STYLE = OverlayStyle(
    name="threat", stroke="rgba(255,60,60,0.95)", fill="rgba(255,60,60,0.12)", text="#fff"
)


@dataclass(frozen=True)
class BoxAnnotation:
    """One labeled box to draw over a frame."""

    bbox: tuple[float, float, float, float]
    text: str
    label_y: float
    accent: str
    style: OverlayStyle


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def color_for_label(label: str) -> str:
    """Return a stable accent colour for ``label``."""

    h = 0
    for char in label:
        h = _to_int32(_to_int32(h) << 5) - h + ord(char)
    return PALETTE[abs(h) % len(PALETTE)]


def label_text(detection: Detection) -> str:
    return f"{detection.label} {detection.confidence_percent}%"


def label_y(y: float) -> float:
    """Place the label bar above the box when it fits, otherwise inside it."""

    above = y - LABEL_BAR_HEIGHT_PX
    return above if above >= 0 else y


def build_annotations(
    detections: Iterable[Detection],
    style: OverlayStyle = LIVE_STYLE,
) -> list[BoxAnnotation]:
    return [
        BoxAnnotation(
            bbox=detection.bbox,
            text=label_text(detection),
            label_y=label_y(detection.bbox[1]),
            accent=color_for_label(detection.label),
            style=style,
        )
        for detection in detections
    ]
