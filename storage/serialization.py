"""Text serialization for saved detection cycles."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from storage.cycles import DetectionCycle


NO_OBJECTS = "no_objects_detected"
UNKNOWN_DISTANCE = "unknown"

_SUFFIXES = ("th", "st", "nd", "rd")


def ordinal(n: int) -> str:
    """Return ``n`` with its English ordinal suffix (1st, 2nd, 11th, 21st...)."""

    v = n % 100
    if 11 <= v <= 13:
        return f"{n}th"
    last = v % 10
    suffix = _SUFFIXES[last] if last < len(_SUFFIXES) else "th"
    return f"{n}{suffix}"


def format_distance(distance_m: float | None) -> str:
    """Render a distance as whole metres and centimetres, omitting zero parts."""

    if distance_m is None or not math.isfinite(distance_m) or distance_m <= 0:
        return UNKNOWN_DISTANCE
    metres = math.floor(distance_m)
    centimetres = int(math.floor((distance_m - metres) * 100 + 0.5))
    if centimetres >= 100:
        metres += 1
        centimetres -= 100
    parts: list[str] = []
    if metres > 0:
        parts.append(f"{metres} metres")
    if centimetres > 0:
        parts.append(f"{centimetres} centimetres")
    return " ".join(parts) or UNKNOWN_DISTANCE


def cycle_lines(cycle: "DetectionCycle") -> list[str]:
    lines = [f"detection {cycle.timestamp} {ordinal(cycle.ordinal)}"]
    if not cycle.detections:
        lines.append(NO_OBJECTS)
    else:
        for index, item in enumerate(cycle.detections, start=1):
            lines.append(
                f"object {index} {{{item.distance}}}"
                f"{{{item.coord_x},{item.coord_y}}}{{{item.confidence_percent}%}}"
            )
    lines.append("")
    return lines


def serialize_cycles(cycles: Iterable["DetectionCycle"]) -> str:
    """Serialize cycles into the saved-cycle text format."""

    lines: list[str] = []
    for cycle in cycles:
        lines.extend(cycle_lines(cycle))
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
