"""Session-scoped mutable state shared by the perception pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storage.cycles import DetectionCycle


@dataclass
class CooldownEntry:
    """Last accepted alert time for one alert label."""

    label: str
    last_fired_at: float


@dataclass
class SessionStore:
    """State owned by one running pipeline instance.

    Only the event loop thread mutates this object.
    """

    cooldowns: dict[str, CooldownEntry] = field(default_factory=dict)
    pending_cycles: list["DetectionCycle"] = field(default_factory=list)
    next_ordinal: int = 1
    active_alert_until: float | None = None

    def reset_cycles(self) -> None:
        self.pending_cycles.clear()
        self.next_ordinal = 1
