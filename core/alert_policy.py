"""Per-label alert cooldown policy for hazard detections."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import time
from typing import Callable, Iterable, Mapping

from core.logging import logger
from core.session import CooldownEntry, SessionStore


class ThrottleState(str, Enum):
    """Cooldown state of a single alert label."""

    IDLE = "idle"
    COOLING = "cooling"


@dataclass(frozen=True)
class ThrottleSettings:
    """Cooldown windows for alert throttling."""

    cooldown_s: float = 5.0
    single_active_timeout_s: float = 0.0

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "ThrottleSettings":
        alerts_cfg = config.get("alerts") if isinstance(config, Mapping) else None
        if not isinstance(alerts_cfg, Mapping):
            return cls()
        return cls(
            cooldown_s=float(alerts_cfg.get("cooldown_s", 5.0)),
            single_active_timeout_s=float(alerts_cfg.get("single_active_timeout_s") or 0.0),
        )


class AlertThrottle:
    """Decide which alert labels fire for a detection pass.

    A label fires when it has no cooldown entry or its window has elapsed.
    When ``single_active_timeout_s`` is positive, a session-wide guard must
    also be clear; a pass blocked by the guard leaves cooldown entries alone.
    """

    def __init__(
        self,
        session: SessionStore,
        settings: ThrottleSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session = session
        self._settings = settings or ThrottleSettings()
        self._clock = clock

    @property
    def cooldown_s(self) -> float:
        return self._settings.cooldown_s

    def state(self, label: str, now: float | None = None) -> ThrottleState:
        if now is None:
            now = self._clock()
        entry = self._session.cooldowns.get(label)
        if entry is None or (now - entry.last_fired_at) >= self._settings.cooldown_s:
            return ThrottleState.IDLE
        return ThrottleState.COOLING

    def guard_active(self, now: float | None = None) -> bool:
        if self._settings.single_active_timeout_s <= 0:
            return False
        if now is None:
            now = self._clock()
        until = self._session.active_alert_until
        if until is None:
            return False
        if now >= until:
            self._session.active_alert_until = None
            return False
        return True

    def evaluate_pass(self, labels: Iterable[str], now: float | None = None) -> list[str]:
        """Return the labels that fire for this pass and record their fire time."""

        if now is None:
            now = self._clock()

        unique: list[str] = []
        for label in labels:
            if label not in unique:
                unique.append(label)
        if not unique:
            return []

        if self.guard_active(now):
            logger.info("[THREAT] Alert guard active; suppressing %s", ", ".join(unique))
            return []

        fired: list[str] = []
        for label in unique:
            if self.state(label, now) is ThrottleState.COOLING:
                continue
            entry = self._session.cooldowns.get(label)
            if entry is None:
                self._session.cooldowns[label] = CooldownEntry(label=label, last_fired_at=now)
            else:
                entry.last_fired_at = now
            fired.append(label)

        if fired and self._settings.single_active_timeout_s > 0:
            self._session.active_alert_until = now + self._settings.single_active_timeout_s
        return fired
