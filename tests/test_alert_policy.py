"""Tests for the per-label alert throttle."""

from __future__ import annotations

from core.alert_policy import AlertThrottle, ThrottleSettings, ThrottleState
from core.session import SessionStore


def _throttle(cooldown_s: float = 5.0, guard_s: float = 0.0) -> tuple[AlertThrottle, SessionStore]:
    session = SessionStore()
    settings = ThrottleSettings(cooldown_s=cooldown_s, single_active_timeout_s=guard_s)
    return AlertThrottle(session, settings, clock=lambda: 0.0), session


def test_first_detection_fires_and_creates_entry() -> None:
    throttle, session = _throttle()

    assert throttle.evaluate_pass(["vehicle"], now=100.0) == ["vehicle"]
    assert session.cooldowns["vehicle"].last_fired_at == 100.0


def test_repeat_inside_window_is_suppressed() -> None:
    throttle, session = _throttle()

    throttle.evaluate_pass(["vehicle"], now=100.0)

    assert throttle.evaluate_pass(["vehicle"], now=104.9) == []
    assert throttle.state("vehicle", now=104.9) is ThrottleState.COOLING
    assert session.cooldowns["vehicle"].last_fired_at == 100.0


def test_repeat_at_window_boundary_fires() -> None:
    throttle, session = _throttle()

    throttle.evaluate_pass(["vehicle"], now=100.0)

    assert throttle.state("vehicle", now=105.0) is ThrottleState.IDLE
    assert throttle.evaluate_pass(["vehicle"], now=105.0) == ["vehicle"]
    assert session.cooldowns["vehicle"].last_fired_at == 105.0
    assert len(session.cooldowns) == 1


def test_duplicate_labels_in_one_pass_fire_once() -> None:
    throttle, _ = _throttle()

    fired = throttle.evaluate_pass(["vehicle", "vehicle", "vehicle"], now=1.0)

    assert fired == ["vehicle"]


def test_labels_cool_down_independently() -> None:
    throttle, _ = _throttle()

    throttle.evaluate_pass(["vehicle"], now=0.0)

    assert throttle.evaluate_pass(["vehicle", "animal"], now=1.0) == ["animal"]


def test_sessions_are_isolated() -> None:
    first, _ = _throttle()
    second, _ = _throttle()

    first.evaluate_pass(["vehicle"], now=0.0)

    assert second.evaluate_pass(["vehicle"], now=0.5) == ["vehicle"]


def test_guard_blocks_other_labels_without_touching_entries() -> None:
    throttle, session = _throttle(cooldown_s=1.0, guard_s=3.0)

    assert throttle.evaluate_pass(["vehicle"], now=0.0) == ["vehicle"]
    assert throttle.guard_active(now=1.0) is True
    assert throttle.evaluate_pass(["animal"], now=1.0) == []
    assert "animal" not in session.cooldowns

    assert throttle.evaluate_pass(["animal", "vehicle"], now=3.0) == ["animal", "vehicle"]
    assert session.active_alert_until == 6.0


def test_guard_disabled_by_default() -> None:
    throttle, session = _throttle(cooldown_s=1.0)

    throttle.evaluate_pass(["vehicle"], now=0.0)

    assert throttle.guard_active(now=0.1) is False
    assert throttle.evaluate_pass(["animal"], now=0.1) == ["animal"]
    assert session.active_alert_until is None


def test_settings_from_config() -> None:
    settings = ThrottleSettings.from_config({"alerts": {"cooldown_s": 2, "single_active_timeout_s": None}})

    assert settings.cooldown_s == 2.0
    assert settings.single_active_timeout_s == 0.0
