"""Self-test for logging and the alert and recording core."""

from __future__ import annotations

import importlib.util

from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe() -> DiagnosticResult:
    """Check the logger, then run the throttle and cycle serializer once.

    Returns:
        Diagnostic result indicating core readiness.
    """

    name = "core"
    from core import logging as core_logging
    from core.alert_policy import AlertThrottle, ThrottleSettings
    from core.session import SessionStore
    from storage.cycles import DetectionCycle
    from storage.serialization import serialize_cycles

    if core_logging.logger is None:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="Core logger failed to initialize",
        )

    throttle = AlertThrottle(SessionStore(), ThrottleSettings(cooldown_s=5.0))
    fired = (
        throttle.evaluate_pass(["vehicle", "vehicle"], now=0.0),
        throttle.evaluate_pass(["vehicle"], now=1.0),
        throttle.evaluate_pass(["vehicle"], now=5.0),
    )
    if fired != (["vehicle"], [], ["vehicle"]):
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Alert throttle self-test failed: {fired}",
        )

    text = serialize_cycles([DetectionCycle(timestamp="00:00:00", ordinal=1)])
    if text != "detection 00:00:00 1st\nno_objects_detected\n\n":
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="Cycle serializer self-test failed",
        )

    rich_available = importlib.util.find_spec("rich") is not None
    logging_mode = "rich logging" if rich_available else "plain logging (rich missing)"
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"Throttle and serializer OK, {logging_mode}",
    )
