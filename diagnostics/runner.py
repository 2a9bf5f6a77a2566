"""Run probes and render the diagnostics report."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable

from core.logging import logger
from diagnostics.models import DiagnosticResult, DiagnosticStatus, worst_status


Probe = Callable[[], DiagnosticResult]


def format_results(results: Iterable[DiagnosticResult]) -> str:
    """Return the report printed by ``--diagnostics``."""

    results = list(results)
    counts = Counter(result.status for result in results)
    lines = ["Diagnostics report", "-" * 60]
    lines.extend(f"[{result.status.value}] {result.name}: {result.details}" for result in results)
    lines.append("-" * 60)
    lines.append(
        f"Overall: {worst_status(results).value} "
        f"({counts[DiagnosticStatus.PASS]} pass, {counts[DiagnosticStatus.WARN]} warn, "
        f"{counts[DiagnosticStatus.FAIL]} fail)"
    )
    return "\n".join(lines)


def exit_code(results: Iterable[DiagnosticResult]) -> int:
    return 1 if any(result.failed for result in results) else 0


def run_diagnostics(probes: Iterable[Probe]) -> list[DiagnosticResult]:
    """Run each probe in order; a probe that raises becomes a FAIL result."""

    results: list[DiagnosticResult] = []
    for probe in probes:
        try:
            result = probe()
        except Exception as exc:  # noqa: BLE001 - one broken probe must not hide the others
            logger.exception("[DIAG] Probe %s raised", getattr(probe, "__name__", probe))
            result = DiagnosticResult(
                name=getattr(probe, "__name__", "unknown_probe"),
                status=DiagnosticStatus.FAIL,
                details=f"Probe raised exception: {exc}",
            )
        if result.status is not DiagnosticStatus.PASS:
            logger.warning("[DIAG] %s: %s", result.name, result.details)
        results.append(result)
    return results
