"""Result types shared by every diagnostics probe."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class DiagnosticStatus(str, Enum):
    """Outcome of one probe, ordered from healthy to broken."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"


_SEVERITY = {DiagnosticStatus.PASS: 0, DiagnosticStatus.WARN: 1, DiagnosticStatus.FAIL: 2}


@dataclass(frozen=True)
class DiagnosticResult:
    """What a probe found for one subsystem (camera stack, audio, storage...)."""

    name: str
    status: DiagnosticStatus
    details: str

    @property
    def failed(self) -> bool:
        return self.status is DiagnosticStatus.FAIL


def worst_status(results: Iterable[DiagnosticResult]) -> DiagnosticStatus:
    """Return the most severe status among ``results`` (PASS when empty)."""

    worst = DiagnosticStatus.PASS
    for result in results:
        if _SEVERITY[result.status] > _SEVERITY[worst]:
            worst = result.status
    return worst
