"""Diagnostics helpers for the perception assistant."""

from diagnostics.models import DiagnosticResult, DiagnosticStatus, worst_status
from diagnostics.runner import exit_code, format_results, run_diagnostics

__all__ = [
    "DiagnosticResult",
    "DiagnosticStatus",
    "exit_code",
    "format_results",
    "run_diagnostics",
    "worst_status",
]
