"""Tests for the offline diagnostics run."""

from __future__ import annotations

from diagnostics.models import DiagnosticResult, DiagnosticStatus, worst_status
from diagnostics.run import main, run_offline
from diagnostics.runner import exit_code, format_results, run_diagnostics


def test_offline_run_passes(tmp_path) -> None:
    results = run_offline(tmp_path)

    assert {result.name for result in results} == {
        "config",
        "core",
        "audio_output",
        "hardware",
        "storage",
    }
    assert all(result.status is DiagnosticStatus.PASS for result in results)


def test_offline_main_exit_code(tmp_path, capsys) -> None:
    assert main(["--offline", "--base-dir", str(tmp_path)]) == 0
    assert "Diagnostics report" in capsys.readouterr().out


def test_raising_probe_becomes_failure() -> None:
    def broken_probe():
        raise RuntimeError("boom")

    def healthy_probe():
        return DiagnosticResult(name="ok", status=DiagnosticStatus.PASS, details="fine")

    results = run_diagnostics([healthy_probe, broken_probe])

    assert [result.status for result in results] == [DiagnosticStatus.PASS, DiagnosticStatus.FAIL]
    assert results[1].name == "broken_probe"
    assert exit_code(results) == 1
    assert worst_status(results) is DiagnosticStatus.FAIL
    assert format_results(results).splitlines()[-1] == "Overall: FAIL (1 pass, 0 warn, 1 fail)"
