"""Tests for hardware diagnostics."""

from __future__ import annotations

from diagnostics.models import DiagnosticStatus
from hardware.diagnostics import HardwareProbeConfig, probe


def test_hardware_probe_passes_with_all_modules() -> None:
    result = probe(available_modules={"cv2", "ultralytics", "pyttsx3", "pyaudio", "numpy"})
    assert result.status is DiagnosticStatus.PASS


def test_hardware_probe_warns_on_missing_output_modules() -> None:
    """Hardware probe should warn when speech or tone deps are missing."""

    result = probe(
        config=HardwareProbeConfig(require_all=False),
        available_modules={"cv2", "ultralytics"},
    )
    assert result.status is DiagnosticStatus.WARN


def test_hardware_probe_fails_when_required() -> None:
    """Hardware probe should fail when optional deps are required."""

    result = probe(
        config=HardwareProbeConfig(require_all=True),
        available_modules={"cv2", "ultralytics", "numpy"},
    )
    assert result.status is DiagnosticStatus.FAIL


def test_hardware_probe_fails_without_camera_stack() -> None:
    result = probe(available_modules={"pyttsx3", "pyaudio", "numpy"})
    assert result.status is DiagnosticStatus.FAIL
    assert "cv2" in result.details
