"""Tests for config diagnostics."""

from __future__ import annotations

from diagnostics.models import DiagnosticStatus
from config.diagnostics import probe


def _write(tmp_path, name: str, text: str) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / name).write_text(text, encoding="utf-8")


def test_config_probe_offline(tmp_path) -> None:
    """Config probe should pass with a default config present."""

    _write(tmp_path, "default.yaml", "{}")

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.PASS


def test_config_probe_warns_without_default(tmp_path) -> None:
    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.WARN


def test_config_probe_rejects_zero_pixels_per_cm(tmp_path) -> None:
    _write(tmp_path, "default.yaml", "perception:\n  pixels_per_cm: 5\n")
    _write(tmp_path, "override.yaml", "perception:\n  pixels_per_cm: 0\n")

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.FAIL
    assert "perception.pixels_per_cm" in result.details


def test_config_probe_fails_on_bad_yaml(tmp_path) -> None:
    _write(tmp_path, "default.yaml", "alerts: [unclosed\n")

    result = probe(base_dir=tmp_path)
    assert result.status is DiagnosticStatus.FAIL
