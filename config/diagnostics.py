"""Diagnostics routines for the configuration subsystem."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from diagnostics.models import DiagnosticResult, DiagnosticStatus


def _positive(config: dict[str, Any], section: str, key: str) -> str | None:
    value = (config.get(section) or {}).get(key)
    if value is None:
        return None
    try:
        if float(value) > 0:
            return None
    except (TypeError, ValueError):
        pass
    return f"{section}.{key}={value!r}"


def probe(base_dir: Path | None = None) -> DiagnosticResult:
    """Check the YAML files parse and the calibration and timing values are usable.

    Args:
        base_dir: Optional base directory for offline testing.

    Returns:
        Diagnostic result indicating config readiness.
    """

    name = "config"
    root_dir = base_dir if base_dir is not None else Path.cwd()
    config_dir = root_dir / "config"
    default_config = config_dir / "default.yaml"
    override_config = config_dir / "override.yaml"

    if not default_config.exists():
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details=f"No default config at {default_config}; built-in defaults apply",
        )

    merged: dict[str, Any] = {}
    try:
        for path in (default_config, override_config):
            if not path.exists():
                continue
            loaded = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            if not isinstance(loaded, dict):
                return DiagnosticResult(
                    name=name,
                    status=DiagnosticStatus.FAIL,
                    details=f"{path.name} is not a mapping",
                )
            for section, values in loaded.items():
                if isinstance(values, dict) and isinstance(merged.get(section), dict):
                    merged[section] = {**merged[section], **values}
                else:
                    merged[section] = values
    except (OSError, yaml.YAMLError) as exc:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Config load failed: {exc}",
        )

    invalid = [
        problem
        for problem in (
            _positive(merged, "perception", "pixels_per_cm"),
            _positive(merged, "perception", "focal_length_px"),
            _positive(merged, "threats", "poll_interval_ms"),
            _positive(merged, "overlay", "frame_period_ms"),
        )
        if problem is not None
    ]
    if invalid:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Non-positive settings: {', '.join(invalid)}",
        )

    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"Config files readable at {config_dir}",
    )
