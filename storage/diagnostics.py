"""Diagnostics routines for the storage subsystem."""

from __future__ import annotations

from pathlib import Path

from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe(base_dir: Path | None = None) -> DiagnosticResult:
    """Run a storage probe to validate that artifact directories are writable.

    Args:
        base_dir: Optional base directory for offline testing.

    Returns:
        Diagnostic result indicating storage readiness.
    """

    name = "storage"
    try:
        if base_dir is None:
            from config import ConfigController
            from storage.controller import StorageSettings

            settings = StorageSettings.from_config(ConfigController.get_instance().get_config())
            directories = [settings.var_dir, settings.log_dir, settings.save_dir]
        else:
            directories = [base_dir / "var", base_dir / "log", base_dir / "saves"]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)
            sentinel = directory / "diagnostics_probe.txt"
            sentinel.write_text("ok", encoding="utf-8")
            sentinel.unlink(missing_ok=True)

        details = f"Storage directories writable: {', '.join(str(d) for d in directories)}"
        return DiagnosticResult(name=name, status=DiagnosticStatus.PASS, details=details)
    except OSError as exc:
        details = f"Filesystem access failed: {exc}"
        return DiagnosticResult(name=name, status=DiagnosticStatus.FAIL, details=details)
