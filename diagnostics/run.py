"""Command-line entry point for running diagnostics."""

from __future__ import annotations

import argparse
from pathlib import Path
import tempfile

from config.diagnostics import probe as config_probe
from diagnostics.models import DiagnosticResult
from diagnostics.runner import exit_code, format_results, run_diagnostics
from core.diagnostics import probe as core_probe
from interaction.audio_hal import FakeSpeechBackend, FakeToneBackend
from interaction.diagnostics import probe as audio_probe
from hardware.diagnostics import HardwareProbeConfig, probe as hardware_probe
from storage.diagnostics import probe as storage_probe


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""

    parser = argparse.ArgumentParser(description="Run diagnostics probes.")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Run probes against a temporary offline directory.",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=None,
        help="Optional base directory for offline diagnostics.",
    )
    return parser.parse_args(argv)


def run_offline(base_dir: Path) -> list[DiagnosticResult]:
    """Run every probe against fakes rooted at ``base_dir``."""

    config_dir = base_dir / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    default_config = config_dir / "default.yaml"
    if not default_config.exists():
        default_config.write_text("{}", encoding="utf-8")

    def config_probe_offline():
        return config_probe(base_dir=base_dir)

    def core_probe_offline():
        return core_probe()

    def audio_probe_offline():
        return audio_probe(speech=FakeSpeechBackend(), tones=FakeToneBackend())

    def hardware_probe_offline():
        return hardware_probe(
            config=HardwareProbeConfig(require_all=False),
            available_modules={"cv2", "ultralytics", "pyttsx3", "pyaudio", "numpy"},
        )

    def storage_probe_offline():
        return storage_probe(base_dir=base_dir)

    return run_diagnostics(
        [
            config_probe_offline,
            core_probe_offline,
            audio_probe_offline,
            hardware_probe_offline,
            storage_probe_offline,
        ]
    )


def run_live(base_dir: Path | None = None) -> list[DiagnosticResult]:
    """Run every probe against the installed backends."""

    def config_probe_with_base():
        return config_probe(base_dir=base_dir)

    def hardware_probe_live():
        return hardware_probe(config=HardwareProbeConfig(require_all=False))

    def storage_probe_with_base():
        return storage_probe(base_dir=base_dir)

    return run_diagnostics(
        [
            config_probe_with_base,
            core_probe,
            audio_probe,
            hardware_probe_live,
            storage_probe_with_base,
        ]
    )


def main(argv: list[str] | None = None) -> int:
    """Run diagnostics and return an exit code."""

    args = parse_args(argv)
    base_dir = args.base_dir

    if args.offline:
        if base_dir is None:
            with tempfile.TemporaryDirectory() as tmp_dir:
                results = run_offline(Path(tmp_dir))
        else:
            results = run_offline(base_dir)
    else:
        results = run_live(base_dir)

    print(format_results(results))
    return exit_code(results)


if __name__ == "__main__":
    raise SystemExit(main())
