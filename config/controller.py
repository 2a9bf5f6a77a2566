"""Configuration controller for YAML-based settings."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


DEFAULT_REFERENCE_HEIGHTS_M: dict[str, float] = {
    "person": 1.7,
    "bottle": 0.25,
    "chair": 1.0,
    "book": 0.3,
    "tv": 0.6,
    "laptop": 0.4,
    "cell phone": 0.15,
    "cellphone": 0.15,
    "keyboard": 0.45,
    "mouse": 0.12,
}

DEFAULT_THREAT_CLASSES: dict[str, str] = {
    "car": "vehicle",
    "truck": "vehicle",
    "bus": "vehicle",
    "motorcycle": "vehicle",
    "bicycle": "vehicle",
}

DEFAULTS: dict[str, Any] = {
    "logging_level": "INFO",
    "file_logging_enabled": True,
    "camera": {"device_index": 0, "width": 640, "height": 480},
    "detector": {"backend": "ultralytics", "model": "yolov8n.pt", "score_threshold": 0.5},
    "perception": {
        "focal_length_px": 700.0,
        "pixels_per_cm": 5.0,
        "min_box_height_px": 5.0,
        "reference_heights_m": DEFAULT_REFERENCE_HEIGHTS_M,
    },
    "threats": {
        "classes": DEFAULT_THREAT_CLASSES,
        "score_threshold": 0.5,
        "poll_interval_ms": 700,
        "box_clear_ms": 900,
    },
    "alerts": {
        "cooldown_s": 5.0,
        "beep_count": 3,
        "beep_duration_ms": 80,
        "beep_gap_ms": 120,
        "beep_frequency_hz": 880.0,
        "clip_path": None,
        "flash_duration_ms": 220,
        "single_active_timeout_s": 0.0,
        "message_template": "Alert! {label} detected in the live frame",
    },
    "narration": {"pause_ms": 100, "rate": 0.95},
    "overlay": {"frame_period_ms": 33},
    "storage": {"save_dir": "./saves/", "log_dir": "./log/", "var_dir": "./var/"},
}


@dataclass(frozen=True)
class ConfigPaths:
    """Filesystem paths for configuration files."""

    config_dir: Path
    config_file: Path
    override_file: Path


class ConfigController:
    """Singleton controller for loading and updating configuration."""

    _instance: "ConfigController | None" = None

    def __init__(self, config_file: str = "default.yaml") -> None:
        if ConfigController._instance is not None:
            raise RuntimeError("You cannot create another ConfigController class")

        config_dir = Path("config")
        self.paths = ConfigPaths(
            config_dir=config_dir,
            config_file=config_dir / config_file,
            override_file=config_dir / "override.yaml",
        )
        self.config: dict[str, Any] = {}
        self.load_config()

    @classmethod
    def get_instance(cls) -> "ConfigController":
        """Return the singleton instance of the controller."""

        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def load_config(self) -> None:
        """Load configuration from default and override YAML files."""

        config: dict[str, Any] = {}
        if self.paths.config_file.exists():
            with self.paths.config_file.open("r", encoding="utf-8") as file:
                config = yaml.safe_load(file) or {}

        if self.paths.override_file.exists():
            with self.paths.override_file.open("r", encoding="utf-8") as file:
                override_config = yaml.safe_load(file) or {}
            if override_config:
                config = self._deep_merge(config, override_config)

        self.config = self._normalize_config(config)

    def save_config(self, config: dict[str, Any]) -> None:
        """Persist configuration to override.yaml, archiving previous overrides."""

        self.paths.config_dir.mkdir(parents=True, exist_ok=True)
        if self.paths.override_file.exists():
            archive_index = 1
            archive_file = self._archive_path(archive_index)
            while archive_file.exists():
                archive_index += 1
                archive_file = self._archive_path(archive_index)
            self.paths.override_file.rename(archive_file)

        with self.paths.override_file.open("w", encoding="utf-8") as file:
            yaml.safe_dump(config, file)

    def get_config(self) -> dict[str, Any]:
        """Return the currently loaded configuration."""

        return dict(self.config)

    def set_config(self, config: dict[str, Any]) -> None:
        """Set and persist configuration values."""

        self.config = self._normalize_config(dict(config))
        self.save_config(self.config)

    def _archive_path(self, index: int) -> Path:
        """Return the archive path for a given override index."""

        filename = f"override_{index:04d}.yaml"
        return self.paths.config_dir / filename

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge dictionaries, overriding base values with override values."""

        merged = dict(base)
        for key, value in override.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _normalize_config(self, config: dict[str, Any]) -> dict[str, Any]:
        """Fill missing sections with defaults and coerce numeric settings."""

        normalized = self._deep_merge(deepcopy(DEFAULTS), config)

        # Calibration and hazard tables replace the defaults wholesale when given.
        perception_cfg = dict(normalized["perception"])
        heights = (config.get("perception") or {}).get("reference_heights_m")
        if isinstance(heights, dict):
            perception_cfg["reference_heights_m"] = {
                str(label).lower(): float(value) for label, value in heights.items()
            }
        perception_cfg["focal_length_px"] = float(perception_cfg["focal_length_px"])
        perception_cfg["pixels_per_cm"] = float(perception_cfg["pixels_per_cm"])
        perception_cfg["min_box_height_px"] = float(perception_cfg["min_box_height_px"])
        normalized["perception"] = perception_cfg

        threats_cfg = dict(normalized["threats"])
        classes = (config.get("threats") or {}).get("classes")
        if isinstance(classes, list):
            threats_cfg["classes"] = {str(label).lower(): "vehicle" for label in classes}
        elif isinstance(classes, dict):
            threats_cfg["classes"] = {
                str(label).lower(): str(group) for label, group in classes.items()
            }
        threats_cfg["score_threshold"] = float(threats_cfg["score_threshold"])
        threats_cfg["poll_interval_ms"] = int(threats_cfg["poll_interval_ms"])
        threats_cfg["box_clear_ms"] = int(threats_cfg["box_clear_ms"])
        normalized["threats"] = threats_cfg

        alerts_cfg = dict(normalized["alerts"])
        alerts_cfg["cooldown_s"] = float(alerts_cfg["cooldown_s"])
        alerts_cfg["beep_count"] = int(alerts_cfg["beep_count"])
        alerts_cfg["beep_duration_ms"] = int(alerts_cfg["beep_duration_ms"])
        alerts_cfg["beep_gap_ms"] = int(alerts_cfg["beep_gap_ms"])
        alerts_cfg["beep_frequency_hz"] = float(alerts_cfg["beep_frequency_hz"])
        alerts_cfg["flash_duration_ms"] = int(alerts_cfg["flash_duration_ms"])
        alerts_cfg["single_active_timeout_s"] = float(alerts_cfg["single_active_timeout_s"] or 0.0)
        normalized["alerts"] = alerts_cfg

        return normalized
