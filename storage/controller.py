"""Filesystem storage for saved cycles and run logs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from pathlib import Path
import threading
from typing import Any, Mapping

from config import ConfigController


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageSettings:
    """Directories used for runtime artifacts."""

    save_dir: Path = Path("./saves/")
    log_dir: Path = Path("./log/")
    var_dir: Path = Path("./var/")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "StorageSettings":
        storage_config = config.get("storage") or {}
        return cls(
            save_dir=Path(storage_config.get("save_dir", "./saves/")).expanduser(),
            log_dir=Path(storage_config.get("log_dir", config.get("log_dir", "./log/"))).expanduser(),
            var_dir=Path(storage_config.get("var_dir", config.get("var_dir", "./var/"))).expanduser(),
        )


@dataclass(frozen=True)
class StorageInfo:
    """Metadata about the current storage run."""

    run_id: int
    run_id_file: Path
    log_dir: Path
    log_file: Path
    save_dir: Path


class StorageController:
    """Singleton controller for persistent storage."""

    _instance: "StorageController | None" = None
    _lock = threading.Lock()

    def __init__(self, settings: StorageSettings | None = None) -> None:
        if StorageController._instance is not None:
            raise RuntimeError("You cannot create another StorageController class")

        if settings is None:
            settings = StorageSettings.from_config(ConfigController.get_instance().get_config())
        self.settings = settings
        self.log_dir = settings.log_dir
        self.save_dir = settings.save_dir

        self.run_id_file = settings.var_dir / "current_run"
        self.run_id = self.get_next_run_number(settings.var_dir)
        StorageController._instance = self

    @classmethod
    def get_instance(cls) -> "StorageController":
        """Return the singleton instance of the controller."""

        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def get_next_run_number(self, var_dir: Path) -> int:
        """Return the next run number, persisting to the run-id file."""

        var_dir.mkdir(parents=True, exist_ok=True)

        next_run_number = 0
        if self.run_id_file.is_file():
            current_run_number = self.run_id_file.read_text(encoding="utf-8").strip()
            if current_run_number:
                next_run_number = int(current_run_number) + 1
        self.run_id_file.write_text(str(next_run_number), encoding="utf-8")
        return next_run_number

    def get_current_run_number(self) -> int:
        """Return the current run id."""

        return int(self.run_id)

    def get_log_file_path(self) -> Path:
        """Return the log file path for the current run."""

        return self.log_dir / f"run_{self.run_id}.log"

    def artifact_path(self, now: datetime) -> Path:
        """Return a free, timestamp-qualified path for a saved-cycle artifact."""

        stem = f"detection_{now:%Y-%m-%d_%H-%M-%S}"
        candidate = self.save_dir / f"{stem}.txt"
        index = 1
        while candidate.exists():
            candidate = self.save_dir / f"{stem}_{index}.txt"
            index += 1
        return candidate

    def persist_artifact(self, content: str, now: datetime | None = None) -> Path:
        """Write saved-cycle text to the save directory and return its path."""

        with self._lock:
            self.save_dir.mkdir(parents=True, exist_ok=True)
            path = self.artifact_path(now or datetime.now())
            path.write_text(content, encoding="utf-8")
        LOGGER.info("Saved detection cycles to %s", path)
        return path

    def get_storage_info(self) -> StorageInfo:
        """Return metadata about the current run storage."""

        return StorageInfo(
            run_id=self.run_id,
            run_id_file=self.run_id_file,
            log_dir=self.log_dir,
            log_file=self.get_log_file_path(),
            save_dir=self.save_dir,
        )
