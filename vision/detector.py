"""Object detector capability and the Ultralytics-backed implementation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import importlib
import importlib.util
import threading
from typing import Any, Mapping, Protocol

from core.errors import CapabilityUnavailable, DetectorError
from core.logging import logger
from hardware.camera import Frame
from vision.detections import Detection, coerce_detections


class Detector(Protocol):
    """Asynchronous object detector returning labeled pixel boxes."""

    @property
    def ready(self) -> bool:
        """Whether the model is loaded and can serve requests."""

    async def detect(self, frame: Frame) -> list[Detection]:
        """Run inference on ``frame``."""


@dataclass(frozen=True)
class DetectorSettings:
    """Settings for the detection backend."""

    backend: str = "ultralytics"
    model: str = "yolov8n.pt"
    score_threshold: float = 0.5

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "DetectorSettings":
        detector_cfg = config.get("detector") if isinstance(config, Mapping) else None
        if not isinstance(detector_cfg, Mapping):
            return cls()
        return cls(
            backend=str(detector_cfg.get("backend", "ultralytics")),
            model=str(detector_cfg.get("model", "yolov8n.pt")),
            score_threshold=float(detector_cfg.get("score_threshold", 0.5)),
        )


class UltralyticsDetector:
    """YOLO detector loaded lazily from the ``ultralytics`` package."""

    def __init__(self, settings: DetectorSettings | None = None) -> None:
        self.settings = settings or DetectorSettings()
        self._model: Any = None
        self._infer_lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._model is not None

    async def load(self) -> None:
        """Load model weights off the event loop."""

        if self._model is not None:
            return
        self._model = await asyncio.to_thread(self._load_model)
        logger.info(
            "[DETECTOR] Loaded %s (score_threshold=%.2f)",
            self.settings.model,
            self.settings.score_threshold,
        )

    def _load_model(self) -> Any:
        if importlib.util.find_spec("ultralytics") is None:
            raise CapabilityUnavailable("detector", "ultralytics is not installed")
        ultralytics = importlib.import_module("ultralytics")
        try:
            return ultralytics.YOLO(self.settings.model)
        except Exception as exc:
            raise CapabilityUnavailable("detector", f"model {self.settings.model} failed to load ({exc})") from exc

    async def detect(self, frame: Frame) -> list[Detection]:
        if self._model is None:
            raise DetectorError("Detector model is not loaded")
        try:
            raw = await asyncio.to_thread(self._infer, frame.image)
        except DetectorError:
            raise
        except Exception as exc:
            raise DetectorError(f"Inference failed: {exc}") from exc
        return coerce_detections(raw)

    def _infer(self, image: Any) -> list[dict[str, Any]]:
        with self._infer_lock:
            results = self._model.predict(
                image,
                conf=self.settings.score_threshold,
                verbose=False,
            )
        rows: list[dict[str, Any]] = []
        for result in results:
            names = getattr(result, "names", {}) or {}
            boxes = getattr(result, "boxes", None)
            if boxes is None:
                continue
            xyxy = boxes.xyxy.tolist()
            confidences = boxes.conf.tolist()
            class_ids = boxes.cls.tolist()
            for (xmin, ymin, xmax, ymax), score, class_id in zip(xyxy, confidences, class_ids):
                rows.append(
                    {
                        "label": names.get(int(class_id), str(int(class_id))),
                        "score": score,
                        "xmin": xmin,
                        "ymin": ymin,
                        "xmax": xmax,
                        "ymax": ymax,
                    }
                )
        return rows


def build_detector(settings: DetectorSettings) -> UltralyticsDetector:
    backend = settings.backend.lower()
    if backend == "ultralytics":
        return UltralyticsDetector(settings)
    raise ValueError(f"Unknown detector backend: {backend}")
