"""Frame sources backed by a local camera."""

from __future__ import annotations

from dataclasses import dataclass
import importlib
import importlib.util
import threading
import time
from typing import Any, Mapping, Protocol

from core.errors import CapabilityUnavailable
from core.logging import logger


@dataclass(frozen=True)
class Frame:
    """One captured frame and its pixel dimensions."""

    image: Any
    width: int
    height: int
    captured_at: float


class FrameSource(Protocol):
    """Minimal frame acquisition interface used by the perception loops."""

    def read(self) -> Frame:
        """Return the most recent frame, raising on failure."""

    def list_devices(self) -> list[int]:
        """Return usable device indices."""

    def select_device(self, device_index: int) -> None:
        """Switch to another capture device."""

    def close(self) -> None:
        """Release the capture device."""


@dataclass(frozen=True)
class CameraSettings:
    """Capture settings for the local camera."""

    device_index: int = 0
    width: int = 640
    height: int = 480
    max_probe_devices: int = 5

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "CameraSettings":
        camera_cfg = config.get("camera") if isinstance(config, Mapping) else None
        if not isinstance(camera_cfg, Mapping):
            return cls()
        return cls(
            device_index=int(camera_cfg.get("device_index", 0)),
            width=int(camera_cfg.get("width", 640)),
            height=int(camera_cfg.get("height", 480)),
        )


def _require_cv2() -> Any:
    if importlib.util.find_spec("cv2") is None:
        raise CapabilityUnavailable("camera", "opencv-python is not installed")
    return importlib.import_module("cv2")


class OpenCVFrameSource:
    """Thread-safe OpenCV ``VideoCapture`` wrapper."""

    def __init__(self, settings: CameraSettings | None = None) -> None:
        self.settings = settings or CameraSettings()
        self._cv2 = _require_cv2()
        self._lock = threading.Lock()
        self._capture: Any = None
        self._device_index = self.settings.device_index
        self._open(self._device_index)

    def _open(self, device_index: int) -> None:
        capture = self._cv2.VideoCapture(device_index)
        if not capture.isOpened():
            capture.release()
            raise CapabilityUnavailable("camera", f"device {device_index} could not be opened")
        capture.set(self._cv2.CAP_PROP_FRAME_WIDTH, self.settings.width)
        capture.set(self._cv2.CAP_PROP_FRAME_HEIGHT, self.settings.height)
        self._capture = capture
        self._device_index = device_index
        logger.info("[CAMERA] Opened device %s", device_index)

    @property
    def device_index(self) -> int:
        return self._device_index

    def read(self) -> Frame:
        with self._lock:
            if self._capture is None:
                raise RuntimeError("Camera is closed")
            ok, image = self._capture.read()
        if not ok or image is None:
            raise RuntimeError(f"Camera device {self._device_index} returned no frame")
        height, width = image.shape[:2]
        return Frame(image=image, width=int(width), height=int(height), captured_at=time.time())

    def list_devices(self) -> list[int]:
        devices: list[int] = []
        for index in range(self.settings.max_probe_devices):
            if index == self._device_index:
                devices.append(index)
                continue
            capture = self._cv2.VideoCapture(index)
            try:
                if capture.isOpened():
                    devices.append(index)
            finally:
                capture.release()
        return devices

    def select_device(self, device_index: int) -> None:
        with self._lock:
            previous = self._capture
            self._capture = None
            if previous is not None:
                previous.release()
            self._open(device_index)

    def close(self) -> None:
        with self._lock:
            if self._capture is not None:
                self._capture.release()
                self._capture = None


class UnavailableFrameSource:
    """Stand-in used when no camera could be opened; every read fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason

    def read(self) -> Frame:
        raise CapabilityUnavailable("camera", self.reason)

    def list_devices(self) -> list[int]:
        return []

    def select_device(self, device_index: int) -> None:
        raise CapabilityUnavailable("camera", self.reason)

    def close(self) -> None:
        pass
