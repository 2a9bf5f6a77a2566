"""Camera frame source package."""

from hardware.camera import CameraSettings, Frame, FrameSource, OpenCVFrameSource, UnavailableFrameSource

__all__ = [
    "CameraSettings",
    "Frame",
    "FrameSource",
    "OpenCVFrameSource",
    "UnavailableFrameSource",
]
