"""Audio utility constants."""

from __future__ import annotations

import importlib
import importlib.util
from typing import Any


CHANNELS = 1
TONE_RATE = 44100
SAMPLE_WIDTH = 2


def require_module(module_name: str, capability: str) -> Any:
    """Import an optional backend module or raise ``CapabilityUnavailable``."""

    from core.errors import CapabilityUnavailable

    if importlib.util.find_spec(module_name) is None:
        raise CapabilityUnavailable(capability, f"{module_name} is not installed")
    return importlib.import_module(module_name)


def resolve_format() -> int:
    """Resolve the PyAudio format constant."""

    pyaudio = require_module("pyaudio", "audio")
    return pyaudio.paInt16
