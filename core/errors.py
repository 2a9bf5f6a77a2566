"""Error types shared by perception capabilities."""

from __future__ import annotations


class CapabilityUnavailable(RuntimeError):
    """Raised when a camera, model, speech or audio backend cannot be used."""

    def __init__(self, capability: str, reason: str) -> None:
        super().__init__(f"{capability} unavailable: {reason}")
        self.capability = capability
        self.reason = reason


class DetectorError(RuntimeError):
    """Raised when a single inference call fails."""
