"""Interaction package utilities."""

from interaction.alerts import AlertDispatcher, AlertSettings
from interaction.flash import VisualFlash
from interaction.narration import NarrationQueue, NarrationSettings

__all__ = [
    "AlertDispatcher",
    "AlertSettings",
    "NarrationQueue",
    "NarrationSettings",
    "VisualFlash",
]
