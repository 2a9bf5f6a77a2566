"""Background detection loops."""

from services.overlay_loop import OverlayLoop
from services.threat_monitor import ThreatMonitor

__all__ = ["OverlayLoop", "ThreatMonitor"]
