"""Hazard classification for detected object classes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from config.controller import DEFAULT_THREAT_CLASSES
from vision.detections import Detection


@dataclass(frozen=True)
class ThreatSettings:
    """Hazard table and detection threshold for the threat monitor."""

    classes: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_THREAT_CLASSES))
    score_threshold: float = 0.5
    poll_interval_ms: int = 700
    box_clear_ms: int = 900

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> "ThreatSettings":
        threats_cfg = config.get("threats") if isinstance(config, Mapping) else None
        if not isinstance(threats_cfg, Mapping):
            return cls()
        classes = threats_cfg.get("classes")
        if not isinstance(classes, Mapping):
            classes = DEFAULT_THREAT_CLASSES
        return cls(
            classes={str(k).lower(): str(v) for k, v in classes.items()},
            score_threshold=float(threats_cfg.get("score_threshold", 0.5)),
            poll_interval_ms=int(threats_cfg.get("poll_interval_ms", 700)),
            box_clear_ms=int(threats_cfg.get("box_clear_ms", 900)),
        )


class ThreatClassifier:
    """Static many-to-one mapping from class labels to alert labels."""

    def __init__(self, classes: Mapping[str, str] | None = None, score_threshold: float = 0.5) -> None:
        table = classes if classes is not None else DEFAULT_THREAT_CLASSES
        self._table = {str(label).strip().lower(): str(group) for label, group in table.items()}
        self.score_threshold = float(score_threshold)

    @classmethod
    def from_settings(cls, settings: ThreatSettings) -> "ThreatClassifier":
        return cls(settings.classes, settings.score_threshold)

    def classify(self, label: str) -> str | None:
        """Return the alert label for ``label``, or ``None`` for non-hazard classes."""

        return self._table.get(label.strip().lower())

    def is_threat(self, detection: Detection) -> bool:
        return (
            self.classify(detection.label) is not None
            and detection.confidence >= self.score_threshold
        )

    def threats(self, detections: Iterable[Detection]) -> list[Detection]:
        """Return the hazard detections above the score threshold, in input order."""

        return [detection for detection in detections if self.is_threat(detection)]

    def alert_labels(self, detections: Iterable[Detection]) -> list[str]:
        labels: list[str] = []
        for detection in self.threats(detections):
            alert_label = self.classify(detection.label)
            if alert_label is not None:
                labels.append(alert_label)
        return labels
