"""Tests for hazard classification."""

from __future__ import annotations

from vision.detections import Detection
from vision.threats import ThreatClassifier, ThreatSettings


def _det(label: str, confidence: float = 0.9) -> Detection:
    return Detection(label=label, confidence=confidence, bbox=(0.0, 0.0, 10.0, 10.0))


def test_vehicle_classes_share_one_alert_label() -> None:
    classifier = ThreatClassifier()

    assert classifier.classify("car") == "vehicle"
    assert classifier.classify(" Truck ") == "vehicle"
    assert classifier.classify("person") is None


def test_threats_respect_score_threshold() -> None:
    classifier = ThreatClassifier(score_threshold=0.5)

    detections = [_det("car", 0.49), _det("bus", 0.5), _det("person", 0.99)]

    assert [d.label for d in classifier.threats(detections)] == ["bus"]


def test_alert_labels_keep_duplicates_in_order() -> None:
    classifier = ThreatClassifier({"car": "vehicle", "dog": "animal"})

    labels = classifier.alert_labels([_det("car"), _det("dog"), _det("car")])

    assert labels == ["vehicle", "animal", "vehicle"]


def test_settings_from_config() -> None:
    settings = ThreatSettings.from_config(
        {"threats": {"classes": {"Dog": "animal"}, "score_threshold": 0.7, "poll_interval_ms": 300}}
    )
    classifier = ThreatClassifier.from_settings(settings)

    assert settings.poll_interval_ms == 300
    assert classifier.classify("dog") == "animal"
    assert classifier.classify("car") is None
    assert classifier.is_threat(_det("dog", 0.69)) is False
