"""Tests for the per-source classification rules."""

import pytest

from hazardfeed.core.models import AlertSeverity, AlertType
from hazardfeed.processing.classification import (
    alert_level_severity,
    classify_bulletin,
    classify_event_categories,
    classify_fire,
    classify_magnitude,
    infer_bulletin_type,
    normalize_fire_confidence,
)


@pytest.mark.parametrize(
    "magnitude, expected",
    [
        (None, AlertSeverity.MINOR),
        (0.0, AlertSeverity.MINOR),
        (3.99, AlertSeverity.MINOR),
        (4.0, AlertSeverity.MODERATE),
        (4.9, AlertSeverity.MODERATE),
        (5.0, AlertSeverity.SEVERE),
        (7.8, AlertSeverity.SEVERE),
    ],
)
def test_classify_magnitude(magnitude, expected):
    assert classify_magnitude(magnitude) is expected


@pytest.mark.parametrize(
    "confidence, brightness, expected",
    [
        ("h", 300.0, AlertSeverity.SEVERE),
        ("high", None, AlertSeverity.SEVERE),
        ("l", 420.0, AlertSeverity.SEVERE),
        ("n", 300.0, AlertSeverity.MODERATE),
        ("nominal", 300.0, AlertSeverity.MODERATE),
        ("l", 360.0, AlertSeverity.MODERATE),
        ("l", 300.0, AlertSeverity.MINOR),
        ("l", 400.0, AlertSeverity.MODERATE),
        ("", None, AlertSeverity.MINOR),
        ("85", 300.0, AlertSeverity.SEVERE),
        ("50", 300.0, AlertSeverity.MODERATE),
        ("10", 300.0, AlertSeverity.MINOR),
    ],
)
def test_classify_fire(confidence, brightness, expected):
    assert classify_fire(confidence, brightness) is expected


def test_normalize_fire_confidence():
    assert normalize_fire_confidence("H") == "high"
    assert normalize_fire_confidence(" n ") == "nominal"
    assert normalize_fire_confidence(95) == "high"
    assert normalize_fire_confidence("garbage") is None
    assert normalize_fire_confidence(None) is None


@pytest.mark.parametrize(
    "title, description, expected",
    [
        ("Green earthquake alert (Magnitude 4.6M) in Japan", "", AlertType.EARTHQUAKE),
        ("Tsunami warning for the Pacific", "", AlertType.TSUNAMI),
        ("Tropical Cyclone FREDDY-23", "", AlertType.HURRICANE),
        ("Typhoon HAIKUI", "", AlertType.HURRICANE),
        ("Flood alert in Brazil", "", AlertType.FLOOD),
        ("Volcano eruption at Etna", "", AlertType.VOLCANO),
        ("Drought in Somalia", "", AlertType.OTHER),
        ("Event update", "A strong earthquake was felt", AlertType.EARTHQUAKE),
    ],
)
def test_infer_bulletin_type(title, description, expected):
    assert infer_bulletin_type(title, description) is expected


def test_first_matching_hazard_wins():
    # mentions tsunami, flood and earthquake; earthquake is checked first
    title = "Tsunami and flood risk after earthquake"
    assert infer_bulletin_type(title) is AlertType.EARTHQUAKE


def test_alert_level_tokens():
    assert alert_level_severity("Red") is AlertSeverity.EXTREME
    assert alert_level_severity("orange") is AlertSeverity.SEVERE
    assert alert_level_severity("Green") is None
    assert alert_level_severity(None, "Alert level: Orange") is AlertSeverity.SEVERE
    assert alert_level_severity("", "reduced impact") is None


class TestClassifyBulletin:
    def test_type_default_severity(self):
        assert classify_bulletin("Tsunami in Chile") == (AlertType.TSUNAMI, AlertSeverity.SEVERE)
        assert classify_bulletin("Earthquake in Peru") == (AlertType.EARTHQUAKE, AlertSeverity.MODERATE)
        assert classify_bulletin("Flood in Peru") == (AlertType.FLOOD, AlertSeverity.MODERATE)
        assert classify_bulletin("Wildfire nearby") == (AlertType.OTHER, AlertSeverity.MINOR)

    def test_alert_level_overrides_default(self):
        assert classify_bulletin("Earthquake in Peru", alert_level="Orange") == (
            AlertType.EARTHQUAKE,
            AlertSeverity.SEVERE,
        )
        assert classify_bulletin("Flood in Peru", "Red alert issued") == (
            AlertType.FLOOD,
            AlertSeverity.EXTREME,
        )

    def test_green_level_ignores_colour_words_in_description(self):
        result = classify_bulletin("Green earthquake alert in USA", "Earthquake near Orange, California", "Green")
        assert result == (AlertType.EARTHQUAKE, AlertSeverity.MODERATE)

    def test_description_scanned_only_without_level(self):
        assert classify_bulletin("Flood in Peru", "Red alert issued", None)[1] is AlertSeverity.EXTREME
        assert classify_bulletin("Flood in Peru", "Red alert issued", "  ")[1] is AlertSeverity.EXTREME
        assert classify_bulletin("Flood in Peru", "Red alert issued", "Green")[1] is AlertSeverity.MODERATE

    def test_is_pure(self):
        args = ("Orange earthquake alert in Turkey", "Population affected", "Orange")
        assert classify_bulletin(*args) == classify_bulletin(*args)


@pytest.mark.parametrize(
    "categories, expected",
    [
        (["Wildfires"], (AlertType.WILDFIRE, AlertSeverity.SEVERE)),
        (["Volcanoes"], (AlertType.VOLCANO, AlertSeverity.SEVERE)),
        (["Severe Storms"], (AlertType.HURRICANE, AlertSeverity.SEVERE)),
        (["Floods"], (AlertType.FLOOD, AlertSeverity.MODERATE)),
        (["Earthquakes"], (AlertType.EARTHQUAKE, AlertSeverity.MODERATE)),
        (["Sea and Lake Ice"], (AlertType.OTHER, AlertSeverity.MINOR)),
        ([], (AlertType.OTHER, AlertSeverity.MINOR)),
        (["Dust and Haze", "Floods", "Wildfires"], (AlertType.FLOOD, AlertSeverity.MODERATE)),
    ],
)
def test_classify_event_categories(categories, expected):
    assert classify_event_categories(categories) == expected
