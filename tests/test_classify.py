from __future__ import annotations

import pytest

from glucose_log.classify import classify, status_text, trend_of
from glucose_log.model import GlucoseStatus, ThresholdConfig, Trend


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (200, GlucoseStatus.HIGH),
        (50, GlucoseStatus.LOW),
        (120, GlucoseStatus.NORMAL),
        (70, GlucoseStatus.NORMAL),
        (180, GlucoseStatus.NORMAL),
        (69, GlucoseStatus.LOW),
        (181, GlucoseStatus.HIGH),
    ],
)
def test_classify_default_range(value: int, expected: GlucoseStatus) -> None:
    assert classify(value) is expected


def test_classify_matches_range_definition_for_all_values() -> None:
    for v in range(0, 450):
        status = classify(v)
        assert (status is GlucoseStatus.NORMAL) == (70 <= v <= 180)
        assert (status is GlucoseStatus.LOW) == (v < 70)
        assert (status is GlucoseStatus.HIGH) == (v > 180)


def test_classify_custom_thresholds() -> None:
    thresholds = ThresholdConfig(low=80, high=140)
    assert classify(75, thresholds) is GlucoseStatus.LOW
    assert classify(140, thresholds) is GlucoseStatus.NORMAL
    assert classify(141, thresholds) is GlucoseStatus.HIGH


def test_threshold_config_rejects_inverted_range() -> None:
    with pytest.raises(ValueError, match="must not exceed"):
        ThresholdConfig(low=200, high=100)


def test_trend_of() -> None:
    assert trend_of(130, 120) is Trend.UP
    assert trend_of(110, 120) is Trend.DOWN
    assert trend_of(120, 120) is Trend.STABLE


def test_status_text() -> None:
    assert status_text(GlucoseStatus.LOW) == "Below target range"
    assert status_text(GlucoseStatus.NORMAL) == "Within target range"
    assert status_text(GlucoseStatus.HIGH) == "Above target range"
