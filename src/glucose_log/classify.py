"""Clasificación de lecturas contra el rango objetivo."""

from __future__ import annotations

from glucose_log.model import GlucoseStatus, ThresholdConfig, Trend

_DEFAULT_THRESHOLDS = ThresholdConfig()

_STATUS_TEXT: dict[GlucoseStatus, str] = {
    GlucoseStatus.LOW: "Below target range",
    GlucoseStatus.NORMAL: "Within target range",
    GlucoseStatus.HIGH: "Above target range",
}


def classify(
    value: float, thresholds: ThresholdConfig = _DEFAULT_THRESHOLDS
) -> GlucoseStatus:
    """Classify a reading; both bounds count as in range.

    Args:
        value: Glucose value in mg/dL.
        thresholds: Target range, defaults to 70-180.

    Returns:
        LOW below ``thresholds.low``, HIGH above ``thresholds.high``,
        NORMAL otherwise.
    """
    if value < thresholds.low:
        return GlucoseStatus.LOW
    if value > thresholds.high:
        return GlucoseStatus.HIGH
    return GlucoseStatus.NORMAL


def trend_of(current: float, previous: float) -> Trend:
    """Direction from the previous reading to the current one."""
    if current > previous:
        return Trend.UP
    if current < previous:
        return Trend.DOWN
    return Trend.STABLE


def status_text(status: GlucoseStatus) -> str:
    """Card wording for a status, e.g. "Within target range"."""
    return _STATUS_TEXT[status]
