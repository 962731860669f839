"""Proyección de lecturas a series para gráficos (día/semana/mes).

DAY is the raw readings in insertion order. WEEK averages each calendar day
over the 7 days ending on the day of the most recent reading; MONTH averages
each ISO week (Monday start) over the 30 days ending on that day. The window
is anchored on the data, not on the wall clock, so a projection is a pure
function of its input.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date, timedelta
from typing import NamedTuple

import pandas as pd

from glucose_log.errors import IndexOutOfRangeError
from glucose_log.model import Reading, TimeRange

WEEK_DAYS = 7
MONTH_DAYS = 30
UNDATED_LABEL = "Today"


class TrendPoint(NamedTuple):
    """One chart point."""

    label: str
    value: int


def project(
    readings: Sequence[Reading], time_range: TimeRange = TimeRange.DAY
) -> list[TrendPoint]:
    """Project readings into an ordered chart series.

    Args:
        readings: Readings in insertion (chronological) order.
        time_range: Requested granularity.

    Returns:
        Points in chronological order. The last point always covers the
        most recent reading.
    """
    if time_range is TimeRange.DAY:
        return [TrendPoint(r.time, r.value) for r in readings]
    if not readings:
        return []

    days = resolve_days(readings)
    values = [r.value for r in readings]
    if days[-1] is None:
        return [TrendPoint(UNDATED_LABEL, _rounded_mean(values))]

    last_day = days[-1]
    span = WEEK_DAYS if time_range is TimeRange.WEEK else MONTH_DAYS
    first_day = last_day - timedelta(days=span - 1)

    frame = pd.DataFrame({"day": days, "value": values})
    in_window = frame["day"].map(lambda d: first_day <= d <= last_day)
    frame = frame.loc[in_window].copy()
    if time_range is TimeRange.WEEK:
        frame["bucket"] = frame["day"]
    else:
        frame["bucket"] = frame["day"].map(_week_start)

    grouped = frame.groupby("bucket", sort=True)["value"].mean()
    return [
        TrendPoint(_bucket_label(bucket, time_range), _rounded_mean([mean]))
        for bucket, mean in grouped.items()
    ]


def point_at(
    readings: Sequence[Reading],
    index: int,
    time_range: TimeRange = TimeRange.DAY,
) -> Reading:
    """Return the reading behind a selected chart point.

    For WEEK/MONTH the result is the bucket's label and averaged value.

    Raises:
        IndexOutOfRangeError: If ``index`` is outside the projected series.
            Negative indices are rejected rather than counted from the end.
    """
    if time_range is TimeRange.DAY:
        if not 0 <= index < len(readings):
            raise IndexOutOfRangeError(index, len(readings))
        return readings[index]

    series = project(readings, time_range)
    if not 0 <= index < len(series):
        raise IndexOutOfRangeError(index, len(series))
    point = series[index]
    return Reading(time=point.label, value=point.value)


def resolve_days(readings: Sequence[Reading]) -> list[date | None]:
    """Assign a calendar day to every reading.

    Undated readings take the day of the nearest earlier dated reading;
    leading undated readings take the first known day. All entries are None
    only when no reading carries a day.
    """
    first_known = next((r.day for r in readings if r.day is not None), None)
    out: list[date | None] = []
    current = first_known
    for r in readings:
        if r.day is not None:
            current = r.day
        out.append(current)
    return out


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _bucket_label(bucket: date, time_range: TimeRange) -> str:
    if time_range is TimeRange.WEEK:
        return bucket.strftime("%a %d")
    return f"Wk {bucket.strftime('%b %d')}"


def _rounded_mean(values: Sequence[float]) -> int:
    # half-up, so 120.5 -> 121
    return math.floor(sum(values) / len(values) + 0.5)
