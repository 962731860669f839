"""Modelos tipados para lecturas de glucosa y eventos de actividad."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Literal, Union

UNIT = "mg/dL"

MEAL_TYPES: tuple[str, ...] = ("breakfast", "lunch", "dinner", "snack")


class GlucoseStatus(str, Enum):
    """Position of a reading relative to the target range."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class Trend(str, Enum):
    """Direction between two consecutive readings."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class TimeRange(str, Enum):
    """Chart granularity."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class ThresholdConfig:
    """Target range bounds in mg/dL (inclusive)."""

    low: int = 70
    high: int = 180

    def __post_init__(self) -> None:
        if self.low > self.high:
            raise ValueError(
                f"low threshold ({self.low}) must not exceed high ({self.high})"
            )


@dataclass(frozen=True)
class Reading:
    """One glucose measurement with its "HH:MM" label."""

    time: str
    value: int
    day: date | None = None
    unit: str = UNIT


@dataclass(frozen=True)
class GlucoseEntry:
    """Activity entry for a glucose reading.

    ``summary`` holds a stored details line whose value could not be
    recovered; such entries have ``value=None``.
    """

    timestamp: str
    value: int | None = None
    recorded_at: datetime | None = None
    summary: str | None = None
    kind: Literal["glucose"] = field(default="glucose", init=False)

    @property
    def details(self) -> str:
        if self.summary is not None:
            return self.summary
        return f"Glucose Reading: {self.value} {UNIT}"


@dataclass(frozen=True)
class MedicationEntry:
    """Activity entry for a medication dose."""

    timestamp: str
    name: str = ""
    dosage: str = ""
    recorded_at: datetime | None = None
    summary: str | None = None
    kind: Literal["medication"] = field(default="medication", init=False)

    @property
    def details(self) -> str:
        if self.summary is not None:
            return self.summary
        return f"Medication: {self.name} {self.dosage}mg"


@dataclass(frozen=True)
class MealEntry:
    """Activity entry for a meal; food items are frozen at save time."""

    timestamp: str
    meal_type: str = ""
    carb_count: str = ""
    food_items: tuple[str, ...] = ()
    recorded_at: datetime | None = None
    summary: str | None = None
    kind: Literal["meal"] = field(default="meal", init=False)

    @property
    def details(self) -> str:
        if self.summary is not None:
            return self.summary
        return f"Meal: {self.meal_type.capitalize()} ({self.carb_count}g carbs)"


ActivityEntry = Union[GlucoseEntry, MedicationEntry, MealEntry]


def time_label(at: datetime) -> str:
    """Format the "HH:MM" label stored with a reading."""
    return at.strftime("%H:%M")


def activity_label(at: datetime) -> str:
    """Format the label shown in the recent activity list."""
    return f"Today, {time_label(at)}"
