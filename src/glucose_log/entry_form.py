"""Controlador del formulario de carga (glucosa, medicación, comida)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from dateutil import tz

from glucose_log.model import (
    MEAL_TYPES,
    ActivityEntry,
    GlucoseEntry,
    MealEntry,
    MedicationEntry,
    activity_label,
)

ENTRY_KINDS: tuple[str, ...] = ("glucose", "medication", "meal")

SLIDER_MIN = 40
SLIDER_MAX = 400

_LOCAL_TZ = tz.tzlocal()


@dataclass
class GlucoseDraft:
    value: int = 120


@dataclass
class MedicationDraft:
    name: str = "Insulin"
    dosage: str = "10"


@dataclass
class MealDraft:
    meal_type: str = "breakfast"
    carb_count: str = "45"
    food_items: list[str] = field(default_factory=lambda: ["Oatmeal", "Banana"])


class EntryFormController:
    """Holds one draft per entry kind and turns the selected one into an entry."""

    def __init__(self, kind: str = "glucose") -> None:
        self.kind: str = "glucose"
        self.glucose = GlucoseDraft()
        self.medication = MedicationDraft()
        self.meal = MealDraft()
        self.select(kind)

    def select(self, kind: str) -> None:
        """Switch the active kind; other drafts keep their values."""
        if kind not in ENTRY_KINDS:
            raise ValueError(f"Unknown entry kind: {kind!r}")
        self.kind = kind

    def set_glucose_value(self, value: float) -> None:
        """Slider input, rounded and kept inside the display range."""
        self.glucose.value = min(max(round(value), SLIDER_MIN), SLIDER_MAX)

    def set_glucose_text(self, text: str) -> None:
        """Manual entry; anything that is not an integer becomes 0."""
        try:
            self.glucose.value = int(text.strip())
        except ValueError:
            self.glucose.value = 0

    def set_medication(self, name: str | None = None, dosage: str | None = None) -> None:
        if name is not None:
            self.medication.name = name
        if dosage is not None:
            self.medication.dosage = dosage

    def set_meal_type(self, meal_type: str) -> None:
        if meal_type not in MEAL_TYPES:
            raise ValueError(f"Unknown meal type: {meal_type!r}")
        self.meal.meal_type = meal_type

    def set_carb_count(self, text: str) -> None:
        self.meal.carb_count = text

    def add_food_item(self, text: str) -> None:
        """Append a trimmed food item; blank text is ignored."""
        item = text.strip()
        if item:
            self.meal.food_items.append(item)

    def clear_food_items(self) -> None:
        """Empty the draft's food items."""
        self.meal.food_items.clear()

    def remove_food_item(self, index: int) -> None:
        """Remove a food item from the draft; unknown indices are ignored."""
        if 0 <= index < len(self.meal.food_items):
            del self.meal.food_items[index]

    def save(self) -> ActivityEntry:
        """Build an immutable entry from the selected draft, stamped now."""
        at = datetime.now(tz=_LOCAL_TZ)
        label = activity_label(at)
        if self.kind == "glucose":
            return GlucoseEntry(timestamp=label, value=self.glucose.value, recorded_at=at)
        if self.kind == "medication":
            return MedicationEntry(
                timestamp=label,
                name=self.medication.name,
                dosage=self.medication.dosage,
                recorded_at=at,
            )
        return MealEntry(
            timestamp=label,
            meal_type=self.meal.meal_type,
            carb_count=self.meal.carb_count,
            food_items=tuple(self.meal.food_items),
            recorded_at=at,
        )
