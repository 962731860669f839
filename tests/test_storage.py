from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

import pytest

from glucose_log.model import GlucoseEntry, MealEntry, MedicationEntry, Reading
from glucose_log.storage import (
    SQLiteStore,
    decode_activity,
    decode_readings,
    encode_activity,
    encode_readings,
)


def test_store_get_set_and_overwrite(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "nested" / "app.sqlite3")
    assert store.get("glucoseReadings") is None
    store.set("glucoseReadings", "[]")
    store.set("glucoseReadings", '[{"time": "10:30", "value": 120}]')
    assert store.get("glucoseReadings") == '[{"time": "10:30", "value": 120}]'

    reopened = SQLiteStore(tmp_path / "nested" / "app.sqlite3")
    assert reopened.get("glucoseReadings") == '[{"time": "10:30", "value": 120}]'


def test_readings_wire_format() -> None:
    readings = [
        Reading(time="10:30", value=120, day=date(2025, 1, 2)),
        Reading(time="11:00", value=95),
    ]
    payload = json.loads(encode_readings(readings))
    assert payload == [
        {"time": "10:30", "value": 120, "date": "2025-01-02"},
        {"time": "11:00", "value": 95},
    ]
    assert decode_readings(encode_readings(readings)) == readings


def test_decode_readings_accepts_legacy_items_without_date() -> None:
    readings = decode_readings('[{"time": "6:00", "value": 110}]')
    assert readings == [Reading(time="6:00", value=110, day=None)]


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"time": "10:30"}',
        '[{"time": "10:30"}]',
        '[{"time": "10:30", "value": "abc"}]',
        "[1, 2]",
        '[{"time": "10:30", "value": 1e400}]',
        '[{"time": "10:30", "value": -Infinity}]',
    ],
)
def test_decode_readings_rejects_malformed(raw: str) -> None:
    with pytest.raises(ValueError):
        decode_readings(raw)


def test_activity_wire_format() -> None:
    at = datetime(2025, 1, 2, 7, 45)
    entries = [
        MealEntry(
            timestamp="Today, 07:45",
            meal_type="breakfast",
            carb_count="45",
            food_items=("Toast", "Toast"),
            recorded_at=at,
        ),
        MedicationEntry(timestamp="Today, 07:40", name="Metformin", dosage="500"),
        GlucoseEntry(timestamp="Today, 07:30", value=120),
    ]
    payload = json.loads(encode_activity(entries))
    assert [p["type"] for p in payload] == ["meal", "medication", "glucose"]
    assert payload[0]["details"] == "Meal: Breakfast (45g carbs)"
    assert payload[0]["foodItems"] == ["Toast", "Toast"]
    assert payload[0]["recordedAt"] == "2025-01-02T07:45:00"
    assert payload[1]["details"] == "Medication: Metformin 500mg"
    assert payload[2] == {
        "type": "glucose",
        "timestamp": "Today, 07:30",
        "details": "Glucose Reading: 120 mg/dL",
        "value": 120,
    }
    assert decode_activity(encode_activity(entries)) == entries


@pytest.mark.parametrize(
    "raw",
    [
        '[{"type": "exercise", "timestamp": "Today, 10:00", "details": "x"}]',
        '[{"type": "glucose", "timestamp": "Today, 10:00"}]',
        '[{"type": "glucose", "timestamp": "t", "details": "x", "value": "abc"}]',
        '[{"type": "glucose", "timestamp": "t", "details": "x", "value": 1e400}]',
        "[[]]",
    ],
)
def test_decode_activity_rejects_malformed(raw: str) -> None:
    with pytest.raises(ValueError):
        decode_activity(raw)


def test_decode_activity_recovers_fields_from_details() -> None:
    raw = json.dumps(
        [
            {"type": "meal", "timestamp": "Today, 07:45", "details": "Meal: Breakfast (45g carbs)"},
            {"type": "medication", "timestamp": "Today, 08:15", "details": "Medication: Metformin 500mg"},
            {"type": "glucose", "timestamp": "Today, 10:30", "details": "Glucose Reading: 120 mg/dL"},
        ]
    )
    assert decode_activity(raw) == [
        MealEntry(timestamp="Today, 07:45", meal_type="breakfast", carb_count="45"),
        MedicationEntry(timestamp="Today, 08:15", name="Metformin", dosage="500"),
        GlucoseEntry(timestamp="Today, 10:30", value=120),
    ]


def test_decode_activity_keeps_unrecognised_details_verbatim() -> None:
    raw = json.dumps(
        [
            {"type": "glucose", "timestamp": "Today, 10:30", "details": "Sensor warm-up"},
            {"type": "meal", "timestamp": "Today, 11:00", "details": "Meal: Brunch (30g carbs)"},
            {
                "type": "meal",
                "timestamp": "Today, 12:00",
                "details": "Meal: Brunch (45g carbs)",
                "mealType": "Brunch",
                "carbCount": "45",
            },
        ]
    )
    entries = decode_activity(raw)
    assert [e.details for e in entries] == [
        "Sensor warm-up",
        "Meal: Brunch (30g carbs)",
        "Meal: Brunch (45g carbs)",
    ]
    glucose = entries[0]
    assert isinstance(glucose, GlucoseEntry)
    assert glucose.value is None

    payload = json.loads(encode_activity(entries))
    assert payload[0] == {
        "type": "glucose",
        "timestamp": "Today, 10:30",
        "details": "Sensor warm-up",
    }
    assert decode_activity(encode_activity(entries)) == entries
