"""Persistencia SQLite clave/valor y codificación JSON de las colecciones."""

from __future__ import annotations

import json
import math
import re
import sqlite3
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any, Protocol

from glucose_log.model import (
    MEAL_TYPES,
    ActivityEntry,
    GlucoseEntry,
    MealEntry,
    MedicationEntry,
    Reading,
)

READINGS_KEY = "glucoseReadings"
ACTIVITY_KEY = "recentActivity"
SETTINGS_KEY = "settings"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class KeyValueStorage(Protocol):
    """Minimal string key/value backend used by the entry store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class SQLiteStore:
    """Repositorio SQLite clave/valor."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def get(self, key: str) -> str | None:
        """Devuelve el valor guardado o None si la clave no existe."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return str(row["value"])

    def set(self, key: str, value: str) -> None:
        """Inserta o reemplaza el valor de una clave."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                (key, value),
            )
            conn.commit()


def encode_readings(readings: Iterable[Reading]) -> str:
    """Serialize readings in insertion order."""
    payload = []
    for r in readings:
        item: dict[str, Any] = {"time": r.time, "value": r.value}
        if r.day is not None:
            item["date"] = r.day.isoformat()
        payload.append(item)
    return json.dumps(payload)


def decode_readings(raw: str) -> list[Reading]:
    """Parse the persisted readings array.

    Raises:
        ValueError: If the JSON or any item has an unexpected shape.
    """
    items = _load_list(raw)
    try:
        return [
            Reading(
                time=str(item["time"]),
                value=_as_int(item["value"]),
                day=date.fromisoformat(item["date"]) if item.get("date") else None,
            )
            for item in items
        ]
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed reading: {exc}") from exc


def encode_activity(entries: Sequence[ActivityEntry]) -> str:
    """Serialize the activity log, most recent first."""
    return json.dumps([_entry_to_dict(e) for e in entries])


def decode_activity(raw: str) -> list[ActivityEntry]:
    """Parse the persisted activity array.

    Items carrying only ``type``/``timestamp``/``details`` are accepted; their
    variant fields are read back from ``details`` when it matches the known
    wording, otherwise the details line is kept as the entry's summary.

    Raises:
        ValueError: If the JSON or any entry has an unexpected shape.
    """
    items = _load_list(raw)
    try:
        return [_entry_from_dict(item) for item in items]
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed activity entry: {exc}") from exc


def _entry_to_dict(entry: ActivityEntry) -> dict[str, Any]:
    out: dict[str, Any] = {
        "type": entry.kind,
        "timestamp": entry.timestamp,
        "details": entry.details,
    }
    if entry.recorded_at is not None:
        out["recordedAt"] = entry.recorded_at.isoformat()
    if entry.summary is not None:
        return out
    if isinstance(entry, GlucoseEntry):
        out["value"] = entry.value
    elif isinstance(entry, MedicationEntry):
        out["name"] = entry.name
        out["dosage"] = entry.dosage
    elif isinstance(entry, MealEntry):
        out["mealType"] = entry.meal_type
        out["carbCount"] = entry.carb_count
        out["foodItems"] = list(entry.food_items)
    else:
        raise TypeError(f"Unknown activity entry: {entry!r}")
    return out


_DETAIL_PATTERNS: dict[str, re.Pattern[str]] = {
    "glucose": re.compile(r"^Glucose Reading: (-?\d+) mg/dL$"),
    "medication": re.compile(r"^Medication: (.+) (\S+)mg$"),
    "meal": re.compile(r"^Meal: (\w+) \((.*)g carbs\)$"),
}


def _entry_from_dict(item: dict[str, Any]) -> ActivityEntry:
    kind = item["type"]
    if kind not in _DETAIL_PATTERNS:
        raise ValueError(f"Unknown activity type: {kind!r}")
    timestamp = str(item["timestamp"])
    details = str(item["details"])
    recorded_raw = item.get("recordedAt")
    recorded_at = datetime.fromisoformat(recorded_raw) if recorded_raw else None

    entry = _entry_from_fields(kind, item, timestamp, recorded_at)
    if entry is None:
        entry = _entry_from_details(kind, details, timestamp, recorded_at)
    return entry


def _entry_from_fields(
    kind: str, item: dict[str, Any], timestamp: str, recorded_at: datetime | None
) -> ActivityEntry | None:
    """Build an entry from its stored variant fields, None if they are absent."""
    if kind == "glucose":
        if item.get("value") is None:
            return None
        return GlucoseEntry(
            timestamp=timestamp, value=_as_int(item["value"]), recorded_at=recorded_at
        )
    if kind == "medication":
        if "name" not in item or "dosage" not in item:
            return None
        return MedicationEntry(
            timestamp=timestamp,
            name=str(item["name"]),
            dosage=str(item["dosage"]),
            recorded_at=recorded_at,
        )
    if "mealType" not in item or "carbCount" not in item:
        return None
    meal_type = str(item["mealType"])
    if meal_type not in MEAL_TYPES:
        return None
    food_items = item.get("foodItems", [])
    if not isinstance(food_items, list):
        raise ValueError("foodItems must be a list")
    return MealEntry(
        timestamp=timestamp,
        meal_type=meal_type,
        carb_count=str(item["carbCount"]),
        food_items=tuple(str(f) for f in food_items),
        recorded_at=recorded_at,
    )


def _entry_from_details(
    kind: str, details: str, timestamp: str, recorded_at: datetime | None
) -> ActivityEntry:
    """Recover variant fields from the details line, or keep it verbatim."""
    match = _DETAIL_PATTERNS[kind].match(details)
    entry: ActivityEntry | None = None
    if match is not None:
        if kind == "glucose":
            entry = GlucoseEntry(
                timestamp=timestamp, value=int(match.group(1)), recorded_at=recorded_at
            )
        elif kind == "medication":
            entry = MedicationEntry(
                timestamp=timestamp,
                name=match.group(1),
                dosage=match.group(2),
                recorded_at=recorded_at,
            )
        elif match.group(1).lower() in MEAL_TYPES:
            entry = MealEntry(
                timestamp=timestamp,
                meal_type=match.group(1).lower(),
                carb_count=match.group(2),
                recorded_at=recorded_at,
            )
    if entry is not None and entry.details == details:
        return entry
    if kind == "glucose":
        return GlucoseEntry(timestamp=timestamp, recorded_at=recorded_at, summary=details)
    if kind == "medication":
        return MedicationEntry(timestamp=timestamp, recorded_at=recorded_at, summary=details)
    return MealEntry(timestamp=timestamp, recorded_at=recorded_at, summary=details)


def _load_list(raw: str) -> list[dict[str, Any]]:
    parsed: Any = json.loads(raw)
    if not isinstance(parsed, list):
        raise ValueError("Expected a JSON array")
    if not all(isinstance(item, dict) for item in parsed):
        raise ValueError("Expected an array of objects")
    return parsed


def _as_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"Expected a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Expected a finite number, got {value!r}")
    return int(value)
