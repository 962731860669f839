"""Almacén de lecturas y actividad con hidratación y escritura asíncrona.

The store owns the two canonical collections. They are hydrated once when the
store is built and every mutation schedules a write of the whole collection on
a single background worker, so writes land in the order they were issued.
A failed write is logged and kept in ``write_failures``; the in-memory state
is never rolled back, so memory and storage may diverge until the next
successful write of the same key.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from types import TracebackType
from typing import TypeVar

from dateutil import tz

from glucose_log.activity_log import ActivityLog
from glucose_log.classify import trend_of
from glucose_log.errors import PersistenceWriteError
from glucose_log.model import (
    MEAL_TYPES,
    ActivityEntry,
    GlucoseEntry,
    MealEntry,
    MedicationEntry,
    Reading,
    Trend,
    activity_label,
    time_label,
)
from glucose_log.storage import (
    ACTIVITY_KEY,
    READINGS_KEY,
    KeyValueStorage,
    decode_activity,
    decode_readings,
    encode_activity,
    encode_readings,
)

logger = logging.getLogger(__name__)

_LOCAL_TZ = tz.tzlocal()

T = TypeVar("T")

RETENTION_NOTICE = (
    "Medication and meal entries are only kept in the recent activity log; "
    "entries older than the last 10 events are not retained."
)


class EntryStore:
    """Owner of the readings history and the recent activity log."""

    def __init__(self, storage: KeyValueStorage) -> None:
        """Create the store and hydrate it from ``storage``."""
        self._storage = storage
        self._readings: list[Reading] = []
        self._activity = ActivityLog()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="glucose-log-writer"
        )
        self._last_write: Future[None] | None = None
        self._retention_noted = False
        self.write_failures: list[PersistenceWriteError] = []
        self.load()

    def __enter__(self) -> EntryStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def readings(self) -> tuple[Reading, ...]:
        return tuple(self._readings)

    @property
    def activity(self) -> ActivityLog:
        return ActivityLog(self._activity.entries())

    def load(self) -> tuple[list[Reading], ActivityLog]:
        """Read both keys from storage, replacing the in-memory collections.

        A missing or undecodable key yields an empty collection for that key
        only; nothing is raised.

        Returns:
            The hydrated readings and activity log.
        """
        self._readings = self._load_key(READINGS_KEY, decode_readings)
        self._activity = ActivityLog(self._load_key(ACTIVITY_KEY, decode_activity))
        logger.info(
            "Loaded %d readings and %d activity entries",
            len(self._readings),
            len(self._activity),
        )
        return list(self._readings), ActivityLog(self._activity.entries())

    def _load_key(self, key: str, decode: Callable[[str], list[T]]) -> list[T]:
        try:
            raw = self._storage.get(key)
        except Exception:
            logger.warning("Could not read %s from storage", key, exc_info=True)
            return []
        if raw is None:
            return []
        try:
            return decode(raw)
        except ValueError as exc:
            logger.warning("Discarding malformed %s: %s", key, exc)
            return []

    def append_reading(self, value: int, at: datetime) -> Reading:
        """Append a reading to the history and log it as activity.

        Args:
            value: Glucose value in mg/dL, stored as given.
            at: Wall-clock time of the reading.

        Returns:
            The stored reading.
        """
        reading = Reading(time=time_label(at), value=int(value), day=at.date())
        self._readings.append(reading)
        self._schedule_write(READINGS_KEY, encode_readings(self._readings))
        self.append_activity(
            GlucoseEntry(timestamp=activity_label(at), value=reading.value, recorded_at=at)
        )
        return reading

    def append_medication(self, name: str, dosage: str, at: datetime) -> MedicationEntry:
        """Log a medication dose (activity log only)."""
        entry = MedicationEntry(
            timestamp=activity_label(at), name=name, dosage=dosage, recorded_at=at
        )
        self.append_activity(entry)
        return entry

    def append_meal(
        self,
        meal_type: str,
        carb_count: str,
        food_items: Sequence[str],
        at: datetime,
    ) -> MealEntry:
        """Log a meal (activity log only).

        Raises:
            ValueError: If ``meal_type`` is not one of ``MEAL_TYPES``.
        """
        if meal_type not in MEAL_TYPES:
            raise ValueError(f"Unknown meal type: {meal_type!r}")
        entry = MealEntry(
            timestamp=activity_label(at),
            meal_type=meal_type,
            carb_count=carb_count,
            food_items=tuple(food_items),
            recorded_at=at,
        )
        self.append_activity(entry)
        return entry

    def append_activity(self, entry: ActivityEntry) -> None:
        """Push an entry on the activity log and persist the truncated log."""
        if not isinstance(entry, GlucoseEntry) and not self._retention_noted:
            logger.info(RETENTION_NOTICE)
            self._retention_noted = True
        self._activity.push(entry)
        self._schedule_write(ACTIVITY_KEY, encode_activity(self._activity.entries()))

    def record(self, entry: ActivityEntry) -> ActivityEntry:
        """Store an entry produced by the entry form.

        Glucose entries also become readings. Entries without ``recorded_at``
        are stamped with the current time.

        Raises:
            TypeError: If ``entry`` is not a known activity variant.
            ValueError: If the entry only carries a stored summary line, or is
                a meal with an unknown type.
        """
        if not isinstance(entry, GlucoseEntry | MedicationEntry | MealEntry):
            raise TypeError(f"Unknown activity entry: {entry!r}")
        if entry.summary is not None:
            raise ValueError(f"Entry has no recordable fields: {entry!r}")
        at = entry.recorded_at or datetime.now(tz=_LOCAL_TZ)
        if isinstance(entry, GlucoseEntry):
            if entry.value is None:
                raise ValueError(f"Glucose entry has no value: {entry!r}")
            self.append_reading(entry.value, at)
            return self._activity[0]
        if isinstance(entry, MedicationEntry):
            return self.append_medication(entry.name, entry.dosage, at)
        return self.append_meal(entry.meal_type, entry.carb_count, entry.food_items, at)

    def latest(self) -> Reading | None:
        """Most recent reading, if any."""
        return self._readings[-1] if self._readings else None

    def current_trend(self) -> Trend:
        """Trend between the two most recent readings; STABLE with fewer."""
        if len(self._readings) < 2:
            return Trend.STABLE
        return trend_of(self._readings[-1].value, self._readings[-2].value)

    def _schedule_write(self, key: str, payload: str) -> None:
        # one worker, so the last write finishes after every earlier one
        self._last_write = self._executor.submit(self._write, key, payload)

    def _write(self, key: str, payload: str) -> None:
        try:
            self._storage.set(key, payload)
        except Exception as exc:
            failure = PersistenceWriteError(key, exc)
            self.write_failures.append(failure)
            logger.error("%s", failure, exc_info=exc)
            return
        logger.debug("Persisted %s (%d bytes)", key, len(payload))

    def flush(self) -> None:
        """Block until every scheduled write has finished."""
        last, self._last_write = self._last_write, None
        if last is not None:
            last.result()

    def close(self) -> None:
        """Flush pending writes and stop the writer thread."""
        self.flush()
        self._executor.shutdown(wait=True)
