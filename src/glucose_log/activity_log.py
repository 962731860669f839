"""Registro acotado de actividad reciente (más reciente primero)."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from glucose_log.model import ActivityEntry

CAPACITY = 10


class ActivityLog:
    """Most-recent-first sequence of activity entries, capped at ``CAPACITY``."""

    def __init__(self, entries: Iterable[ActivityEntry] = ()) -> None:
        """Create a log from entries already ordered most-recent-first.

        Anything beyond the capacity is dropped from the tail.
        """
        self._entries: list[ActivityEntry] = list(entries)[:CAPACITY]

    def push(self, entry: ActivityEntry) -> None:
        """Insert at index 0, evicting the oldest entries past capacity."""
        self._entries.insert(0, entry)
        del self._entries[CAPACITY:]

    def entries(self) -> tuple[ActivityEntry, ...]:
        """Snapshot of the entries, most recent first."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ActivityEntry]:
        return iter(tuple(self._entries))

    def __getitem__(self, index: int) -> ActivityEntry:
        return self._entries[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActivityLog):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"ActivityLog({self._entries!r})"
