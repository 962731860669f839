"""Excepciones del registro de glucosa."""

from __future__ import annotations


class IndexOutOfRangeError(IndexError):
    """A chart point was selected outside the projected series."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Point index {index} outside series of length {size}")
        self.index = index
        self.size = size


class PersistenceWriteError(RuntimeError):
    """A write-back to storage failed; the in-memory state was kept."""

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(f"Could not persist {key!r}: {cause}")
        self.key = key
        self.cause = cause
