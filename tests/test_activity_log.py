from __future__ import annotations

from glucose_log.activity_log import CAPACITY, ActivityLog
from glucose_log.model import GlucoseEntry, MedicationEntry


def _entry(i: int) -> GlucoseEntry:
    return GlucoseEntry(timestamp=f"Today, 10:{i:02d}", value=100 + i)


def test_push_is_most_recent_first() -> None:
    log = ActivityLog()
    log.push(_entry(1))
    log.push(_entry(2))
    assert [e.value for e in log] == [102, 101]
    assert log[0] == _entry(2)


def test_eleven_pushes_keep_last_ten_newest_first() -> None:
    log = ActivityLog()
    pushed = [_entry(i) for i in range(11)]
    for e in pushed:
        log.push(e)
        assert len(log) <= CAPACITY
    assert len(log) == 10
    assert list(log) == list(reversed(pushed[1:]))
    assert _entry(0) not in log.entries()


def test_init_truncates_from_tail() -> None:
    entries = [_entry(i) for i in range(15)]
    log = ActivityLog(entries)
    assert len(log) == CAPACITY
    assert log.entries() == tuple(entries[:CAPACITY])


def test_mixed_variants_and_equality() -> None:
    med = MedicationEntry(timestamp="Today, 08:15", name="Metformin", dosage="500")
    a = ActivityLog([med, _entry(1)])
    b = ActivityLog()
    b.push(_entry(1))
    b.push(med)
    assert a == b
    assert a != ActivityLog([med])
