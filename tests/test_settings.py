from __future__ import annotations

from pathlib import Path

import pytest

from glucose_log.model import ThresholdConfig
from glucose_log.settings import (
    DB_ENV_VAR,
    default_db_path,
    load_thresholds,
    save_thresholds,
)
from glucose_log.storage import SETTINGS_KEY, SQLiteStore


def test_thresholds_default_and_round_trip(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    assert load_thresholds(store) == ThresholdConfig(low=70, high=180)

    save_thresholds(store, ThresholdConfig(low=80, high=160))
    assert load_thresholds(store) == ThresholdConfig(low=80, high=160)


def test_partial_settings_merge_with_defaults(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    store.set(SETTINGS_KEY, '{"high": 200}')
    assert load_thresholds(store) == ThresholdConfig(low=70, high=200)


@pytest.mark.parametrize(
    "raw",
    [
        "nope",
        "[1, 2]",
        '{"low": "x"}',
        '{"low": 300, "high": 100}',
        '{"low": 1e400}',
        '{"high": Infinity}',
    ],
)
def test_malformed_settings_fall_back_to_defaults(tmp_path: Path, raw: str) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    store.set(SETTINGS_KEY, raw)
    assert load_thresholds(store) == ThresholdConfig()


def test_default_db_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(DB_ENV_VAR, str(tmp_path / "custom.sqlite3"))
    assert default_db_path() == tmp_path / "custom.sqlite3"
    monkeypatch.delenv(DB_ENV_VAR)
    assert default_db_path().name == "glucose_log.sqlite3"
