"""Configuración persistida (umbrales del rango objetivo)."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from glucose_log.model import ThresholdConfig
from glucose_log.storage import SETTINGS_KEY, KeyValueStorage

logger = logging.getLogger(__name__)

DB_ENV_VAR = "GLUCOSE_LOG_DB"


def default_db_path() -> Path:
    """Database path from ``GLUCOSE_LOG_DB`` or ``~/.glucose_log``."""
    env = os.environ.get(DB_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".glucose_log" / "glucose_log.sqlite3"


def load_thresholds(storage: KeyValueStorage) -> ThresholdConfig:
    """Devuelve umbrales guardados o defaults."""
    defaults = ThresholdConfig()
    raw = storage.get(SETTINGS_KEY)
    if raw is None:
        return defaults
    try:
        parsed: Any = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("settings must be a JSON object")
        merged = {"low": defaults.low, "high": defaults.high, **parsed}
        return ThresholdConfig(low=int(merged["low"]), high=int(merged["high"]))
    except (ValueError, TypeError, OverflowError) as exc:
        logger.warning("Ignoring malformed settings: %s", exc)
        return defaults


def save_thresholds(storage: KeyValueStorage, thresholds: ThresholdConfig) -> None:
    """Guarda los umbrales."""
    payload = {"low": thresholds.low, "high": thresholds.high}
    storage.set(SETTINGS_KEY, json.dumps(payload))
