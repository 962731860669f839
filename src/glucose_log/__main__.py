"""Punto de entrada de ``python -m glucose_log``."""

from __future__ import annotations

from glucose_log.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
