"""CLI para registrar glucosa, medicación y comidas y ver tendencias."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from glucose_log.classify import classify, status_text
from glucose_log.entry_form import EntryFormController
from glucose_log.entry_store import RETENTION_NOTICE, EntryStore
from glucose_log.errors import IndexOutOfRangeError
from glucose_log.excel_writer import write_history_xlsx
from glucose_log.model import MEAL_TYPES, UNIT, ThresholdConfig, TimeRange
from glucose_log.settings import default_db_path, load_thresholds, save_thresholds
from glucose_log.storage import SQLiteStore
from glucose_log.trends import point_at, project

logger = logging.getLogger("glucose_log")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        prog="glucose-log",
        description="Registro de glucosa, medicación y comidas.",
    )
    parser.add_argument(
        "--db",
        default=str(default_db_path()),
        help="Archivo SQLite (default: $GLUCOSE_LOG_DB o ~/.glucose_log).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log INFO.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add-reading", help="Registrar lectura de glucosa.")
    p.add_argument("value", help="Valor en mg/dL.")

    p = sub.add_parser("add-medication", help="Registrar medicación.")
    p.add_argument("name")
    p.add_argument("dosage")

    p = sub.add_parser("add-meal", help="Registrar comida.")
    p.add_argument("meal_type", choices=MEAL_TYPES)
    p.add_argument("carbs", help="Carbohidratos (g).")
    p.add_argument("items", nargs="*", help="Alimentos.")

    sub.add_parser("status", help="Última lectura, estado y tendencia.")

    p = sub.add_parser("trend", help="Serie para gráfico.")
    p.add_argument(
        "--range",
        dest="time_range",
        choices=[r.value for r in TimeRange],
        default=TimeRange.DAY.value,
    )
    p.add_argument("--point", type=int, default=None, help="Índice del punto.")

    sub.add_parser("activity", help="Actividad reciente.")

    p = sub.add_parser("thresholds", help="Ver o cambiar el rango objetivo.")
    p.add_argument("--low", type=int, default=None)
    p.add_argument("--high", type=int, default=None)

    p = sub.add_parser("export", help="Exportar historial a Excel.")
    p.add_argument("out", help="Ruta del .xlsx.")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI.

    Returns:
        Exit code (0 on success, 2 on an invalid chart point or threshold).
    """
    ns = parse_args(argv)
    configure_logging(ns.verbose)

    logger.info("Using database %s", ns.db)
    backend = SQLiteStore(Path(ns.db).expanduser())
    thresholds = load_thresholds(backend)
    with EntryStore(backend) as store:
        try:
            return _dispatch(ns, store, backend, thresholds)
        except (IndexOutOfRangeError, ValueError) as exc:
            print(f"Error: {exc}")
            return 2


def _dispatch(
    ns: argparse.Namespace,
    store: EntryStore,
    backend: SQLiteStore,
    thresholds: ThresholdConfig,
) -> int:
    if ns.command == "add-reading":
        form = EntryFormController("glucose")
        form.set_glucose_text(ns.value)
        entry = store.record(form.save())
        print(f"OK: {entry.details}")
        print(status_text(classify(form.glucose.value, thresholds)))
    elif ns.command == "add-medication":
        form = EntryFormController("medication")
        form.set_medication(name=ns.name, dosage=ns.dosage)
        print(f"OK: {store.record(form.save()).details}")
        print(f"Nota: {RETENTION_NOTICE}")
    elif ns.command == "add-meal":
        form = EntryFormController("meal")
        form.set_meal_type(ns.meal_type)
        form.set_carb_count(ns.carbs)
        form.clear_food_items()
        for item in ns.items:
            form.add_food_item(item)
        print(f"OK: {store.record(form.save()).details}")
        print(f"Nota: {RETENTION_NOTICE}")
    elif ns.command == "status":
        _print_status(store, thresholds)
    elif ns.command == "trend":
        _print_trend(store, TimeRange(ns.time_range), ns.point)
    elif ns.command == "activity":
        for e in store.activity:
            print(f"{e.timestamp}  {e.details}")
    elif ns.command == "thresholds":
        if ns.low is not None or ns.high is not None:
            thresholds = ThresholdConfig(
                low=thresholds.low if ns.low is None else ns.low,
                high=thresholds.high if ns.high is None else ns.high,
            )
            save_thresholds(backend, thresholds)
        print(f"Low: {thresholds.low} {UNIT}")
        print(f"High: {thresholds.high} {UNIT}")
    elif ns.command == "export":
        out = Path(ns.out).expanduser()
        write_history_xlsx(store.readings, store.activity.entries(), out, thresholds)
        print(f"OK: Output: {out}")
    return 0


def _print_status(store: EntryStore, thresholds: ThresholdConfig) -> None:
    latest = store.latest()
    if latest is None:
        print("Sin lecturas.")
        return
    status = classify(latest.value, thresholds)
    print(f"{latest.time}  {latest.value} {latest.unit}  [{status.value}]")
    print(status_text(status))
    print(f"Trend: {store.current_trend().value}")


def _print_trend(store: EntryStore, time_range: TimeRange, point: int | None) -> None:
    if point is not None:
        selected = point_at(store.readings, point, time_range)
        print(f"{selected.time}: {selected.value} {selected.unit}")
        return
    for label, value in project(store.readings, time_range):
        print(f"{label:>10}  {value}")
