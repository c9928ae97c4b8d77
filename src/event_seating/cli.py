"""Command line interface for EventSeating."""
from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import Sequence

from .csv_loader import export_guests, load_guests, load_project, load_tables, save_project
from .models import MODES, AssignResult
from .solver import AutoSeatingModel, compute_table_stats, summarize_result
from .store import SeatingStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Event auto-seating by category or tag")
    parser.add_argument("--project", type=Path,
                        help="Project JSON with tables and guests.")
    parser.add_argument("--guests", type=Path,
                        help="Guest list CSV to add (Name/姓名, Category/分類, RSVP, Tags/標籤, Avoid/避嫌).")
    parser.add_argument("--tables", type=Path,
                        help="Tables CSV to add (label, capacity, optional id and shape).")
    parser.add_argument("--mode", choices=MODES, default="category",
                        help="Group guests by category or by tag.")
    parser.add_argument("--criteria", nargs="+",
                        help="Categories or tags to seat, in priority order. Defaults to all.")
    parser.add_argument("--strict", action="store_true",
                        help="Never mix different categories or tags at one table.")
    parser.add_argument("--live-affinity", action="store_true",
                        help="Let guests placed during this run attract their group.")
    parser.add_argument("--apply", action="store_true",
                        help="Commit the assignments before writing outputs.")
    parser.add_argument("--out-project", type=Path,
                        help="Write the project JSON.")
    parser.add_argument("--out-assignments", type=Path,
                        help="Write assignments CSV: guest,table,seat.")
    parser.add_argument("--out-guests", type=Path,
                        help="Write the guest list CSV with table labels.")
    parser.add_argument("--out-map", type=Path,
                        help="Write an HTML mind map of the layout.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log every placement.")
    return parser


def load_store(args: argparse.Namespace) -> SeatingStore:
    store = load_project(args.project) if args.project else SeatingStore()
    if args.tables:
        store.import_tables(load_tables(args.tables, new_id=store.new_table_id))
    if args.guests:
        store.import_guests(load_guests(args.guests, new_id=store.new_guest_id))
    return store


def write_assignments(result: AssignResult, store: SeatingStore, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    labels = {t.id: t.label for t in store.tables}
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["guest", "table", "seat"])
        for a in result.assignments:
            w.writerow([store.guest(a.guest_id).name, labels[a.table_id], a.seat_index + 1])


def run(args: argparse.Namespace) -> int:
    store = load_store(args)
    model = AutoSeatingModel(mode=args.mode, strict_mode=args.strict, live_affinity=args.live_affinity)
    model.build(store.tables, store.guests)
    criteria = args.criteria or model.available_criteria()
    if not criteria:
        print("Nothing to seat: no unseated guests with a category or tag")
        return 1

    result = model.solve(criteria)
    labels = {t.id: t.label for t in store.tables}
    for a in result.assignments:
        print(f"{store.guest(a.guest_id).name},{labels[a.table_id]},{a.seat_index + 1}")
    for s in result.skipped:
        print(f"[SKIPPED] {store.guest(s.guest_id).name} reason={s.reason}")

    summary = summarize_result(result, store.tables)
    print(f"[SUMMARY] assigned={summary['assigned']} skipped={summary['skipped']} "
          f"conflict={summary['skipped_conflict']} no_space={summary['skipped_no_space']} "
          f"tables_used={summary['tables_used']}/{summary['tables']}")

    if args.apply:
        store.apply_assignments(result.assignments)
    layout = store.tables if args.apply else model.simulated_tables

    guests_by_id = store.guests_by_id()
    for table in layout:
        s = compute_table_stats(table, guests_by_id)
        print(f"[REPORT] {s['label']} occupied={s['occupied']}/{s['capacity']} "
              f"conflicts={s['conflict_pairs']} categories={s['categories']}")

    if args.out_assignments:
        write_assignments(result, store, args.out_assignments)
    if args.out_project:
        save_project(store, args.out_project)
    if args.out_guests:
        export_guests(store, args.out_guests)
    if args.out_map:
        from .mind_map import generate_layout_mind_map

        args.out_map.parent.mkdir(parents=True, exist_ok=True)
        args.out_map.write_text(generate_layout_mind_map(layout, store.guests), encoding="utf-8")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by ``python -m event_seating.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not (args.project or args.guests):
        parser.error("provide --project or --guests")
    try:
        return run(args)
    except (ValueError, OSError) as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
