"""
Constraint aware auto-seating engine.

Guests are grouped by category or tag, groups are seated largest first, and
every guest takes the first free seat of the best ranked table that neither
breaks an ``Avoid:`` directive nor, in strict mode, mixes criterion values.

Table ranking, per placement:
    1. tables already hosting a guest with the same criterion value
    2. more empty seats first
    3. input order

The engine is greedy and never backtracks. It works on a deep copy of the
tables; the caller commits the returned assignments through the store.
"""
from __future__ import annotations

import copy
import logging
from collections import Counter
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .models import MODES, AssignResult, Assignment, Guest, SkippedGuest, Table

logger = logging.getLogger(__name__)

GuestGroup = Tuple[str, List[Guest]]


def _check_mode(mode: str) -> None:
    if mode not in MODES:
        raise ValueError(f"Unknown grouping mode: {mode!r} (expected one of {', '.join(MODES)})")


# ----------------------------- building blocks -----------------------------
def group_guests(guests: Iterable[Guest], mode: str, selected: Sequence[str]) -> List[GuestGroup]:
    """Partition the unseated guests into ``(criterion, guests)`` groups.

    Category mode splits by category. Tag mode lets each selected tag, in
    selection order, claim every unclaimed guest carrying it, so a guest with
    several selected tags lands only in the first one. Guests matching no
    selected value are left out. Largest groups come first.
    """
    _check_mode(mode)
    pool = [g for g in guests if not g.is_seated]
    groups: List[GuestGroup] = []

    if mode == "category":
        wanted = set(selected)
        by_category: Dict[str, List[Guest]] = {}
        for g in pool:
            if g.category in wanted:
                by_category.setdefault(g.category, []).append(g)
        groups = list(by_category.items())
    else:
        claimed: Set[str] = set()
        for tag in selected:
            members = [g for g in pool if tag in g.tags and g.id not in claimed]
            if not members:
                continue
            claimed.update(g.id for g in members)
            groups.append((tag, members))

    return sorted(groups, key=lambda item: -len(item[1]))


def table_occupants(
    table: Table,
    guests_by_id: Dict[str, Guest],
    run_assignments: Sequence[Assignment] = (),
) -> List[Guest]:
    """Guests sitting at ``table`` plus those placed there earlier in this run."""
    ids = table.occupant_ids()
    for a in run_assignments:
        if a.table_id == table.id and a.guest_id not in ids:
            ids.append(a.guest_id)
    return [guests_by_id[gid] for gid in ids if gid in guests_by_id]


def has_conflict(
    guest: Guest,
    table: Table,
    guests_by_id: Dict[str, Guest],
    run_assignments: Sequence[Assignment] = (),
) -> bool:
    """True if seating ``guest`` at ``table`` pairs two guests who avoid each other."""
    for other in table_occupants(table, guests_by_id, run_assignments):
        if other.id == guest.id:
            continue
        if guest.avoids(other) or other.avoids(guest):
            return True
    return False


def has_affinity(table: Table, criterion: str, mode: str, guests_by_id: Dict[str, Guest]) -> bool:
    """Whether a guest already seated at ``table`` shares ``criterion``."""
    return any(
        guests_by_id[gid].matches(criterion, mode)
        for gid in table.occupant_ids()
        if gid in guests_by_id
    )


def rank_tables(
    tables: Sequence[Table],
    criterion: str,
    mode: str,
    guests_by_id: Dict[str, Guest],
    affinity_tables: Optional[Sequence[Table]] = None,
) -> List[Table]:
    """Order ``tables`` by affinity to ``criterion``, then by free seats.

    Affinity is read from ``affinity_tables`` (matched by id) when given, so
    the caller decides whether placements made during a run count. Free seats
    always come from ``tables``. The sort is stable.
    """
    source = {t.id: t for t in (affinity_tables if affinity_tables is not None else tables)}

    def key(table: Table) -> Tuple[bool, int]:
        ref = source.get(table.id)
        matched = ref is not None and has_affinity(ref, criterion, mode, guests_by_id)
        return (not matched, -table.empty_seat_count())

    return sorted(tables, key=key)


def violates_strict(table: Table, criterion: str, mode: str, guests_by_id: Dict[str, Guest]) -> bool:
    """True if anyone at ``table`` has a different criterion value."""
    return any(
        not guests_by_id[gid].matches(criterion, mode)
        for gid in table.occupant_ids()
        if gid in guests_by_id
    )


def find_seat(
    guest: Guest,
    criterion: str,
    ranked_tables: Sequence[Table],
    mode: str,
    strict_mode: bool,
    guests_by_id: Dict[str, Guest],
    run_assignments: Sequence[Assignment] = (),
) -> Optional[Tuple[Table, int]]:
    """First-fit search over ``ranked_tables``.

    Returns ``(table, seat_index)`` for the first table with a free seat that
    is conflict free and, in strict mode, not mixed. ``None`` if none is found.
    """
    for table in ranked_tables:
        if strict_mode and violates_strict(table, criterion, mode, guests_by_id):
            continue
        seat = table.first_empty_seat()
        if seat is None:
            continue
        if not has_conflict(guest, table, guests_by_id, run_assignments):
            return table, seat.index
    return None


# ----------------------------- reporting helpers -----------------------------
def compute_table_stats(table: Table, guests_by_id: Dict[str, Guest]) -> Dict[str, int | str]:
    """Occupancy, category mix and avoid pairs for one table."""
    members = [guests_by_id[gid] for gid in table.occupant_ids() if gid in guests_by_id]
    categories = Counter(g.category for g in members)
    conflict_pairs = sum(1 for a, b in combinations(members, 2) if a.avoids(b) or b.avoids(a))
    return {
        "table": table.id,
        "label": table.label,
        "capacity": table.capacity,
        "occupied": len(members),
        "empty": table.empty_seat_count(),
        "categories": "|".join(f"{c}:{n}" for c, n in sorted(categories.items())),
        "conflict_pairs": conflict_pairs,
    }


def summarize_result(result: AssignResult, tables: Sequence[Table]) -> Dict[str, int]:
    """Counts shown in the preview panel."""
    reasons = Counter(s.reason for s in result.skipped)
    return {
        "assigned": len(result.assignments),
        "skipped": len(result.skipped),
        "skipped_conflict": reasons.get("conflict", 0),
        "skipped_no_space": reasons.get("no_space", 0),
        "tables": len(tables),
        "tables_used": len({a.table_id for a in result.assignments}),
    }


# ----------------------------- model -----------------------------
class AutoSeatingModel:
    """Greedy group-by-group seat assignment with conflict avoidance."""

    def __init__(self, mode: str = "category", strict_mode: bool = False, live_affinity: bool = False) -> None:
        _check_mode(mode)
        self.mode = mode
        self.strict_mode = strict_mode
        # False: affinity reads the tables as given. True: it also sees this run's placements.
        self.live_affinity = live_affinity
        # Inputs
        self.tables: List[Table] = []
        self.guests: List[Guest] = []
        self.guests_by_id: Dict[str, Guest] = {}
        # Last run
        self.simulated_tables: List[Table] = []

    def build(self, tables: List[Table], guests: List[Guest]) -> None:
        """Store model data after checking references."""
        table_ids = [t.id for t in tables]
        if len(set(table_ids)) != len(table_ids):
            raise ValueError("Duplicate table ids in input")
        guests_by_id = {g.id: g for g in guests}
        if len(guests_by_id) != len(guests):
            raise ValueError("Duplicate guest ids in input")
        for t in tables:
            for gid in t.occupant_ids():
                if gid not in guests_by_id:
                    raise ValueError(f"Table {t.label!r} references unknown guest: {gid}")
        self.tables = tables
        self.guests = guests
        self.guests_by_id = guests_by_id
        self.simulated_tables = []

    def available_criteria(self) -> List[str]:
        """Criterion values among unseated guests, in first-seen order."""
        values: Dict[str, None] = {}
        for g in self.guests:
            if g.is_seated:
                continue
            for value in ([g.category] if self.mode == "category" else g.tags):
                values.setdefault(value, None)
        return list(values)

    # ----------------------------- main solve -----------------------------
    def solve(self, selected_criteria: Sequence[str]) -> AssignResult:
        """Simulate one run and return the preview. Inputs are not mutated."""
        snapshot = copy.deepcopy(self.tables)
        snapshot_by_id = {t.id: t for t in snapshot}
        groups = group_guests(self.guests, self.mode, selected_criteria)
        result = AssignResult()

        logger.info(
            "Auto-assign: %d groups, %d guests, %d tables (mode=%s strict=%s)",
            len(groups), sum(len(m) for _, m in groups), len(snapshot), self.mode, self.strict_mode,
        )

        for criterion, members in groups:
            for guest in members:
                ranked = rank_tables(
                    snapshot,
                    criterion,
                    self.mode,
                    self.guests_by_id,
                    affinity_tables=snapshot if self.live_affinity else self.tables,
                )
                found = find_seat(
                    guest, criterion, ranked, self.mode, self.strict_mode, self.guests_by_id, result.assignments
                )
                if found is None:
                    space_left = any(t.empty_seat_count() for t in snapshot)
                    reason = "conflict" if space_left else "no_space"
                    result.skipped.append(SkippedGuest(guest_id=guest.id, reason=reason))
                    logger.debug("Skipped %s (%s): %s", guest.name, criterion, reason)
                    continue
                table, seat_index = found
                snapshot_by_id[table.id].seat_at(seat_index).guest_id = guest.id
                result.assignments.append(Assignment(guest_id=guest.id, table_id=table.id, seat_index=seat_index))
                logger.debug("Assigned %s (%s) to %s seat %d", guest.name, criterion, table.label, seat_index)

        self.simulated_tables = snapshot
        logger.info(
            "Auto-assign complete: %d assigned, %d skipped", len(result.assignments), len(result.skipped)
        )
        return result


def run_auto_assign(
    tables: List[Table],
    guests: List[Guest],
    mode: str,
    selected_criteria: Sequence[str],
    strict_mode: bool = False,
    live_affinity: bool = False,
) -> AssignResult:
    """Functional entry point: build a model and run it once."""
    model = AutoSeatingModel(mode=mode, strict_mode=strict_mode, live_affinity=live_affinity)
    model.build(tables, guests)
    return model.solve(selected_criteria)
