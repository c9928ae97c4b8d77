"""Shared guest/table state and the commit step for auto-assign previews."""
from __future__ import annotations

import logging
from itertools import count
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import (
    MODES,
    Assignment,
    Guest,
    Seat,
    Table,
    make_seat_id,
    parse_seat_id,
)

logger = logging.getLogger(__name__)


class SeatingStore:
    """Tables and guests with the seat <-> guest binding kept consistent."""

    def __init__(self, tables: Optional[List[Table]] = None, guests: Optional[List[Guest]] = None) -> None:
        self.tables: List[Table] = list(tables or [])
        self.guests: List[Guest] = list(guests or [])
        self._ids = count(1)

    # ----------------------------- lookups -----------------------------
    def guest(self, guest_id: str) -> Guest:
        for g in self.guests:
            if g.id == guest_id:
                return g
        raise ValueError(f"Unknown guest: {guest_id}")

    def table(self, table_id: str) -> Table:
        for t in self.tables:
            if t.id == table_id:
                return t
        raise ValueError(f"Unknown table: {table_id}")

    def seat(self, table_id: str, seat_index: int) -> Seat:
        seat = self.table(table_id).seat_at(seat_index)
        if seat is None:
            raise ValueError(f"Table {table_id} has no seat {seat_index}")
        return seat

    def guests_by_id(self) -> Dict[str, Guest]:
        return {g.id: g for g in self.guests}

    def seat_of(self, guest_id: str) -> Optional[Tuple[str, int]]:
        """Where the guest actually sits according to the seats."""
        for t in self.tables:
            for s in t.seats:
                if s.guest_id == guest_id:
                    return t.id, s.index
        return None

    def table_label_for(self, guest: Guest) -> str:
        if not guest.assigned_seat_id:
            return ""
        table_id, _ = parse_seat_id(guest.assigned_seat_id)
        return next((t.label for t in self.tables if t.id == table_id), "")

    def unseated_guests(self) -> List[Guest]:
        return [g for g in self.guests if not g.is_seated]

    def available_categories(self) -> List[str]:
        return list(dict.fromkeys(g.category for g in self.unseated_guests()))

    def available_tags(self) -> List[str]:
        return list(dict.fromkeys(t for g in self.unseated_guests() for t in g.tags))

    def available_criteria(self, mode: str) -> List[str]:
        if mode not in MODES:
            raise ValueError(f"Unknown grouping mode: {mode!r}")
        return self.available_categories() if mode == "category" else self.available_tags()

    def criterion_counts(self, mode: str) -> Dict[str, int]:
        """Unseated guest count per category or tag."""
        pool = self.unseated_guests()
        return {
            value: sum(1 for g in pool if g.matches(value, mode))
            for value in self.available_criteria(mode)
        }

    # ----------------------------- edits -----------------------------
    def _new_id(self, prefix: str, taken: Iterable[str]) -> str:
        used = set(taken)
        while True:
            candidate = f"{prefix}{next(self._ids)}"
            if candidate not in used:
                return candidate

    def new_guest_id(self) -> str:
        return self._new_id("g", (g.id for g in self.guests))

    def new_table_id(self) -> str:
        return self._new_id("t", (t.id for t in self.tables))

    def import_guests(self, guests: Iterable[Guest]) -> int:
        """Append loaded guests; an id already in the store is rejected."""
        taken = {g.id for g in self.guests}
        added = []
        for guest in guests:
            if guest.id in taken:
                raise ValueError(f"Guest id already in project: {guest.id}")
            taken.add(guest.id)
            added.append(guest)
        self.guests.extend(added)
        return len(added)

    def import_tables(self, tables: Iterable[Table]) -> int:
        taken = {t.id for t in self.tables}
        added = []
        for table in tables:
            if table.id in taken:
                raise ValueError(f"Table id already in project: {table.id}")
            taken.add(table.id)
            added.append(table)
        self.tables.extend(added)
        return len(added)

    def add_guest(
        self,
        name: str,
        category: str = "Uncategorized",
        tags: Optional[List[str]] = None,
        rsvp_status: str = "pending",
        relationships: Optional[List[str]] = None,
        notes: str = "",
    ) -> Guest:
        guest = Guest(
            id=self.new_guest_id(),
            name=name,
            category=category,
            tags=list(tags or []),
            rsvp_status=rsvp_status,
            relationships=list(relationships or []),
            notes=notes,
        )
        self.guests.append(guest)
        return guest

    def add_table(self, label: str, capacity: int, shape: str = "ROUND", **placement: Any) -> Table:
        table = Table.create(self.new_table_id(), label, capacity, shape, **placement)
        self.tables.append(table)
        return table

    def unseat_guest(self, guest_id: str) -> None:
        guest = self.guest(guest_id)
        for t in self.tables:
            for s in t.seats:
                if s.guest_id == guest_id:
                    s.guest_id = None
        guest.assigned_seat_id = None

    def remove_guest(self, guest_id: str) -> None:
        self.unseat_guest(guest_id)
        self.guests = [g for g in self.guests if g.id != guest_id]

    def assign_guest_to_seat(self, guest_id: str, table_id: str, seat_index: int) -> None:
        """Manual placement. An occupied target swaps with the mover's old seat."""
        guest = self.guest(guest_id)
        target = self.seat(table_id, seat_index)
        source = self.seat_of(guest_id)
        displaced_id = target.guest_id
        if displaced_id == guest_id:
            return

        if source is not None:
            source_table, source_index = source
            self.seat(source_table, source_index).guest_id = displaced_id
        target.guest_id = guest_id
        guest.assigned_seat_id = make_seat_id(table_id, seat_index)

        if displaced_id is not None:
            displaced = self.guest(displaced_id)
            displaced.assigned_seat_id = make_seat_id(*source) if source is not None else None

    def apply_assignments(self, assignments: Iterable[Assignment]) -> int:
        """Bulk write of a previewed run. Not re-validated against conflicts."""
        applied = 0
        for a in assignments:
            guest = self.guest(a.guest_id)
            self.seat(a.table_id, a.seat_index).guest_id = guest.id
            guest.assigned_seat_id = a.seat_id
            applied += 1
        logger.info("Applied %d assignments", applied)
        return applied

    # ----------------------------- checks -----------------------------
    def validate(self) -> List[str]:
        """Return invariant violations between seats and guests, empty when consistent."""
        problems: List[str] = []
        guests = self.guests_by_id()
        seen: Dict[str, str] = {}
        for t in self.tables:
            for s in t.seats:
                if s.guest_id is None:
                    continue
                here = make_seat_id(t.id, s.index)
                if s.guest_id not in guests:
                    problems.append(f"Seat {here} references unknown guest {s.guest_id}")
                    continue
                if s.guest_id in seen:
                    problems.append(f"Guest {s.guest_id} occupies both {seen[s.guest_id]} and {here}")
                seen[s.guest_id] = here
                if guests[s.guest_id].assigned_seat_id != here:
                    problems.append(f"Seat {here} holds {s.guest_id} but the guest points elsewhere")
        for g in self.guests:
            if g.assigned_seat_id is None:
                continue
            try:
                table_id, index = parse_seat_id(g.assigned_seat_id)
                seat = self.seat(table_id, index)
            except ValueError as e:
                problems.append(f"Guest {g.id}: {e}")
                continue
            if seat.guest_id != g.id:
                problems.append(f"Guest {g.id} points to {g.assigned_seat_id} which does not hold them")
        return problems

    # ----------------------------- serialization -----------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "tables": [t.to_dict() for t in self.tables],
            "guests": [g.to_dict() for g in self.guests],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SeatingStore":
        if not isinstance(data, dict) or "tables" not in data or "guests" not in data:
            raise ValueError("Project data must contain 'tables' and 'guests'")
        try:
            tables = [Table.from_dict(t) for t in data["tables"]]
            guests = [Guest.from_dict(g) for g in data["guests"]]
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid project data: {e!r}") from e
        return cls(tables=tables, guests=guests)
