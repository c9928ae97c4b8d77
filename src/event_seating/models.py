"""Data models for EventSeating."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import math
import re

AVOID_PREFIX = "Avoid:"

MODES = ("category", "tag")
RSVP_STATUSES = ("confirmed", "pending", "declined")
SKIP_REASONS = ("conflict", "no_space")
SHAPES = ("ROUND", "RECTANGLE")


def parse_tag_list(value: object) -> List[str]:
    """Split a comma separated string into a list of tags.

    Both ASCII ``,`` and full width ``，`` separate entries. Empty values
    such as ``""`` or ``None`` return an empty list. ``pandas`` often provides
    ``float('nan')`` for missing values which is also treated as empty.
    """
    if value is None:
        return []
    if isinstance(value, float) and math.isnan(value):
        return []
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return []
    return [part.strip() for part in re.split(r"[,，]", text) if part.strip()]


def avoid_targets(relationships: List[str]) -> List[str]:
    """Return the remainders of every ``Avoid:`` directive."""
    return [r[len(AVOID_PREFIX):] for r in relationships if r.startswith(AVOID_PREFIX)]


def make_seat_id(table_id: str, index: int) -> str:
    return f"{table_id}-{index}"


def parse_seat_id(seat_id: str) -> Tuple[str, int]:
    """Decode ``<tableId>-<seatIndex>``.

    Splits on the last dash so table ids that contain dashes survive.
    """
    table_id, sep, index = seat_id.rpartition("-")
    if not sep or not table_id or not index.isdigit():
        raise ValueError(f"Malformed seat id: {seat_id!r}")
    return table_id, int(index)


@dataclass
class Guest:
    """Representation of an event guest."""

    id: str
    name: str
    category: str = "Uncategorized"
    tags: List[str] = field(default_factory=list)
    rsvp_status: str = "pending"
    relationships: List[str] = field(default_factory=list)
    notes: str = ""
    assigned_seat_id: Optional[str] = None

    @property
    def is_seated(self) -> bool:
        return self.assigned_seat_id is not None

    def avoids(self, other: "Guest") -> bool:
        """True if one of our ``Avoid:`` directives names ``other``."""
        return any(target and target in other.name for target in avoid_targets(self.relationships))

    def matches(self, criterion: str, mode: str) -> bool:
        """Whether this guest carries ``criterion`` under ``mode``."""
        if mode == "category":
            return self.category == criterion
        return criterion in self.tags

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "tags": list(self.tags),
            "rsvpStatus": self.rsvp_status,
            "relationships": list(self.relationships),
            "assignedSeatId": self.assigned_seat_id,
        }
        if self.notes:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Guest":
        rsvp = data.get("rsvpStatus", "pending")
        if rsvp not in RSVP_STATUSES:
            rsvp = "pending"
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "Unknown")),
            category=str(data.get("category", "Uncategorized")),
            tags=[str(t) for t in data.get("tags", [])],
            rsvp_status=rsvp,
            relationships=[str(r) for r in data.get("relationships", [])],
            notes=str(data.get("notes") or ""),
            assigned_seat_id=data.get("assignedSeatId"),
        )


@dataclass
class Seat:
    """One indexed slot at a table."""

    id: str
    index: int
    guest_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.guest_id is None


@dataclass
class Table:
    """Dinner table with an ordered list of seats."""

    id: str
    label: str
    seats: List[Seat] = field(default_factory=list)
    shape: str = "ROUND"
    x: float = 0.0
    y: float = 0.0
    radius: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    rotation: float = 0.0

    @classmethod
    def create(cls, table_id: str, label: str, capacity: int, shape: str = "ROUND", **placement: Any) -> "Table":
        """Build a table with ``capacity`` empty seats."""
        if capacity < 0:
            raise ValueError(f"Table {label!r} has a negative seat count: {capacity}")
        if shape not in SHAPES:
            raise ValueError(f"Unknown table shape: {shape!r}")
        seats = [Seat(id=make_seat_id(table_id, i), index=i) for i in range(capacity)]
        return cls(id=table_id, label=label, seats=seats, shape=shape, **placement)

    @property
    def capacity(self) -> int:
        return len(self.seats)

    def empty_seat_count(self) -> int:
        return sum(1 for s in self.seats if s.is_empty)

    def first_empty_seat(self) -> Optional[Seat]:
        for seat in sorted(self.seats, key=lambda s: s.index):
            if seat.is_empty:
                return seat
        return None

    def seat_at(self, index: int) -> Optional[Seat]:
        return next((s for s in self.seats if s.index == index), None)

    def occupant_ids(self) -> List[str]:
        return [s.guest_id for s in self.seats if s.guest_id is not None]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "shape": self.shape,
            "rotation": self.rotation,
            "seats": [{"id": s.id, "index": s.index, "guestId": s.guest_id} for s in self.seats],
        }
        for key in ("radius", "width", "height"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Table":
        table_id = str(data["id"])
        seats = [
            Seat(
                id=str(s.get("id") or make_seat_id(table_id, int(s["index"]))),
                index=int(s["index"]),
                guest_id=s.get("guestId"),
            )
            for s in data.get("seats", [])
        ]
        return cls(
            id=table_id,
            label=str(data.get("label", table_id)),
            seats=seats,
            shape=str(data.get("shape", "ROUND")),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            radius=data.get("radius"),
            width=data.get("width"),
            height=data.get("height"),
            rotation=float(data.get("rotation", 0.0) or 0.0),
        )


@dataclass(frozen=True)
class Assignment:
    """Proposed binding of a guest to a seat."""

    guest_id: str
    table_id: str
    seat_index: int

    @property
    def seat_id(self) -> str:
        return make_seat_id(self.table_id, self.seat_index)


@dataclass(frozen=True)
class SkippedGuest:
    """Guest the engine could not place, with the reason."""

    guest_id: str
    reason: str


@dataclass
class AssignResult:
    """Preview produced by one auto-assign run."""

    assignments: List[Assignment] = field(default_factory=list)
    skipped: List[SkippedGuest] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "assignments": [
                {"guestId": a.guest_id, "tableId": a.table_id, "seatIndex": a.seat_index}
                for a in self.assignments
            ],
            "skipped": [{"guestId": s.guest_id, "reason": s.reason} for s in self.skipped],
        }
