"""EventSeating package."""
from .models import Guest, Table, Seat, Assignment, SkippedGuest, AssignResult
from .csv_loader import (
    load_guests,
    load_tables,
    export_guests,
    load_project,
    save_project,
)
from .solver import AutoSeatingModel, run_auto_assign
from .store import SeatingStore
from .session import AutoAssignSession

__all__ = [
    "Guest",
    "Table",
    "Seat",
    "Assignment",
    "SkippedGuest",
    "AssignResult",
    "load_guests",
    "load_tables",
    "export_guests",
    "load_project",
    "save_project",
    "AutoSeatingModel",
    "run_auto_assign",
    "SeatingStore",
    "AutoAssignSession",
]
