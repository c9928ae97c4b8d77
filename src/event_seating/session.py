"""Auto-assign dialog flow: choose criteria, preview a run, then apply or cancel."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .models import MODES, AssignResult
from .solver import AutoSeatingModel, summarize_result
from .store import SeatingStore

COLLECTING_INPUT = "collecting_input"
SIMULATING = "simulating"
PREVIEWING = "previewing"
APPLIED = "applied"
CANCELLED = "cancelled"


class AutoAssignSession:
    """One pass through the auto-assign dialog against a store."""

    def __init__(self, store: SeatingStore, mode: str = "category", strict_mode: bool = False,
                 live_affinity: bool = False) -> None:
        self.store = store
        self.strict_mode = strict_mode
        self.live_affinity = live_affinity
        self.state = COLLECTING_INPUT
        self.mode = mode
        self.selected: List[str] = []
        self.result: Optional[AssignResult] = None
        self.model: Optional[AutoSeatingModel] = None
        self.set_mode(mode)

    def _require(self, *states: str) -> None:
        if self.state not in states:
            raise ValueError(f"Cannot do that while {self.state}")

    def set_mode(self, mode: str) -> None:
        """Switch between category and tag mode; resets the selection."""
        self._require(COLLECTING_INPUT, PREVIEWING)
        if mode not in MODES:
            raise ValueError(f"Unknown grouping mode: {mode!r}")
        self.mode = mode
        self.selected = self.store.available_criteria(mode)
        self.result = None
        self.state = COLLECTING_INPUT

    def toggle(self, value: str) -> None:
        self._require(COLLECTING_INPUT)
        if value in self.selected:
            self.selected.remove(value)
        else:
            self.selected.append(value)

    def select(self, values: Sequence[str]) -> None:
        self._require(COLLECTING_INPUT)
        self.selected = list(values)

    @property
    def can_run(self) -> bool:
        return self.state == COLLECTING_INPUT and bool(self.selected)

    def run(self) -> AssignResult:
        self._require(COLLECTING_INPUT)
        if not self.selected:
            raise ValueError("Select at least one category or tag before running")
        self.state = SIMULATING
        try:
            self.model = AutoSeatingModel(mode=self.mode, strict_mode=self.strict_mode, live_affinity=self.live_affinity)
            self.model.build(self.store.tables, self.store.guests)
            self.result = self.model.solve(self.selected)
        except ValueError:
            self.model = None
            self.result = None
            self.state = COLLECTING_INPUT
            raise
        self.state = PREVIEWING
        return self.result

    def revise(self) -> None:
        """Back to the selection step, dropping the preview."""
        self._require(PREVIEWING)
        self.result = None
        self.state = COLLECTING_INPUT

    def apply(self) -> int:
        self._require(PREVIEWING)
        if self.result is None:
            raise ValueError("No preview to apply")
        applied = self.store.apply_assignments(self.result.assignments)
        self.state = APPLIED
        return applied

    def cancel(self) -> None:
        self._require(COLLECTING_INPUT, PREVIEWING)
        self.result = None
        self.state = CANCELLED

    def stats(self) -> Dict[str, int]:
        self._require(PREVIEWING, APPLIED)
        if self.result is None:
            raise ValueError("No preview to report on")
        return summarize_result(self.result, self.store.tables)
