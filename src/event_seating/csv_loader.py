"""CSV and project file utilities."""
from __future__ import annotations

import json
import math
from pathlib import Path
from typing import IO, Any, Callable, List, Optional

import pandas as pd

from .models import AVOID_PREFIX, Guest, Table, avoid_targets, parse_tag_list
from .store import SeatingStore

# Accepted headers per field, first match wins.
NAME_COLUMNS = ("Name", "姓名")
CATEGORY_COLUMNS = ("Category", "分類")
RSVP_COLUMNS = ("RSVP",)
TAG_COLUMNS = ("Tags", "標籤")
AVOID_COLUMNS = ("Avoid", "避嫌", "Relationships")

_RSVP_IN = {
    "confirmed": "confirmed",
    "已確認": "confirmed",
    "declined": "declined",
    "無法出席": "declined",
}
_RSVP_OUT = {
    "confirmed": "已確認",
    "pending": "未定",
    "declined": "無法出席",
}
EXPORT_COLUMNS = ["姓名", "分類", "RSVP", "標籤", "避嫌", "桌號"]


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def _first(row: pd.Series, columns: tuple[str, ...]) -> str:
    """Value of the first aliased column that is present and non-empty."""
    for col in columns:
        value = _text(row.get(col))
        if value:
            return value
    return ""


def load_guests(path: Path | str | IO[Any], new_id: Optional[Callable[[], str]] = None) -> List[Guest]:
    """Load a guest list, accepting English or Chinese headers.

    Columns: Name/姓名, Category/分類, RSVP, Tags/標籤, Avoid/避嫌. An optional
    ``id`` column keeps its values. Rows without one get ``new_id()`` when
    given (e.g. ``SeatingStore.new_guest_id``), otherwise ``g1``, ``g2`` ...
    """
    df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    df = df.dropna(how="all")
    guests: List[Guest] = []
    for n, (_, row) in enumerate(df.iterrows(), start=1):
        relationships = []
        avoid = _first(row, AVOID_COLUMNS)
        if avoid:
            relationships.append(f"{AVOID_PREFIX}{avoid}")
        guest_id = _text(row.get("id")) or (new_id() if new_id else f"g{n}")
        guests.append(
            Guest(
                id=guest_id,
                name=_first(row, NAME_COLUMNS) or "Unknown",
                category=_first(row, CATEGORY_COLUMNS) or "Uncategorized",
                tags=parse_tag_list(_first(row, TAG_COLUMNS)),
                rsvp_status=_RSVP_IN.get(_first(row, RSVP_COLUMNS), "pending"),
                relationships=relationships,
            )
        )

    ids = [g.id for g in guests]
    if len(set(ids)) != len(ids):
        raise ValueError("Duplicate guest ids in guest list")
    return guests


def load_tables(path: Path | str | IO[Any], new_id: Optional[Callable[[], str]] = None) -> List[Table]:
    """Load table definitions: label, capacity and optional id and shape."""
    df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    missing = [c for c in ("label", "capacity") if c not in df.columns]
    if missing:
        raise ValueError(f"Tables CSV is missing columns: {', '.join(missing)}")
    tables: List[Table] = []
    for n, (_, row) in enumerate(df.iterrows(), start=1):
        try:
            capacity = int(_text(row["capacity"]))
        except ValueError as e:
            raise ValueError(f"Invalid capacity for table {_text(row['label'])!r}") from e
        tables.append(
            Table.create(
                _text(row.get("id")) or (new_id() if new_id else f"t{n}"),
                _text(row["label"]),
                capacity,
                shape=(_text(row.get("shape")) or "ROUND").upper(),
            )
        )
    return tables


def export_guests(store: SeatingStore, path: Path | str | IO[Any]) -> pd.DataFrame:
    """Write the guest list with each guest's table label."""
    rows = [
        {
            "姓名": g.name,
            "分類": g.category,
            "RSVP": _RSVP_OUT.get(g.rsvp_status, g.rsvp_status),
            "標籤": ", ".join(g.tags),
            "避嫌": "; ".join(avoid_targets(g.relationships)),
            "桌號": store.table_label_for(g),
        }
        for g in store.guests
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    if isinstance(path, (str, Path)):
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return df


def load_project(path: Path | str) -> SeatingStore:
    """Read a ``{tables, guests}`` project file."""
    p = Path(path)
    if not p.exists():
        raise ValueError(f"Project file not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to read project JSON: {e}") from e
    return SeatingStore.from_dict(data)


def save_project(store: SeatingStore, path: Path | str) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(store.to_dict(), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
