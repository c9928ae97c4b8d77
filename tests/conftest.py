import pathlib
import sys

import pytest

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from event_seating.models import Guest, Table, make_seat_id  # noqa: E402

DATA_DIR = pathlib.Path(__file__).parent / "data"


def seat(table: Table, index: int, guest: Guest) -> None:
    """Seat ``guest`` at ``table`` keeping both sides of the binding in sync."""
    table.seat_at(index).guest_id = guest.id
    guest.assigned_seat_id = make_seat_id(table.id, index)


@pytest.fixture
def data_dir() -> pathlib.Path:
    return DATA_DIR


@pytest.fixture
def make_guest():
    def _make(gid, name=None, category="Family", tags=None, relationships=None):
        return Guest(
            id=gid,
            name=name or gid,
            category=category,
            tags=list(tags or []),
            relationships=list(relationships or []),
        )

    return _make


@pytest.fixture
def make_table():
    def _make(tid, capacity, label=None, shape="ROUND"):
        return Table.create(tid, label or tid, capacity, shape=shape)

    return _make
