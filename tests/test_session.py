import pytest
from conftest import seat

from event_seating.session import (
    APPLIED,
    CANCELLED,
    COLLECTING_INPUT,
    PREVIEWING,
    AutoAssignSession,
)
from event_seating.store import SeatingStore


@pytest.fixture
def store(make_guest, make_table):
    tables = [make_table("t1", 3), make_table("t2", 3)]
    guests = [
        make_guest("a", "Alice", tags=["VIP"]),
        make_guest("b", "Bob", relationships=["Avoid:Alice"]),
        make_guest("c", "Carol", category="Friend", tags=["VIP", "Veggie"]),
        make_guest("d", "Dan", category="Friend"),
    ]
    return SeatingStore(tables, guests)


def test_defaults_select_everything(store):
    session = AutoAssignSession(store)
    assert session.state == COLLECTING_INPUT
    assert session.selected == ["Family", "Friend"]
    session.set_mode("tag")
    assert session.selected == ["VIP", "Veggie"]


def test_preview_then_apply(store):
    session = AutoAssignSession(store)
    result = session.run()
    assert session.state == PREVIEWING
    assert len(result.assignments) == 4
    # Nothing is written until apply
    assert all(g.assigned_seat_id is None for g in store.guests)

    assert session.apply() == 4
    assert session.state == APPLIED
    assert store.validate() == []
    assert store.unseated_guests() == []
    assert store.guest("a").assigned_seat_id.split("-")[0] != store.guest("b").assigned_seat_id.split("-")[0]
    assert session.stats()["assigned"] == 4


def test_empty_selection_blocks_run(store):
    session = AutoAssignSession(store)
    session.select([])
    assert not session.can_run
    with pytest.raises(ValueError):
        session.run()
    assert session.state == COLLECTING_INPUT


def test_toggle(store):
    session = AutoAssignSession(store)
    session.toggle("Family")
    assert session.selected == ["Friend"]
    session.toggle("Family")
    assert session.selected == ["Friend", "Family"]


def test_revise_discards_preview(store):
    session = AutoAssignSession(store)
    session.run()
    session.revise()
    assert session.state == COLLECTING_INPUT
    assert session.result is None
    session.select(["Friend"])
    result = session.run()
    assert {a.guest_id for a in result.assignments} == {"c", "d"}


def test_cancel(store):
    session = AutoAssignSession(store)
    session.run()
    session.cancel()
    assert session.state == CANCELLED
    assert all(g.assigned_seat_id is None for g in store.guests)
    with pytest.raises(ValueError):
        session.apply()


def test_illegal_transitions(store):
    session = AutoAssignSession(store)
    with pytest.raises(ValueError):
        session.apply()
    with pytest.raises(ValueError):
        session.revise()
    session.run()
    with pytest.raises(ValueError):
        session.run()
    with pytest.raises(ValueError):
        session.toggle("Family")


def test_only_unseated_guests_offered(store):
    seat(store.table("t1"), 0, store.guest("c"))
    session = AutoAssignSession(store, mode="tag")
    assert session.selected == ["VIP"]


def test_failed_run_returns_to_selection(store):
    store.table("t2").seat_at(0).guest_id = "ghost"
    session = AutoAssignSession(store)
    with pytest.raises(ValueError, match="ghost"):
        session.run()
    assert session.state == COLLECTING_INPUT
    assert session.result is None
    session.cancel()
    assert session.state == CANCELLED


def test_apply_without_result_is_rejected(store):
    session = AutoAssignSession(store)
    session.run()
    session.result = None
    with pytest.raises(ValueError, match="No preview"):
        session.apply()
    with pytest.raises(ValueError, match="No preview"):
        session.stats()
