import pytest

from event_seating.models import (
    Guest,
    Table,
    avoid_targets,
    make_seat_id,
    parse_seat_id,
    parse_tag_list,
)


def test_parse_tag_list():
    assert parse_tag_list("素食, VIP") == ["素食", "VIP"]
    assert parse_tag_list("素食，兒童") == ["素食", "兒童"]
    assert parse_tag_list(" , ") == []
    assert parse_tag_list(None) == []
    assert parse_tag_list(float("nan")) == []


def test_seat_ids_round_trip_with_dashes():
    assert make_seat_id("t1", 3) == "t1-3"
    assert parse_seat_id("t1-3") == ("t1", 3)
    assert parse_seat_id("hall-a-12") == ("hall-a", 12)
    for bad in ("t1", "-3", "t1-x"):
        with pytest.raises(ValueError):
            parse_seat_id(bad)


def test_table_create():
    table = Table.create("t9", "第 9 桌", 3, shape="RECTANGLE")
    assert [s.id for s in table.seats] == ["t9-0", "t9-1", "t9-2"]
    assert table.capacity == 3
    assert table.empty_seat_count() == 3
    assert table.first_empty_seat().index == 0


def test_table_rejects_negative_capacity_and_bad_shape():
    with pytest.raises(ValueError):
        Table.create("t1", "bad", -1)
    with pytest.raises(ValueError):
        Table.create("t1", "bad", 2, shape="OVAL")


def test_first_empty_seat_uses_index_not_list_order():
    table = Table.create("t1", "t", 3)
    table.seats.reverse()
    table.seat_at(0).guest_id = "x"
    assert table.first_empty_seat().index == 1


def test_guest_avoid_and_match():
    wang = Guest(id="g1", name="王大明", category="男方親友", tags=["素食"], relationships=["Avoid:陳小美", "Likes cake"])
    chen = Guest(id="g2", name="陳小美", category="女方親友")
    assert avoid_targets(wang.relationships) == ["陳小美"]
    assert wang.avoids(chen)
    assert not chen.avoids(wang)
    assert wang.matches("男方親友", "category")
    assert wang.matches("素食", "tag")
    assert not wang.matches("VIP", "tag")


def test_guest_dict_round_trip():
    data = {
        "id": "g3",
        "name": "林董事長",
        "category": "貴賓",
        "tags": ["VIP"],
        "rsvpStatus": "pending",
        "relationships": [],
        "notes": "CEO",
        "assignedSeatId": "t1-0",
    }
    assert Guest.from_dict(data).to_dict() == data


def test_guest_from_dict_unknown_rsvp_is_pending():
    assert Guest.from_dict({"id": 7, "name": "X", "rsvpStatus": "maybe"}).rsvp_status == "pending"


def test_table_dict_round_trip():
    table = Table.create("t2", "親友桌", 2, x=200, y=450, radius=60)
    table.seats[1].guest_id = "g1"
    again = Table.from_dict(table.to_dict())
    assert again == table
