import csv
import json

from event_seating import cli
from event_seating.csv_loader import load_project


def test_cli_preview_does_not_write_project(data_dir, tmp_path, capsys):
    out_assign = tmp_path / "assignments.csv"
    code = cli.main([
        "--project", str(data_dir / "project.json"),
        "--mode", "category",
        "--out-assignments", str(out_assign),
    ])
    assert code == 0
    printed = capsys.readouterr().out
    assert "[SUMMARY] assigned=4 skipped=0" in printed
    assert "[REPORT] Head table" in printed

    with out_assign.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    placed = {r["guest"]: r["table"] for r in rows}
    # Family joins Grace at the head table, friends take the emptier one
    assert placed["Frank"] == "Head table"
    assert placed["Fiona"] == "Head table"
    assert placed["Oscar"] == "Friends"


def test_cli_apply_and_export(data_dir, tmp_path, capsys):
    out_project = tmp_path / "seated.json"
    out_guests = tmp_path / "guests.csv"
    out_map = tmp_path / "map.html"
    code = cli.main([
        "--project", str(data_dir / "project.json"),
        "--mode", "tag",
        "--criteria", "Veggie",
        "--strict",
        "--apply",
        "--out-project", str(out_project),
        "--out-guests", str(out_guests),
        "--out-map", str(out_map),
    ])
    assert code == 0
    store = load_project(out_project)
    assert store.validate() == []
    assert store.guest("g3").assigned_seat_id == "t2-0"
    assert store.guest("g4").assigned_seat_id is None
    assert store.guest("g2").assigned_seat_id is None
    assert "[SKIPPED] Oscar reason=conflict" in capsys.readouterr().out
    assert "Fiona" in out_map.read_text(encoding="utf-8")
    assert "Friends" in out_guests.read_text(encoding="utf-8")


def test_cli_guest_csv_with_tables(data_dir, tmp_path, capsys):
    out_project = tmp_path / "p.json"
    code = cli.main([
        "--guests", str(data_dir / "guests.csv"),
        "--tables", str(data_dir / "tables.csv"),
        "--apply",
        "--out-project", str(out_project),
    ])
    assert code == 0
    data = json.loads(out_project.read_text(encoding="utf-8"))
    assert sum(1 for g in data["guests"] if g["assignedSeatId"]) == 6
    store = load_project(out_project)
    wang, chen = store.guest("g1"), store.guest("g2")
    assert wang.assigned_seat_id.split("-")[0] != chen.assigned_seat_id.split("-")[0]


def test_cli_reports_input_errors(tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text('{"tables": []}', encoding="utf-8")
    assert cli.main(["--project", str(bad)]) == 2
    assert "Error:" in capsys.readouterr().out


def test_cli_nothing_to_seat(tmp_path, capsys):
    project = tmp_path / "seated.json"
    project.write_text(json.dumps({
        "tables": [{"id": "t1", "label": "Only", "seats": [{"id": "t1-0", "index": 0, "guestId": "g1"}]}],
        "guests": [{"id": "g1", "name": "Solo", "category": "Family", "assignedSeatId": "t1-0"}],
    }), encoding="utf-8")
    assert cli.main(["--project", str(project)]) == 1
    assert "Nothing to seat" in capsys.readouterr().out


def test_cli_guest_csv_added_to_project(data_dir, tmp_path, capsys):
    out_project = tmp_path / "merged.json"
    code = cli.main([
        "--project", str(data_dir / "project.json"),
        "--guests", str(data_dir / "guests.csv"),
        "--out-project", str(out_project),
    ])
    assert code == 0
    store = load_project(out_project)
    ids = [g.id for g in store.guests]
    assert len(ids) == 11
    assert len(set(ids)) == 11
    # Project guests keep their ids, CSV rows get the next free ones
    assert store.guest("g1").name == "Grace Family"
    assert store.guests[5].name == "王大明"
    assert ids[5:] == ["g6", "g7", "g8", "g9", "g10", "g11"]
    assert store.validate() == []
