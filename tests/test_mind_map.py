from conftest import seat

from event_seating.mind_map import build_layout_graph, generate_layout_mind_map, table_node_id


def _layout(make_guest, make_table):
    tables = [make_table("t1", 4, label="Head"), make_table("t2", 4, label="Long", shape="RECTANGLE")]
    alice = make_guest("a", "Alice", relationships=["Avoid:Bob"])
    bob = make_guest("b", "Bob", category="Friend")
    carol = make_guest("c", "Carol")
    dan = make_guest("d", "Dan", relationships=["Avoid:Carol"])
    seat(tables[0], 0, alice)
    seat(tables[0], 2, bob)
    seat(tables[1], 1, carol)
    return tables, [alice, bob, carol, dan]


def test_layout_graph(make_guest, make_table):
    tables, guests = _layout(make_guest, make_table)
    G = build_layout_graph(tables, guests)

    assert G.nodes[table_node_id(tables[0])]["kind"] == "table"
    assert G.nodes[table_node_id(tables[0])]["empty"] == 2
    # Dan is unseated and left out
    assert "d" not in G
    assert G.nodes["b"]["seat"] == 2
    assert G.edges[table_node_id(tables[1]), "c"]["kind"] == "seat"
    assert G.edges["a", "b"] == {"kind": "avoid", "same_table": True}
    assert not G.has_edge("a", "c")


def test_cross_table_avoid_edges(make_guest, make_table):
    tables, guests = _layout(make_guest, make_table)
    seat(tables[1], 0, guests[3])
    G = build_layout_graph(tables, guests)
    assert G.edges["c", "d"] == {"kind": "avoid", "same_table": True}
    guests[3].relationships = ["Avoid:Alice"]
    G = build_layout_graph(tables, guests)
    assert G.edges["a", "d"]["same_table"] is False


def test_generate_html(make_guest, make_table):
    tables, guests = _layout(make_guest, make_table)
    html = generate_layout_mind_map(tables, guests)
    assert "<html" in html.lower()
    assert "Alice" in html
    assert "Head (2/4)" in html
    assert "legend-box" in html
