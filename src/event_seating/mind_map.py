"""Interactive seating layout visualization."""
from __future__ import annotations

import math
from itertools import combinations
from typing import Dict, Iterable, List, Sequence, Tuple

import networkx as nx
from pyvis.network import Network

from .models import Guest, Table

# ---------------------------
# Public API
# ---------------------------

PALETTE = [
    "#FFB347", "#77DD77", "#AEC6CF", "#F49AC2", "#B39EB5", "#03C03C",
    "#779ECB", "#966FD6", "#FFD700", "#CB99C9", "#CFCFC4", "#FDFD96",
    "#84B6F4", "#FDCAE1",
]
AVOID_COLOR = "#FF6B6B"
TABLE_COLOR = "#555555"


def table_node_id(table: Table) -> str:
    return f"table:{table.id}"


def build_layout_graph(tables: Sequence[Table], guests: Iterable[Guest]) -> nx.Graph:
    """
    Graph of the seating layout read from the seats.

    Nodes:
      ``table:<id>`` per table (kind="table").
      guest id per seated guest (kind="guest", table, seat, category).
    Edges:
      guest to its table (kind="seat").
      guest to guest when an ``Avoid:`` directive matches (kind="avoid",
      same_table tells whether both sit at one table).
    """
    guest_by_id = {g.id: g for g in guests}
    G = nx.Graph()

    for table in tables:
        tnode = table_node_id(table)
        G.add_node(
            tnode,
            kind="table",
            label=table.label,
            shape=table.shape,
            capacity=table.capacity,
            empty=table.empty_seat_count(),
        )
        for seat in table.seats:
            g = guest_by_id.get(seat.guest_id) if seat.guest_id else None
            if g is None:
                continue
            G.add_node(g.id, kind="guest", label=g.name, table=table.id, seat=seat.index, category=g.category)
            G.add_edge(tnode, g.id, kind="seat")

    seated = [n for n, d in G.nodes(data=True) if d["kind"] == "guest"]
    for a, b in combinations(seated, 2):
        ga, gb = guest_by_id[a], guest_by_id[b]
        if ga.avoids(gb) or gb.avoids(ga):
            G.add_edge(a, b, kind="avoid", same_table=G.nodes[a]["table"] == G.nodes[b]["table"])
    return G


def generate_layout_mind_map(
    tables: Sequence[Table],
    guests: Iterable[Guest],
    show_cross_table_avoid: bool = False,
    canvas_size: Tuple[int, int] = (1600, 1000),
) -> str:
    """
    Render the seating layout as an interactive HTML network.

    Parameters:
      tables: tables whose seats define who sits where (a preview snapshot works too).
      guests: all guests referenced by the seats.
      show_cross_table_avoid: also draw avoid edges between different tables.
      canvas_size: width, height in pixels for layout scaling.

    Returns:
      HTML string with embedded network.
    """
    guests = list(guests)
    G = build_layout_graph(tables, guests)

    width, height = canvas_size
    centers = _compute_table_centers([t.id for t in tables], width, height)
    categories = sorted({d["category"] for _, d in G.nodes(data=True) if d["kind"] == "guest"})
    category_color = {c: PALETTE[i % len(PALETTE)] for i, c in enumerate(categories)}

    view = nx.Graph()
    for table in tables:
        cx, cy = centers[table.id]
        seat_xy = _seat_positions(table, cx, cy)
        tnode = table_node_id(table)
        data = G.nodes[tnode]
        view.add_node(
            tnode,
            label=f"{table.label} ({data['capacity'] - data['empty']}/{data['capacity']})",
            title=f"<b>{table.label}</b><br>Seats: {data['capacity']}<br>Empty: {data['empty']}",
            color=TABLE_COLOR,
            x=cx,
            y=cy,
            physics=False,
            shape="box" if table.shape == "RECTANGLE" else "ellipse",
        )
        for gid in G.neighbors(tnode):
            node = G.nodes[gid]
            if node.get("kind") != "guest":
                continue
            x, y = seat_xy[node["seat"]]
            view.add_node(
                gid,
                label=node["label"],
                title=_node_tooltip(node["label"], table.label, node["seat"], node["category"]),
                color=category_color[node["category"]],
                x=x,
                y=y,
                physics=False,
                shape="dot",
                size=16,
            )
            view.add_edge(tnode, gid, color="#888888", width=1)

    for a, b, data in G.edges(data=True):
        if data["kind"] != "avoid":
            continue
        if not data["same_table"] and not show_cross_table_avoid:
            continue
        view.add_edge(a, b, color=AVOID_COLOR, width=4 if data["same_table"] else 1, label="avoid", dashes=not data["same_table"])

    net = Network(height="700px", width="100%", bgcolor="#111111", font_color="#EEEEEE")
    net.toggle_physics(False)  # positions are fixed
    net.from_nx(view)
    return _inject_legend_html(net.generate_html(), category_color)

# ---------------------------
# Internals
# ---------------------------


def _compute_table_centers(tables: List[str], width: int, height: int) -> Dict[str, Tuple[int, int]]:
    """
    Place table centers on a grid inside the canvas area.
    """
    if not tables:
        return {}
    n = len(tables)
    cols = max(1, int(math.ceil(math.sqrt(n))))
    rows = int(math.ceil(n / cols))
    margin = 120
    step_x = max(1, width - 2 * margin) // cols
    step_y = max(1, height - 2 * margin) // rows

    centers: Dict[str, Tuple[int, int]] = {}
    for idx, table_id in enumerate(tables):
        r, c = divmod(idx, cols)
        centers[table_id] = (margin + c * step_x + step_x // 2, margin + r * step_y + step_y // 2)
    return centers


def _seat_positions(table: Table, cx: int, cy: int) -> Dict[int, Tuple[int, int]]:
    """
    Coordinates per seat index. Round tables put seats on a circle, rectangle
    tables split them between the two long sides.
    """
    n = max(1, table.capacity)
    indices = sorted(s.index for s in table.seats)
    if table.shape == "RECTANGLE":
        coords = _long_sides_layout(cx, cy, n)
    else:
        coords = _circle_layout(cx, cy, 60 + 6 * n, n)
    return dict(zip(indices, coords))


def _circle_layout(cx: int, cy: int, r: int, n: int) -> List[Tuple[int, int]]:
    pts = []
    for i in range(n):
        theta = 2 * math.pi * i / n
        pts.append((int(cx + r * math.cos(theta)), int(cy + r * math.sin(theta))))
    return pts


def _long_sides_layout(cx: int, cy: int, n: int) -> List[Tuple[int, int]]:
    cell = 40
    top = int(math.ceil(n / 2))
    bottom = n - top
    pts = [(cx - (top - 1) * cell // 2 + i * cell, cy - 50) for i in range(top)]
    pts += [(cx + (bottom - 1) * cell // 2 - i * cell, cy + 50) for i in range(bottom)]
    return pts


def _node_tooltip(name: str, table: str, seat: int, category: str) -> str:
    return (
        f"<b>{name}</b><br>"
        f"Table: {table}<br>"
        f"Seat: {seat + 1}<br>"
        f"Category: {category}"
    )


def _inject_legend_html(html: str, category_color: Dict[str, str]) -> str:
    css = """
    <style>
    .legend-box{
      position:absolute;right:12px;bottom:12px;
      background:#222;color:#eee;border:1px solid #444;border-radius:8px;
      padding:8px 12px;font-family:system-ui, -apple-system, Segoe UI, Roboto, Arial;font-size:12px;
      z-index:10;
    }
    .legend-swatch{display:inline-block;width:12px;height:12px;margin-right:6px;vertical-align:middle;border:1px solid #444;}
    </style>
    """
    rows = "".join(
        f'<div><span class="legend-swatch" style="background:{color}"></span>{category}</div>'
        for category, color in category_color.items()
    )
    legend = f"""
    {css}
    <div class="legend-box">
      {rows}
      <div style="margin-top:6px;"><span class="legend-swatch" style="background:{AVOID_COLOR}"></span>avoid</div>
    </div>
    """
    if "</body>" in html:
        return html.replace("</body>", legend + "</body>", 1)
    return html + legend
