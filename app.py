"""Streamlit UI for EventSeating: load a guest list, preview auto-seating, apply."""
from __future__ import annotations

# Add src to sys.path so event_seating can be found
import sys
import os
import io
import json
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

from event_seating.csv_loader import export_guests, load_guests, load_tables
from event_seating.mind_map import generate_layout_mind_map
from event_seating.session import PREVIEWING, AutoAssignSession
from event_seating.solver import compute_table_stats
from event_seating.store import SeatingStore

# -----------------------------
# Helpers
# -----------------------------


def uploadedfile_to_buffer(uploaded_file) -> io.StringIO | None:
    """Read a Streamlit UploadedFile into a text buffer positioned at start."""
    if uploaded_file is None:
        return None
    uploaded_file.seek(0)
    return io.StringIO(uploaded_file.read().decode("utf-8"))


def get_store() -> SeatingStore:
    if "store" not in st.session_state:
        st.session_state["store"] = SeatingStore()
    return st.session_state["store"]


def layout_df(store: SeatingStore, tables) -> pd.DataFrame:
    guests_by_id = store.guests_by_id()
    return pd.DataFrame([compute_table_stats(t, guests_by_id) for t in tables])


store = get_store()

# -----------------------------
# Sidebar options
# -----------------------------

st.sidebar.header("Auto-seating options")
mode = st.sidebar.radio(
    "Group guests by",
    options=["category", "tag"],
    format_func=lambda m: "Category (分類)" if m == "category" else "Tag (標籤)",
)
strict_mode = st.sidebar.checkbox(
    "Strict grouping",
    value=False,
    help="Never mix different categories or tags at one table. Some seats may stay empty.",
)
live_affinity = st.sidebar.checkbox(
    "Count this run's placements as affinity",
    value=False,
    help="Guests seated earlier in the same run attract the rest of their group.",
)

# -----------------------------
# Inputs
# -----------------------------

st.title("Event Seating")

project_file = st.file_uploader("Project JSON", type="json")
guests_file = st.file_uploader("Guests CSV", type="csv")
tables_file = st.file_uploader("Tables CSV", type="csv")

if st.button("Load files", disabled=not (project_file or guests_file or tables_file)):
    try:
        if project_file is not None:
            store = SeatingStore.from_dict(json.loads(project_file.read().decode("utf-8")))
        else:
            store = SeatingStore()
        if tables_file is not None:
            store.import_tables(load_tables(uploadedfile_to_buffer(tables_file), new_id=store.new_table_id))
        if guests_file is not None:
            store.import_guests(load_guests(uploadedfile_to_buffer(guests_file), new_id=store.new_guest_id))
        st.session_state["store"] = store
        st.session_state.pop("session", None)
    except ValueError as e:
        st.error(f"Input validation error: {e}")
        st.stop()

if not store.tables or not store.guests:
    st.info("Load tables and guests to start.")
    st.stop()

st.subheader("Tables")
st.dataframe(layout_df(store, store.tables), use_container_width=True)

# -----------------------------
# Selection
# -----------------------------

session: AutoAssignSession | None = st.session_state.get("session")
if session is None or session.mode != mode or session.store is not store or session.state not in ("collecting_input", PREVIEWING):
    session = AutoAssignSession(store, mode=mode, strict_mode=strict_mode, live_affinity=live_affinity)
    st.session_state["session"] = session
# A preview built with other options is stale
if session.state == PREVIEWING and (session.strict_mode, session.live_affinity) != (strict_mode, live_affinity):
    session.revise()
session.strict_mode = strict_mode
session.live_affinity = live_affinity

counts = store.criterion_counts(mode)
st.subheader(f"Choose {'categories' if mode == 'category' else 'tags'} ({len(store.unseated_guests())} unseated)")
if not counts:
    st.info("No categories available" if mode == "category" else "Unseated guests carry no tags")
chosen = st.multiselect(
    "Seat these groups (order sets tag priority)",
    options=list(counts),
    default=[v for v in session.selected if v in counts],
    format_func=lambda v: f"{v} ({counts[v]})",
)

if session.state == PREVIEWING and chosen != session.selected:
    session.revise()
if session.state == "collecting_input":
    session.select(chosen)

run_clicked = st.button("Run auto-assign", disabled=not session.can_run)

# -----------------------------
# Preview and apply
# -----------------------------

if run_clicked:
    try:
        session.run()
    except ValueError as e:
        st.error(f"Input validation error: {e}")
        st.stop()

if session.state == PREVIEWING and session.result is not None:
    stats = session.stats()
    c1, c2, c3 = st.columns(3)
    c1.metric("Assigned", stats["assigned"])
    c2.metric("Skipped", stats["skipped"])
    c3.metric("Tables", stats["tables"])

    guests_by_id = store.guests_by_id()
    labels = {t.id: t.label for t in store.tables}
    if session.result.skipped:
        st.warning("These guests could not be seated:")
        st.dataframe(
            pd.DataFrame([
                {
                    "guest": guests_by_id[s.guest_id].name,
                    "category": guests_by_id[s.guest_id].category,
                    "reason": "conflict rule" if s.reason == "conflict" else "no free seat",
                }
                for s in session.result.skipped
            ]),
            use_container_width=True,
        )

    st.subheader("Preview")
    st.dataframe(
        pd.DataFrame([
            {
                "guest": guests_by_id[a.guest_id].name,
                "category": guests_by_id[a.guest_id].category,
                "table": labels[a.table_id],
                "seat": a.seat_index + 1,
            }
            for a in session.result.assignments
        ]),
        use_container_width=True,
    )
    components.html(
        generate_layout_mind_map(session.model.simulated_tables, store.guests),
        height=600,
        scrolling=True,
    )

    if st.button("Apply", key="apply_button"):
        applied = session.apply()
        st.success(f"Seated {applied} guests")
        st.session_state.pop("session", None)

# -----------------------------
# Export
# -----------------------------

st.subheader("Export")
buf = io.StringIO()
export_guests(store, buf)
st.download_button("Download guest list as CSV", buf.getvalue().encode("utf-8"), file_name="guest-list-export.csv")
st.download_button(
    "Download project JSON",
    json.dumps(store.to_dict(), ensure_ascii=False, indent=2).encode("utf-8"),
    file_name="event-seating.json",
)
