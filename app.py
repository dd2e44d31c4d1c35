"""
Pothole Mapping Platform - City Infrastructure Services
A Streamlit dashboard of pothole detections over Toronto neighborhoods
"""

import html
import logging

import pandas as pd
import pydeck as pdk
import streamlit as st

from constants import DATE_RANGES, SEVERITIES, SEVERITY_LABELS, STATUS_LABELS, STATUSES
from exporter import to_csv, to_geojson
from filters import describe_criteria
from potholes import summarize_potholes
from state import (
    get_geocoder,
    handle_map_pick,
    init_session_state,
    load_everything,
    on_apply_filters,
    on_clear_filters,
    run_search_query,
    toggle_boundary,
    visible_potholes,
)
from ui import apply_base_styles, render_header, render_severity_legend

logging.basicConfig(level=logging.INFO)

# Page configuration
st.set_page_config(
    page_title="Pothole Mapping Platform",
    page_icon="🕳️",
    layout="wide",
    initial_sidebar_state="expanded"
)

apply_base_styles("""
    /* Stat rows in the summary tab */
    .stat-row {
        display: flex;
        justify-content: space-between;
        padding: 8px 12px;
        border-radius: 8px;
    }
    .stat-row:hover {
        background: #f3f4f6;
    }
    .info-box {
        background: #eff6ff;
        border-radius: 8px;
        padding: 12px;
        font-size: 13px;
        color: #4b5563;
    }
""")

BOUNDARY_LAYER_ID = "boundaries"


def hex_to_rgb(color: str) -> list:
    color = color.lstrip("#")
    return [int(color[i:i+2], 16) for i in (0, 2, 4)]


def _prepare_deck_data(df: pd.DataFrame) -> pd.DataFrame:
    working = df.copy()
    working["rgb"] = working["color"].apply(hex_to_rgb)
    working["label"] = working["severity"].str.capitalize()
    working["detail"] = working.apply(
        lambda r: html.escape(
            f"Size: {r['size_cm']}cm | Status: {STATUS_LABELS.get(r['status'], r['status'])} | "
            f"Detected: {pd.Timestamp(r['detected_at']):%Y-%m-%d} | "
            f"{r['latitude']:.4f}, {r['longitude']:.4f}"
        ),
        axis=1,
    )
    # Timestamps don't serialize to the deck JSON
    return working.drop(columns=["detected_at"])


def build_deck(df: pd.DataFrame, boundaries, selected, view: dict, map_style: str) -> pdk.Deck:
    layers = []
    if boundaries is not None:
        hoods = boundaries.to_geojson(selected)
        for f in hoods["features"]:
            f["properties"]["label"] = html.escape(f["properties"]["display_name"])
            f["properties"]["detail"] = "Click to select, click again to show all"
        layers.append(
            pdk.Layer(
                "GeoJsonLayer",
                hoods,
                id=BOUNDARY_LAYER_ID,
                stroked=True,
                filled=True,
                get_fill_color="properties.fill_color",
                get_line_color="properties.line_color",
                get_line_width="properties.line_width",
                line_width_units="pixels",
                pickable=True,
            )
        )

    if not df.empty:
        layers.append(
            pdk.Layer(
                "ScatterplotLayer",
                _prepare_deck_data(df),
                id="potholes",
                get_position="[longitude, latitude]",
                get_fill_color="rgb",
                get_line_color=[255, 255, 255],
                radius_units="pixels",
                get_radius=8,
                line_width_min_pixels=2,
                stroked=True,
                opacity=0.8,
                pickable=True,
            )
        )

    return pdk.Deck(
        layers=layers,
        initial_view_state=pdk.ViewState(**view),
        map_style=map_style,
        tooltip={"html": "<b>{label}</b><br/>{detail}", "style": {"backgroundColor": "white", "color": "#111827"}},
    )


def run_search(query_key: str, boundaries, settings: dict) -> None:
    query = st.session_state.get(query_key, "")
    geocoder = get_geocoder(
        settings["geocoder_url"], settings["country_codes"], settings["geocoder_user_agent"]
    )
    run_search_query(st.session_state, query, boundaries, geocoder, int(settings["geocode_zoom"]))


def render_summary_tab(visible: pd.DataFrame) -> None:
    st.markdown("#### Detection Summary")
    summary = summarize_potholes(visible)
    for sev in SEVERITIES:
        st.markdown(
            f'<div class="stat-row"><span>{SEVERITY_LABELS[sev].split(" (")[0]} Severity</span>'
            f"<b>{summary[sev]}</b></div>",
            unsafe_allow_html=True,
        )
    st.markdown("---")
    for status in STATUSES:
        st.markdown(
            f'<div class="stat-row"><span>{STATUS_LABELS[status]}</span><b>{summary[status]}</b></div>',
            unsafe_allow_html=True,
        )
    st.markdown(
        '<div class="info-box">Counts reflect the detections currently on the map. '
        "Use the Filter tab to explore other dates.</div>",
        unsafe_allow_html=True,
    )


def render_filter_tab(boundaries, total: int, visible: pd.DataFrame) -> None:
    st.markdown("#### Filter Options")
    state = st.session_state

    if boundaries is not None:
        with st.expander("Neighborhoods", expanded=False):
            for b in boundaries:
                checked = b.index in state.selected
                st.checkbox(
                    b.name,
                    value=checked,
                    # keyed on the current state so the box follows map clicks
                    key=f"hood_{b.index}_{checked}",
                    on_change=toggle_boundary,
                    args=(state, b.index, boundaries, True),
                )

    st.selectbox(
        "Date Range",
        options=list(DATE_RANGES.keys()),
        format_func=lambda k: DATE_RANGES[k],
        key="draft_date_range",
    )

    st.markdown("**Severity Level**")
    for sev in SEVERITIES:
        st.checkbox(sev.capitalize(), key=f"draft_sev_{sev}")

    st.markdown("**Size Range (cm)**")
    col1, col2 = st.columns(2)
    with col1:
        st.text_input("Min", key="draft_size_min", placeholder="Min")
    with col2:
        st.text_input("Max", key="draft_size_max", placeholder="Max")

    st.markdown("**Status**")
    for status in STATUSES:
        st.checkbox(STATUS_LABELS[status], key=f"draft_status_{status}")

    col1, col2 = st.columns(2)
    with col1:
        st.button("Apply Filters", type="primary", on_click=on_apply_filters, args=(state,), width="stretch")
    with col2:
        st.button("Clear", on_click=on_clear_filters, args=(state,), width="stretch")

    active = describe_criteria(state.applied_filters, state.selected)
    st.caption(
        f"Active date: **{active['date']}**  \n"
        f"Severities: **{active['severities']}**  \n"
        f"Statuses: **{active['statuses']}**  \n"
        f"Size: **{active['size']}**  \n"
        f"Neighborhoods: **{active['neighborhoods']}**  \n"
        f"Showing **{len(visible)}** of {total}"
    )


def render_query_tab(boundaries, settings: dict) -> None:
    st.markdown("#### Advanced Query")
    st.caption("Search postal code, neighborhood, or GTA city")
    with st.form("query_search", clear_on_submit=False):
        st.text_input("Search", key="tab_query", placeholder="e.g., M5V 2T6 or Kensington Market or Mississauga")
        st.form_submit_button("Go", on_click=run_search, args=("tab_query", boundaries, settings))


def render_export_tab(visible: pd.DataFrame) -> None:
    st.markdown("#### Export Data")
    st.caption(f"{len(visible)} detections match the current filters")
    st.download_button(
        label="📥 Download CSV",
        data=to_csv(visible),
        file_name="potholes.csv",
        mime="text/csv",
        width="stretch",
    )
    st.download_button(
        label="🗺️ Download GeoJSON",
        data=to_geojson(visible),
        file_name="potholes.geojson",
        mime="application/geo+json",
        width="stretch",
    )


def render_about_tab() -> None:
    st.markdown("""
    #### About

    Pothole detections are synthetic and regenerated from a fixed seed on
    every start. Neighborhood outlines come from the boundary GeoJSON in
    `data/`; when it is missing the map shows every detection.

    - Click a neighborhood to show only its detections; click it again to show all.
    - Filter edits take effect when you press **Apply Filters**.
    - Searches try neighborhood names first, then OpenStreetMap Nominatim.
    """)


def main():
    init_session_state(st.session_state)
    settings, df, boundaries = load_everything()

    render_header("City Infrastructure Services", "Pothole Detection & Mapping (Year to Date)")

    # Map-level search box
    with st.form("map_search", border=False):
        search_col, go_col = st.columns([6, 1])
        with search_col:
            st.text_input(
                "Find",
                key="map_query",
                placeholder="Find postal code, neighborhood, or GTA city",
                label_visibility="collapsed",
            )
        with go_col:
            st.form_submit_button(
                "🔍", on_click=run_search, args=("map_query", boundaries, settings), width="stretch"
            )

    visible = visible_potholes(st.session_state, df, boundaries, settings)

    with st.sidebar:
        summary_tab, filter_tab, query_tab, export_tab, about_tab = st.tabs(
            ["Summary", "Filter", "Query", "Export", "About"]
        )
        with summary_tab:
            render_summary_tab(visible)
        with filter_tab:
            render_filter_tab(boundaries, len(df), visible)
        with query_tab:
            render_query_tab(boundaries, settings)
        with export_tab:
            render_export_tab(visible)
        with about_tab:
            render_about_tab()

    if st.session_state.search_message:
        st.info(st.session_state.search_message)

    map_col, legend_col = st.columns([5, 1])
    with map_col:
        deck = build_deck(
            visible,
            boundaries,
            st.session_state.selected,
            st.session_state.view,
            settings["map_style"],
        )
        event = st.pydeck_chart(
            deck,
            height=650,
            on_select="rerun",
            selection_mode="single-object",
            key="pothole_map",
        )
        objects = event.selection.get("objects") or {}
        # pothole clicks leave the neighborhood selection alone
        if not objects or BOUNDARY_LAYER_ID in objects:
            picked = objects.get(BOUNDARY_LAYER_ID) or []
            pick = picked[0].get("properties", {}).get("_idx") if picked else None
            if pick != st.session_state.last_map_pick:
                handle_map_pick(st.session_state, pick)
                st.rerun()

    with legend_col:
        render_severity_legend()
        st.metric("Showing", f"{len(visible)} of {len(df)}")
        if boundaries is None:
            st.caption("Neighborhood boundaries unavailable")


if __name__ == "__main__":
    main()
