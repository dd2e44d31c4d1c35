"""
Session state and cached data shared by the dashboard pages.

Helpers that change state take the state mapping as an argument so the
page callbacks can pass st.session_state and tests can pass a dict.
"""

import logging
from typing import MutableMapping, Optional

import pandas as pd
import pydeck as pdk
import streamlit as st

from constants import CITY_CENTER, DEFAULT_ZOOM, SEVERITIES, STATUSES
from data_loader import BoundaryCollection, load_app_config, load_boundaries
from filters import (
    DEFAULT_CRITERIA,
    FilterCriteria,
    apply_filters,
    clear_filters,
    filter_potholes,
    select_boundary,
)
from geocoder import NominatimGeocoder
from potholes import generate_potholes
from search import SearchResult, resolve_search

logger = logging.getLogger(__name__)

DEFAULT_VIEW = {"latitude": CITY_CENTER[0], "longitude": CITY_CENTER[1], "zoom": DEFAULT_ZOOM}


@st.cache_data
def get_settings() -> dict:
    return load_app_config()


@st.cache_data
def get_potholes(seed: int, count: int, min_spacing_m: float) -> pd.DataFrame:
    """Synthetic records, generated once per process."""
    df = generate_potholes(seed=seed, count=count, min_spacing_m=min_spacing_m)
    logger.info(f"Generated {len(df)} synthetic potholes (seed={seed})")
    return df


@st.cache_data
def get_boundaries(source: str) -> Optional[BoundaryCollection]:
    return load_boundaries(source)


def get_geocoder(url: str, country_codes: str, user_agent: str) -> NominatimGeocoder:
    return NominatimGeocoder(url=url, country_codes=country_codes, user_agent=user_agent)


def load_everything():
    """(settings, potholes, boundaries) for the current run."""
    settings = get_settings()
    df = get_potholes(int(settings["seed"]), int(settings["target_count"]), float(settings["min_spacing_m"]))
    boundaries = get_boundaries(str(settings["boundary_source"]))
    return settings, df, boundaries


def init_session_state(state: MutableMapping) -> None:
    state.setdefault("applied_filters", DEFAULT_CRITERIA)
    state.setdefault("selected", frozenset())
    state.setdefault("view", dict(DEFAULT_VIEW))
    state.setdefault("last_map_pick", None)
    state.setdefault("search_message", None)
    # widget keys are dropped on pages that do not render the Filter tab
    if "draft_date_range" not in state:
        set_draft_widgets(state, state.get("draft_filters", DEFAULT_CRITERIA))
    state.setdefault("draft_filters", draft_from_widgets(state))


# --- Draft vs. applied filters ---

def set_draft_widgets(state: MutableMapping, criteria: FilterCriteria) -> None:
    """Push criteria into the Filter tab widget keys."""
    state["draft_date_range"] = criteria.date_range
    for sev in SEVERITIES:
        state[f"draft_sev_{sev}"] = sev in criteria.severities
    for st_name in STATUSES:
        state[f"draft_status_{st_name}"] = st_name in criteria.statuses
    state["draft_size_min"] = str(criteria.size_min or "")
    state["draft_size_max"] = str(criteria.size_max or "")


def draft_from_widgets(state: MutableMapping) -> FilterCriteria:
    return FilterCriteria(
        date_range=state.get("draft_date_range", "all"),
        severities=[s for s in SEVERITIES if state.get(f"draft_sev_{s}")],
        statuses=[s for s in STATUSES if state.get(f"draft_status_{s}")],
        size_min=state.get("draft_size_min", ""),
        size_max=state.get("draft_size_max", ""),
    )


def on_apply_filters(state: MutableMapping) -> None:
    draft = draft_from_widgets(state)
    state["draft_filters"] = draft
    state["applied_filters"] = apply_filters(draft)


def on_clear_filters(state: MutableMapping) -> None:
    draft, applied, selected = clear_filters()
    set_draft_widgets(state, draft)
    state["draft_filters"] = draft
    state["applied_filters"] = applied
    state["selected"] = selected


# --- Selection and viewport ---

def view_for_bounds(bounds) -> dict:
    (south, west), (north, east) = bounds
    vs = pdk.data_utils.compute_view([[west, south], [east, north]])
    return {"latitude": float(vs.latitude), "longitude": float(vs.longitude), "zoom": float(vs.zoom)}


def toggle_boundary(state: MutableMapping, index: int, boundaries: BoundaryCollection | None = None, fit: bool = False) -> None:
    state["selected"] = select_boundary(frozenset(state.get("selected", frozenset())), index)
    if fit and boundaries is not None and state["selected"]:
        state["view"] = view_for_bounds(boundaries.bounds(index))


def handle_map_pick(state: MutableMapping, pick: Optional[int]) -> None:
    """Apply a boundary click reported by the map.

    The map keeps reporting the last picked object on every rerun, so only a
    change counts as a click. A pick that disappears means the same
    boundary was clicked again.
    """
    last = state.get("last_map_pick")
    if pick == last:
        return
    state["last_map_pick"] = pick
    target = pick if pick is not None else last
    if target is not None:
        toggle_boundary(state, target)


def apply_search_result(state: MutableMapping, result: SearchResult) -> None:
    if result.kind == "boundary":
        state["selected"] = frozenset([result.boundary_index])
        state["view"] = view_for_bounds(result.bounds)
    elif result.kind == "point":
        state["selected"] = frozenset()
        state["view"] = {"latitude": result.latitude, "longitude": result.longitude, "zoom": result.zoom}


def visible_potholes(state: MutableMapping, df: pd.DataFrame, boundaries, settings: dict) -> pd.DataFrame:
    return filter_potholes(
        df,
        boundaries,
        frozenset(state.get("selected", frozenset())),
        state.get("applied_filters", DEFAULT_CRITERIA),
        clip_to_boundaries=bool(settings.get("clip_to_boundaries", True)),
    )


def run_search_query(state: MutableMapping, query: str, boundaries, geocoder, zoom: int) -> SearchResult:
    """Resolve a search box query and apply it to the session.

    Only a match changes the view or shows a message; a failed lookup is
    logged and leaves the selection and view as they were.
    """
    state["search_message"] = None
    result = resolve_search(query, boundaries, geocoder, zoom=zoom)
    apply_search_result(state, result)
    if result.kind == "boundary":
        state["search_message"] = f"Showing {boundaries[result.boundary_index].name}"
    elif result.kind == "point":
        state["search_message"] = f"Centered on {result.latitude:.4f}, {result.longitude:.4f}"
    elif query and query.strip():
        logger.info(f"Search {query!r} found nothing")
    return result
