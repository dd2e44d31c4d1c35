"""
Search box resolution: neighborhood name first, geocoder as a fallback.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from constants import FIT_PADDING, GEOCODE_ZOOM
from data_loader import BoundaryCollection, normalize_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    """What a search resolved to.

    kind is "boundary" (select and fit a neighborhood), "point" (recenter
    on a geocoded location) or "none" (leave everything as is).
    """
    kind: str = "none"
    boundary_index: Optional[int] = None
    bounds: Optional[Tuple[Tuple[float, float], Tuple[float, float]]] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    zoom: Optional[int] = None


NO_MATCH = SearchResult()


def match_boundary(query: str, boundaries: BoundaryCollection | None) -> Optional[int]:
    """Index of the boundary matching a query, exact name before substring."""
    q = normalize_name(query)
    if not q or boundaries is None or len(boundaries) == 0:
        return None

    index = boundaries.name_index
    for idx, name in index:
        if name == q:
            return idx
    for idx, name in index:
        if q in name:
            return idx
    return None


def resolve_search(query: str, boundaries: BoundaryCollection | None, geocoder, zoom: int = GEOCODE_ZOOM) -> SearchResult:
    """Resolve a search box query.

    Blank queries are ignored. A neighborhood match wins; otherwise the raw
    query goes to the geocoder, whose failures come back as no match.
    """
    if not normalize_name(query):
        return NO_MATCH

    idx = match_boundary(query, boundaries)
    if idx is not None:
        logger.info(f"Search {query!r} matched boundary {boundaries[idx].name!r}")
        return SearchResult(kind="boundary", boundary_index=idx, bounds=boundaries.bounds(idx, FIT_PADDING))

    location = geocoder.geocode(query)
    if location is None:
        return NO_MATCH
    lat, lon = location
    return SearchResult(kind="point", latitude=lat, longitude=lon, zoom=zoom)
