"""
Filtering of pothole records by neighborhood, date, severity, status and size.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import FrozenSet, Optional, Tuple

import pandas as pd

from data_loader import BoundaryCollection
from geometry import GeometryEngine, default_geometry


@dataclass(frozen=True)
class FilterCriteria:
    date_range: str = "all"
    severities: FrozenSet[str] = field(default_factory=frozenset)
    statuses: FrozenSet[str] = field(default_factory=frozenset)
    size_min: object = ""
    size_max: object = ""

    def __post_init__(self):
        object.__setattr__(self, "severities", frozenset(self.severities or ()))
        object.__setattr__(self, "statuses", frozenset(self.statuses or ()))


DEFAULT_CRITERIA = FilterCriteria()
# The Clear button lands on today's detections
CLEARED_CRITERIA = FilterCriteria(date_range="today")


def apply_filters(draft: FilterCriteria) -> FilterCriteria:
    """Copy the draft criteria into a new applied value."""
    return replace(draft)


def clear_filters() -> Tuple[FilterCriteria, FilterCriteria, FrozenSet[int]]:
    """Reset (draft, applied, selection)."""
    return CLEARED_CRITERIA, CLEARED_CRITERIA, frozenset()


def select_boundary(current: FrozenSet[int], candidate: int) -> FrozenSet[int]:
    """Single-select with toggle-to-clear.

    Picking the boundary that is already the only one selected clears the
    selection (show all); anything else selects just that boundary.
    """
    if len(current) == 1 and candidate in current:
        return frozenset()
    return frozenset([candidate])


def parse_size_bound(value) -> Optional[float]:
    """Numeric bound or None for blank/non-numeric input."""
    if isinstance(value, str):
        value = value.strip()
    if value is None or value == "":
        return None
    number = pd.to_numeric(value, errors="coerce")
    if pd.isna(number):
        return None
    return float(number)


def range_start(range_key: str, now: datetime | None = None) -> Optional[datetime]:
    """Earliest detection time admitted by a date range, None for no limit."""
    now = now or datetime.now()
    if range_key == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if range_key == "last7":
        return now - timedelta(days=7)
    if range_key == "last30":
        return now - timedelta(days=30)
    if range_key == "thisYear":
        return datetime(now.year, 1, 1)
    return None


def date_in_range(detected, range_key: str, now: datetime | None = None) -> bool:
    start = range_start(range_key, now)
    if start is None:
        return True
    return pd.Timestamp(detected) >= pd.Timestamp(start)


def _inside_any(df: pd.DataFrame, polygons, geometry: GeometryEngine) -> pd.Series:
    inside = [
        any(geometry.contains(p, lat, lng) for p in polygons)
        for lat, lng in zip(df["latitude"], df["longitude"])
    ]
    return pd.Series(inside, index=df.index, dtype=bool)


def filter_potholes(
    df: pd.DataFrame,
    boundaries: BoundaryCollection | None,
    selected: FrozenSet[int],
    criteria: FilterCriteria,
    now: datetime | None = None,
    geometry: GeometryEngine | None = None,
    clip_to_boundaries: bool = True,
) -> pd.DataFrame:
    """Records visible under the applied criteria, in their original order.

    Args:
        df: Pothole records
        boundaries: Loaded neighborhoods, or None when unavailable
        selected: Selected boundary indices (empty means all)
        criteria: Applied filter criteria
        now: Reference time for date ranges
        geometry: Point-in-polygon backend
        clip_to_boundaries: Drop records outside every known boundary
    """
    if df.empty:
        return df.copy()

    geometry = geometry or default_geometry
    mask = pd.Series(True, index=df.index)

    if boundaries is not None:
        if clip_to_boundaries:
            mask &= _inside_any(df, boundaries.geometries(), geometry)
        if selected:
            mask &= _inside_any(df, boundaries.geometries(selected), geometry)

    start = range_start(criteria.date_range, now)
    if start is not None:
        mask &= pd.to_datetime(df["detected_at"]) >= pd.Timestamp(start)

    if criteria.severities:
        mask &= df["severity"].isin(list(criteria.severities))
    if criteria.statuses:
        mask &= df["status"].isin(list(criteria.statuses))

    size_min = parse_size_bound(criteria.size_min)
    size_max = parse_size_bound(criteria.size_max)
    if size_min is not None:
        mask &= df["size_cm"] >= size_min
    if size_max is not None:
        mask &= df["size_cm"] <= size_max

    return df[mask]


def describe_criteria(criteria: FilterCriteria, selected: FrozenSet[int]) -> dict:
    """Human-readable summary of the applied filters."""
    def fmt(bound):
        return "any" if bound is None else f"{bound:g}"

    size_min = parse_size_bound(criteria.size_min)
    size_max = parse_size_bound(criteria.size_max)
    return {
        "date": criteria.date_range,
        "severities": ", ".join(sorted(criteria.severities)) or "all",
        "statuses": ", ".join(sorted(criteria.statuses)) or "all",
        "size": f"{fmt(size_min)} to {fmt(size_max)} cm",
        "neighborhoods": len(selected) or "all",
    }
