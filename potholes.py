"""
Synthetic pothole detections for the Toronto demo map.

Records are generated from a seeded random sequence so the same seed always
yields the same set, which keeps the map and the tests reproducible.
"""

import logging
import random
from datetime import datetime, timedelta

import pandas as pd

from constants import (
    CITY_CENTER,
    DEFAULT_SEED,
    DETECTION_WINDOW_DAYS,
    LAT_JITTER,
    LNG_JITTER,
    MAX_ATTEMPTS_PER_RECORD,
    MIN_SPACING_M,
    SEVERITIES,
    SEVERITY_COLORS,
    SIZE_RANGE_CM,
    STATUSES,
    TARGET_COUNT,
)
from geometry import GeometryEngine, default_geometry

logger = logging.getLogger(__name__)

POTHOLE_COLUMNS = [
    "id", "latitude", "longitude", "severity", "status",
    "size_cm", "detected_at", "color",
]


def generate_potholes(
    seed: int = DEFAULT_SEED,
    count: int = TARGET_COUNT,
    center: tuple = CITY_CENTER,
    min_spacing_m: float = MIN_SPACING_M,
    now: datetime | None = None,
    geometry: GeometryEngine | None = None,
) -> pd.DataFrame:
    """Generate synthetic pothole detections around a city center.

    Candidates closer than `min_spacing_m` to an accepted record are
    rejected. Generation stops after `count` records or after
    50 attempts per requested record, whichever comes first, so the result
    can be shorter than `count`.

    Args:
        seed: Seed for the random sequence
        count: Number of records wanted
        center: (lat, lng) the records are scattered around
        min_spacing_m: Minimum great-circle distance between two records
        now: Reference time for detection timestamps (defaults to now)
        geometry: Distance backend
    """
    rng = random.Random(seed)
    geometry = geometry or default_geometry
    now = now or datetime.now()
    center_lat, center_lng = center
    size_lo, size_hi = SIZE_RANGE_CM
    window_s = DETECTION_WINDOW_DAYS * 24 * 60 * 60

    items = []
    points = []
    max_attempts = count * MAX_ATTEMPTS_PER_RECORD
    attempts = 0

    while len(items) < count and attempts < max_attempts:
        attempts += 1
        severity = SEVERITIES[int(rng.random() * len(SEVERITIES))]
        status = STATUSES[int(rng.random() * len(STATUSES))]
        size = int(rng.random() * (size_hi - size_lo + 1)) + size_lo
        detected = now - timedelta(seconds=rng.random() * window_s)
        lat = center_lat + (rng.random() - 0.5) * LAT_JITTER
        lng = center_lng + (rng.random() - 0.5) * LNG_JITTER

        if geometry.any_within(points, (lat, lng), min_spacing_m):
            continue

        points.append((lat, lng))
        items.append({
            "latitude": lat,
            "longitude": lng,
            "severity": severity,
            "status": status,
            "size_cm": size,
            "detected_at": detected,
            "color": SEVERITY_COLORS[severity],
        })

    if len(items) < count:
        logger.warning(f"Generated {len(items)} of {count} potholes after {attempts} attempts")

    df = pd.DataFrame(items, columns=[c for c in POTHOLE_COLUMNS if c != "id"])
    df.insert(0, "id", range(len(df)))
    df["detected_at"] = pd.to_datetime(df["detected_at"])
    return df


def summarize_potholes(df: pd.DataFrame) -> dict:
    """Counts per severity and per status, plus the total."""
    summary = {"total": int(len(df))}
    severity_counts = df["severity"].value_counts().reindex(SEVERITIES, fill_value=0)
    status_counts = df["status"].value_counts().reindex(STATUSES, fill_value=0)
    summary.update({k: int(v) for k, v in severity_counts.items()})
    summary.update({k: int(v) for k, v in status_counts.items()})
    return summary
