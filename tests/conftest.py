from datetime import datetime

import pandas as pd
import pytest

from data_loader import build_boundaries


def square(west, south, east, north):
    return {
        "type": "Polygon",
        "coordinates": [[[west, south], [east, south], [east, north], [west, north], [west, south]]],
    }


@pytest.fixture
def now():
    return datetime(2026, 6, 15, 12, 0, 0)


@pytest.fixture
def hoods_geojson():
    """Three neighborhoods side by side along the 43.65-43.66 band."""
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "id": 10, "properties": {"AREA_NAME": "Kensington Market"},
             "geometry": square(-79.41, 43.65, -79.40, 43.66)},
            {"type": "Feature", "id": 11, "properties": {"name": "Côte-des-Neiges"},
             "geometry": square(-79.40, 43.65, -79.39, 43.66)},
            {"type": "Feature", "id": 12, "properties": {"NEIGHBOURHOOD": "The Annex"},
             "geometry": square(-79.39, 43.65, -79.38, 43.66)},
        ],
    }


@pytest.fixture
def hoods(hoods_geojson):
    return build_boundaries(hoods_geojson)


@pytest.fixture
def records(now):
    """Five records: one per neighborhood, one outside all of them, one on a shared edge."""
    rows = [
        # id, lat, lng, severity, status, size, hours before now
        (0, 43.655, -79.405, "critical", "pending", 25, 1),
        (1, 43.655, -79.395, "high", "repaired", 15, 30),
        (2, 43.655, -79.385, "critical", "inProgress", 12, 2),
        (3, 43.700, -79.300, "critical", "pending", 40, 3),
        (4, 43.655, -79.400, "low", "pending", 30, 24 * 20),
    ]
    return pd.DataFrame(
        [
            {
                "id": i,
                "latitude": lat,
                "longitude": lng,
                "severity": sev,
                "status": status,
                "size_cm": size,
                "detected_at": pd.Timestamp(now) - pd.Timedelta(hours=hours),
                "color": "#000000",
            }
            for i, lat, lng, sev, status, size, hours in rows
        ]
    )
