"""
CSV and GeoJSON exports of the visible pothole records.
"""

import geopandas as gpd
import pandas as pd

EXPORT_COLUMNS = ["id", "latitude", "longitude", "severity", "status", "size_cm", "detected_at"]


def _export_frame(df: pd.DataFrame) -> pd.DataFrame:
    out = df[EXPORT_COLUMNS].copy()
    out["detected_at"] = pd.to_datetime(out["detected_at"]).dt.strftime("%Y-%m-%dT%H:%M:%S")
    return out


def to_csv(df: pd.DataFrame) -> str:
    return _export_frame(df).to_csv(index=False)


def to_geojson(df: pd.DataFrame) -> str:
    """Point FeatureCollection (EPSG:4326) with the record attributes as properties."""
    out = _export_frame(df)
    gdf = gpd.GeoDataFrame(
        out.drop(columns=["latitude", "longitude"]),
        geometry=gpd.points_from_xy(out["longitude"], out["latitude"]),
        crs="EPSG:4326",
    )
    return gdf.to_json()
