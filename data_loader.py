"""
Data Loader for the Pothole Mapping Platform
Loads app settings and the neighborhood boundary GeoJSON, and builds the
name index used by the search box.
"""

import json
import logging
import os
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import requests
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from constants import CONFIG_FILE, DEFAULT_CONFIG, FIT_PADDING, NAME_KEYS

logger = logging.getLogger(__name__)

ENV_OVERRIDES = {
    "POTHOLE_BOUNDARY_SOURCE": "boundary_source",
    "NOMINATIM_URL": "geocoder_url",
    "NOMINATIM_USER_AGENT": "geocoder_user_agent",
}


def load_app_config(config_file: str | Path = CONFIG_FILE) -> dict:
    """Load settings from data/config.json on top of the defaults.

    Environment variables win over the file. A missing or unreadable file
    means defaults.
    """
    cfg = dict(DEFAULT_CONFIG)
    config_path = Path(config_file)
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                overrides = json.load(f)
            if isinstance(overrides, dict):
                cfg.update({k: v for k, v in overrides.items() if k in DEFAULT_CONFIG})
            else:
                logger.warning(f"Ignoring {config_path}: expected a JSON object")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {config_path}, using defaults: {e}")

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            cfg[key] = value
    return cfg


def normalize_name(value) -> str:
    """Lowercase, strip accents and surrounding whitespace."""
    text = unicodedata.normalize("NFKD", str(value or "").lower())
    return "".join(c for c in text if not unicodedata.combining(c)).strip()


def feature_name(feature: dict) -> str:
    props = feature.get("properties") or {}
    for key in NAME_KEYS:
        if props.get(key):
            return str(props[key])
    fid = feature.get("id")
    return f"Area {'' if fid is None else fid}".strip()


@dataclass(frozen=True)
class Boundary:
    index: int
    name: str
    normalized_name: str
    geometry: BaseGeometry
    feature: dict = field(repr=False)


class BoundaryCollection:
    """Ordered, read-only set of neighborhood boundaries.

    A boundary is addressed by its position in the collection; that index is
    what the selection holds.
    """

    def __init__(self, boundaries: List[Boundary]):
        self._boundaries = tuple(boundaries)
        self._lookup: Dict[str, int] = {}
        for b in self._boundaries:
            self._lookup.setdefault(b.normalized_name, b.index)

    def __len__(self) -> int:
        return len(self._boundaries)

    def __iter__(self):
        return iter(self._boundaries)

    def __getitem__(self, index: int) -> Boundary:
        return self._boundaries[index]

    def has_index(self, index: int) -> bool:
        return 0 <= index < len(self._boundaries)

    @property
    def names(self) -> List[str]:
        return [b.name for b in self._boundaries]

    @property
    def name_index(self) -> List[Tuple[int, str]]:
        """(index, normalized name) pairs in collection order."""
        return [(b.index, b.normalized_name) for b in self._boundaries]

    @property
    def lookup(self) -> Dict[str, int]:
        """Normalized name -> index of the first boundary with that name."""
        return dict(self._lookup)

    def geometries(self, indices=None) -> List[BaseGeometry]:
        if indices is None:
            return [b.geometry for b in self._boundaries]
        return [self._boundaries[i].geometry for i in sorted(indices) if self.has_index(i)]

    def bounds(self, index: int, pad: float = FIT_PADDING) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """((south, west), (north, east)) of one boundary, grown by `pad` of its size on each side."""
        west, south, east, north = self._boundaries[index].geometry.bounds
        dlat = (north - south) * pad
        dlng = (east - west) * pad
        return (south - dlat, west - dlng), (north + dlat, east + dlng)

    def to_geojson(self, selected=frozenset()) -> dict:
        """FeatureCollection for the map layer, with selection styling in the properties."""
        features = []
        for b in self._boundaries:
            is_selected = b.index in selected
            props = dict(b.feature.get("properties") or {})
            props.update({
                "_idx": b.index,
                "display_name": b.name,
                "selected": is_selected,
                "fill_color": [147, 197, 253, 46 if is_selected else 20],
                "line_color": [29, 78, 216] if is_selected else [37, 99, 235],
                "line_width": 3 if is_selected else 2,
            })
            features.append({
                "type": "Feature",
                "id": b.feature.get("id", b.index),
                "geometry": b.feature["geometry"],
                "properties": props,
            })
        return {"type": "FeatureCollection", "features": features}


def build_boundaries(geojson: dict) -> BoundaryCollection:
    """Build the collection from a GeoJSON FeatureCollection or single Feature.

    Features without a usable Polygon/MultiPolygon geometry are skipped.
    """
    if geojson.get("type") == "FeatureCollection":
        features = geojson.get("features") or []
    else:
        features = [geojson]

    boundaries = []
    for feature in features:
        geom_json = (feature or {}).get("geometry")
        if not geom_json or geom_json.get("type") not in ("Polygon", "MultiPolygon"):
            logger.warning(f"Skipping feature {feature_name(feature or {})!r}: no polygon geometry")
            continue
        try:
            geom = shape(geom_json)
        except (ValueError, TypeError, IndexError, AttributeError) as e:
            logger.warning(f"Skipping feature {feature_name(feature)!r}: {e}")
            continue
        name = feature_name(feature)
        boundaries.append(Boundary(
            index=len(boundaries),
            name=name,
            normalized_name=normalize_name(name),
            geometry=geom,
            feature=feature,
        ))
    return BoundaryCollection(boundaries)


def load_boundaries(source: str | Path) -> Optional[BoundaryCollection]:
    """Load neighborhood boundaries from a local file or an http(s) URL.

    Returns None when the source is missing, unreadable, or holds no
    polygons, in which case the map shows every record.
    """
    source = str(source)
    try:
        if source.startswith(("http://", "https://")):
            response = requests.get(source, headers={"Accept": "application/geo+json"}, timeout=30)
            response.raise_for_status()
            data = response.json()
        else:
            with open(source, "r", encoding="utf-8") as f:
                data = json.load(f)
    except (OSError, ValueError, requests.RequestException) as e:
        logger.error(f"Failed to load boundaries from {source}: {e}")
        return None

    if not isinstance(data, dict) or data.get("type") not in ("FeatureCollection", "Feature"):
        logger.error(f"Boundary source {source} is not GeoJSON")
        return None

    collection = build_boundaries(data)
    if len(collection) == 0:
        logger.warning(f"No usable boundaries in {source}")
        return None

    logger.info(f"Loaded {len(collection)} boundaries from {source}")
    return collection
