"""
Geometry helpers for point-in-polygon tests and great-circle distances.

The filter and the sample generator only talk to a GeometryEngine, so they
can be exercised with a fake engine in tests.
"""

from abc import ABC, abstractmethod
from typing import Sequence, Tuple

import numpy as np
from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry
from sklearn.metrics.pairwise import haversine_distances

from constants import EARTH_RADIUS_M

LatLng = Tuple[float, float]


class GeometryEngine(ABC):
    """Capability interface used by the filter and the generator."""

    @abstractmethod
    def contains(self, polygon, lat: float, lng: float) -> bool:
        """True if (lat, lng) lies inside or on the edge of `polygon`."""

    @abstractmethod
    def distance_m(self, a: LatLng, b: LatLng) -> float:
        """Great-circle distance in meters between two (lat, lng) points."""

    def any_within(self, points: Sequence[LatLng], candidate: LatLng, meters: float) -> bool:
        """True if any of `points` is strictly closer than `meters` to `candidate`."""
        for p in points:
            if self.distance_m(p, candidate) < meters:
                return True
        return False


class ShapelyGeometry(GeometryEngine):
    """Shapely polygons, haversine distance from scikit-learn."""

    def contains(self, polygon: BaseGeometry, lat: float, lng: float) -> bool:
        # covers() counts points on the edge as inside
        return bool(polygon.covers(Point(lng, lat)))

    def distance_m(self, a: LatLng, b: LatLng) -> float:
        d = haversine_distances(np.radians([a]), np.radians([b]))
        return float(d[0][0] * EARTH_RADIUS_M)

    def any_within(self, points: Sequence[LatLng], candidate: LatLng, meters: float) -> bool:
        if len(points) == 0:
            return False
        d = haversine_distances(np.radians([candidate]), np.radians(np.asarray(points)))
        return bool((d[0] * EARTH_RADIUS_M < meters).any())


default_geometry = ShapelyGeometry()
