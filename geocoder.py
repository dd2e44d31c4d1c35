"""
Nominatim Geocoder
Turns free-text addresses, postal codes and place names into coordinates
"""

import logging
import math
from typing import Optional, Tuple

import requests

from constants import COUNTRY_CODES, NOMINATIM_URL, NOMINATIM_USER_AGENT

logger = logging.getLogger(__name__)


class NominatimGeocoder:
    """Look up a single best match on OpenStreetMap Nominatim"""

    def __init__(
        self,
        url: str = NOMINATIM_URL,
        country_codes: str = COUNTRY_CODES,
        user_agent: str = NOMINATIM_USER_AGENT,
        timeout: float = 10,
    ):
        self.url = url
        self.country_codes = country_codes
        self.user_agent = user_agent
        self.timeout = timeout

    def _params(self, query: str) -> dict:
        return {
            "format": "jsonv2",
            "addressdetails": 1,
            "countrycodes": self.country_codes,
            "limit": 1,
            "q": query,
        }

    def geocode(self, query: str) -> Optional[Tuple[float, float]]:
        """
        Geocode a query.

        Returns:
            (lat, lon) of the first result, or None if the lookup fails
            or finds nothing
        """
        if not query or not query.strip():
            return None

        try:
            response = requests.get(
                self.url,
                params=self._params(query),
                headers={"Accept": "application/json", "User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            response.raise_for_status()
            results = response.json()
        except requests.RequestException as e:
            logger.error(f"Geocode request failed for {query!r}: {e}")
            return None
        except ValueError as e:
            logger.error(f"Geocode response for {query!r} is not JSON: {e}")
            return None

        if not isinstance(results, list) or not results:
            logger.info(f"No geocode results for {query!r}")
            return None

        first = results[0]
        try:
            lat = float(first["lat"])
            lon = float(first["lon"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Malformed geocode result for {query!r}: {e}")
            return None

        if math.isnan(lat) or math.isnan(lon):
            logger.warning(f"Geocode result for {query!r} has no usable coordinates")
            return None
        return lat, lon
