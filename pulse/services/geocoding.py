"""
Venue geocoding through Nominatim.

All calls in the process share one lock and one rate limiter, so at most one
request is in flight and requests are spaced by the configured interval.
Results outside NYC, or too far from the expected borough, count as misses.
"""

import asyncio
import functools
import logging
from typing import Any, Dict, Optional, Tuple

from geopy.distance import geodesic
from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeocoderUnavailable
from geopy.geocoders import Nominatim

from pulse.core.config import settings
from pulse.schemas.event import Coordinates
from pulse.services.neighborhoods import BOROUGH_CENTROIDS, NYC_CENTROID
from pulse.utils.errors import GeocodeMiss
from pulse.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

# Constants
DEFAULT_COUNTRY = "us"
NYC_VIEWBOX = [(40.49, -74.26), (40.92, -73.70)]
CITY_SUFFIX = "New York, NY"

class NominatimGeocoder:
    """Rate-limited, NYC-bounded geocoder."""

    def __init__(
        self,
        geolocator: Optional[Any] = None,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: Optional[float] = None,
        sanity_radius_km: Optional[float] = None,
        borough_radius_km: Optional[float] = None
    ):
        """
        Initialize the geocoder.

        Args:
            geolocator: geopy geocoder (defaults to Nominatim)
            rate_limiter: Shared limiter (defaults to one call per
                GEOCODER_MIN_INTERVAL_SECONDS)
            timeout: Per-request timeout in seconds
            sanity_radius_km: Max distance from the NYC centroid
            borough_radius_km: Max distance from a hinted borough's centroid
        """
        self.timeout = timeout or settings.GEOCODER_TIMEOUT_SECONDS
        self.geolocator = geolocator or Nominatim(
            user_agent=settings.GEOCODER_USER_AGENT,
            timeout=self.timeout
        )
        self.rate_limiter = rate_limiter or RateLimiter.from_min_interval(
            settings.GEOCODER_MIN_INTERVAL_SECONDS
        )
        self.sanity_radius_km = sanity_radius_km or settings.GEOCODE_SANITY_RADIUS_KM
        self.borough_radius_km = borough_radius_km or settings.GEOCODE_BOROUGH_RADIUS_KM
        self._lock = asyncio.Lock()
        self.stats: Dict[str, int] = {'requests': 0, 'hits': 0, 'misses': 0, 'errors': 0}

    @staticmethod
    def build_query(name: Optional[str], address: Optional[str]) -> Optional[str]:
        parts = [p.strip() for p in (name, address) if p and p.strip()]
        if not parts:
            return None
        query = ', '.join(parts)
        if 'new york' not in query.lower() and 'brooklyn' not in query.lower():
            query = f"{query}, {CITY_SUFFIX}"
        return query

    def expected_point(self, hint: Optional[str]) -> Tuple[Dict[str, float], float]:
        """Expected centroid and allowed radius for a result."""
        borough = BOROUGH_CENTROIDS.get((hint or '').strip().lower())
        if borough:
            return borough, self.borough_radius_km
        return NYC_CENTROID, self.sanity_radius_km

    def _check_result(self, location, hint: Optional[str], query: str) -> Coordinates:
        if location is None:
            raise GeocodeMiss(f"No result for '{query}'")

        center, radius = self.expected_point(hint)
        dist = geodesic(
            (location.latitude, location.longitude),
            (center['lat'], center['lng'])
        ).kilometers
        if dist > radius:
            raise GeocodeMiss(
                f"Result for '{query}' is {dist:.1f}km from expected point (limit {radius}km)"
            )
        return Coordinates(lat=location.latitude, lng=location.longitude)

    async def _request(self, query: str):
        loop = asyncio.get_running_loop()
        call = functools.partial(
            self.geolocator.geocode,
            query,
            exactly_one=True,
            country_codes=DEFAULT_COUNTRY,
            viewbox=NYC_VIEWBOX,
            bounded=True,
            timeout=self.timeout
        )
        return await loop.run_in_executor(None, call)

    async def geocode(
        self,
        name: Optional[str],
        address: Optional[str] = None,
        hint: Optional[str] = None
    ) -> Optional[Coordinates]:
        """
        Geocode a venue.

        Args:
            name: Venue name
            address: Optional street address
            hint: Optional borough/locality hint used for the sanity check

        Returns:
            Coordinates, or None on a miss or service error
        """
        query = self.build_query(name, address)
        if not query:
            return None

        async with self._lock:
            await self.rate_limiter.acquire()
            self.stats['requests'] += 1
            try:
                location = await self._request(query)
                coords = self._check_result(location, hint, query)
            except GeocodeMiss as e:
                self.stats['misses'] += 1
                logger.info(f"Geocode miss: {str(e)}")
                return None
            except (GeocoderTimedOut, GeocoderUnavailable, GeocoderServiceError) as e:
                self.stats['errors'] += 1
                logger.warning(f"Geocoder error for '{query}': {str(e)}")
                return None

        self.stats['hits'] += 1
        logger.debug(f"Geocoded '{query}' to ({coords.lat:.4f}, {coords.lng:.4f})")
        return coords
