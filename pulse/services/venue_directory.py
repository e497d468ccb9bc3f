"""
Venue directory: static venue coordinates plus venues learned at runtime.

Static entries always win. Learned entries are added on first sight (first
write wins), persisted as JSON, and never evicted.
"""

import json
import logging
import math
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple

from pulse.core.config import settings
from pulse.schemas.event import CanonicalEvent, Coordinates
from pulse.services.location_services import nearest_neighborhood
from pulse.services.venue_data import VENUE_MAP
from pulse.utils.errors import PersistenceFailure

logger = logging.getLogger(__name__)

_STRIP_CHARS = re.compile(r"['’\-.]")
_WHITESPACE = re.compile(r'\s+')

def normalize_venue_key(name: Optional[str]) -> str:
    """Lowercase, drop apostrophes, hyphens and periods, collapse whitespace."""
    if not name:
        return ''
    key = _STRIP_CHARS.sub('', name.lower())
    return _WHITESPACE.sub(' ', key).strip()

def _valid_coordinate(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)

class LearnedVenueStore:
    """JSON file holding learned venues as {key: {"lat": .., "lng": ..}}."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.LEARNED_VENUES_PATH)

    def load(self) -> Dict[str, Dict[str, float]]:
        """
        Read the learned venues file.

        A missing or unreadable file means no learned venues.
        """
        if not self.path.exists():
            logger.info(f"No learned venues file at {self.path}")
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read learned venues from {self.path}: {str(e)}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Learned venues file {self.path} is not a JSON object, ignoring")
            return {}
        return data

    def save(self, venues: Mapping[str, Mapping[str, float]]) -> None:
        """
        Atomically write the full learned set.

        Raises:
            PersistenceFailure: If the file cannot be written
        """
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix='.venues-', suffix='.tmp'
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(dict(venues), f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceFailure(f"Could not write {self.path}: {str(e)}") from e

        logger.info(f"Saved {len(venues)} learned venues to {self.path}")

class VenueDirectory:
    """Venue name to coordinates lookup with runtime learning."""

    def __init__(
        self,
        static_venues: Optional[Mapping[str, Tuple[float, float]]] = None,
        geocoder=None,
        store: Optional[LearnedVenueStore] = None
    ):
        """
        Initialize the directory.

        Args:
            static_venues: Curated {name: (lat, lng)} table (defaults to VENUE_MAP)
            geocoder: Optional async geocoder used for backfill
            store: Optional persistence for learned venues
        """
        self.geocoder = geocoder
        self.store = store
        self._static: Dict[str, Coordinates] = {}
        self._learned: Dict[str, Coordinates] = {}
        self._unsaved = 0

        for name, (lat, lng) in (VENUE_MAP if static_venues is None else static_venues).items():
            key = normalize_venue_key(name)
            if key and key not in self._static:
                self._static[key] = Coordinates(lat=lat, lng=lng)

    @property
    def learned_count(self) -> int:
        return len(self._learned)

    @property
    def unsaved_count(self) -> int:
        """Venues learned since the last successful save."""
        return self._unsaved

    def lookup(self, name: Optional[str]) -> Optional[Coordinates]:
        key = normalize_venue_key(name)
        if not key:
            return None
        return self._static.get(key) or self._learned.get(key)

    def learn(self, name: Optional[str], lat: Optional[float], lng: Optional[float]) -> bool:
        """
        Record a venue's coordinates if it is not already known.

        Returns:
            True if a new venue was learned
        """
        key = normalize_venue_key(name)
        if not key or not _valid_coordinate(lat) or not _valid_coordinate(lng):
            return False
        if key in self._static or key in self._learned:
            return False

        self._learned[key] = Coordinates(lat=lat, lng=lng)
        self._unsaved += 1
        logger.debug(f"Learned venue '{name}' at ({lat:.4f}, {lng:.4f})")
        return True

    def export_learned(self) -> Dict[str, Dict[str, float]]:
        return {key: {'lat': c.lat, 'lng': c.lng} for key, c in self._learned.items()}

    def import_learned(self, data: Mapping[str, Mapping[str, float]]) -> int:
        """
        Merge previously learned venues. Static entries and existing learned
        entries are kept; malformed entries are skipped.

        Returns:
            Number of entries imported
        """
        imported = 0
        for name, value in data.items():
            if not isinstance(value, Mapping):
                continue
            key = normalize_venue_key(name)
            lat, lng = value.get('lat'), value.get('lng')
            if not key or not _valid_coordinate(lat) or not _valid_coordinate(lng):
                continue
            if key in self._static or key in self._learned:
                continue
            self._learned[key] = Coordinates(lat=lat, lng=lng)
            imported += 1
        return imported

    def load(self) -> int:
        """Load learned venues from the store (call once at startup)."""
        if self.store is None:
            return 0
        imported = self.import_learned(self.store.load())
        logger.info(f"Loaded {imported} learned venues")
        return imported

    def save(self) -> bool:
        """
        Persist the learned set if anything new was learned.

        Raises:
            PersistenceFailure: If the store cannot be written
        """
        if self.store is None or self._unsaved == 0:
            return False
        self.store.save(self.export_learned())
        self._unsaved = 0
        return True

    async def geocode(
        self,
        name: Optional[str],
        address: Optional[str] = None,
        hint: Optional[str] = None
    ) -> Optional[Coordinates]:
        """Geocode a venue and learn it on success."""
        if self.geocoder is None or not settings.GEOCODER_ENABLED:
            return None
        coords = await self.geocoder.geocode(name, address, hint=hint)
        if coords is not None:
            self.learn(name or address, coords.lat, coords.lng)
        return coords

    async def backfill_neighborhoods(self, events: Iterable[CanonicalEvent]) -> int:
        """
        Resolve neighborhoods for events that still lack one.

        The venue table is consulted first (it may have learned the venue
        earlier in this pass), then the geocoder. Each distinct venue is
        geocoded at most once per pass.

        Returns:
            Number of successful geocoder calls
        """
        geocoded = 0
        attempted = set()

        for event in events:
            if event.neighborhood or not (event.venue_name or event.venue_address):
                continue

            coords = self.lookup(event.venue_name)
            if coords is None:
                query_key = (
                    normalize_venue_key(event.venue_name),
                    (event.venue_address or '').strip().lower()
                )
                if query_key in attempted:
                    continue
                attempted.add(query_key)

                coords = await self.geocode(
                    event.venue_name, event.venue_address, hint=event.neighborhood_hint
                )
                if coords is None:
                    continue
                geocoded += 1

            if not event.has_coordinates:
                event.latitude = coords.lat
                event.longitude = coords.lng
            event.neighborhood = nearest_neighborhood(coords.lat, coords.lng)

        if geocoded:
            logger.info(f"Backfill geocoded {geocoded} venues")
        return geocoded
