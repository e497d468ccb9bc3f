"""
Location and time helpers for resolving, filtering and ranking NYC events.

Every time value without an explicit offset is interpreted as New York civil
time. Neighborhood distances are measured between neighborhood centroids,
never between raw event coordinates and the target.
"""

import logging
import re
from datetime import datetime, timedelta
from math import radians, sin, cos, sqrt, atan2
from typing import List, Optional, Protocol, Sequence, Tuple, TypeVar

import pytz

from pulse.core.config import settings
from pulse.schemas.event import CandidateEvent
from pulse.services.neighborhoods import (
    NEIGHBORHOODS,
    is_borough,
    match_alias,
)

logger = logging.getLogger(__name__)

# Constants
EARTH_RADIUS_KM = 6371.0
NYC_TZ = pytz.timezone("America/New_York")
LATE_NIGHT_CUTOFF_MINUTES = 6 * 60

_DATE_ONLY = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_HAS_CLOCK_TIME = re.compile(r'T\d{2}:')
_HHMM = re.compile(r'^(\d{2}):(\d{2})$')

E = TypeVar('E', bound=CandidateEvent)

def haversine(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometers."""
    dlat = radians(lat2 - lat1)
    dlng = radians(lng2 - lng1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * atan2(sqrt(a), sqrt(1 - a))

def nearest_neighborhood(
    lat: float,
    lng: float,
    max_distance_km: Optional[float] = None
) -> Optional[str]:
    """
    Find the neighborhood whose centroid is closest to a point.

    Args:
        lat: Latitude
        lng: Longitude
        max_distance_km: Match radius (defaults to NEIGHBORHOOD_MATCH_RADIUS_KM)

    Returns:
        Neighborhood name, or None when nothing is strictly within the radius
    """
    limit = settings.NEIGHBORHOOD_MATCH_RADIUS_KM if max_distance_km is None else max_distance_km
    nearest = None
    nearest_dist = float('inf')
    for name, data in NEIGHBORHOODS.items():
        dist = haversine(lat, lng, data['lat'], data['lng'])
        if dist < nearest_dist:
            nearest_dist = dist
            nearest = name
    return nearest if nearest_dist < limit else None

def _valid_point(lat: Optional[float], lng: Optional[float]) -> bool:
    return (
        lat is not None and lng is not None
        and lat == lat and lng == lng  # NaN check
    )

def resolve_neighborhood(
    text_hint: Optional[str],
    lat: Optional[float] = None,
    lng: Optional[float] = None
) -> Optional[str]:
    """
    Map a locality hint and/or coordinates to one known neighborhood.

    An exact name or alias match wins outright. Otherwise the nearest
    centroid within the match radius is used. A bare borough name never
    resolves to a neighborhood.

    Args:
        text_hint: Free-text locality, e.g. "LES" or "Brooklyn"
        lat: Optional latitude
        lng: Optional longitude

    Returns:
        Neighborhood name or None
    """
    matched = match_alias(text_hint)
    if matched:
        return matched

    if _valid_point(lat, lng):
        nearest = nearest_neighborhood(lat, lng)
        if nearest:
            return nearest

    if is_borough(text_hint):
        logger.debug(f"Hint '{text_hint}' is a borough, leaving neighborhood unresolved")
    return None

class ResolutionStrategy(Protocol):
    """One step of the event-level neighborhood fallback chain."""

    def resolve(self, event: CandidateEvent) -> Optional[str]:
        ...

class ExplicitCoordinatesStrategy:
    """Resolve from coordinates the source supplied itself."""

    def resolve(self, event: CandidateEvent) -> Optional[str]:
        if not event.has_coordinates:
            return None
        return nearest_neighborhood(event.latitude, event.longitude)

class VenueTableStrategy:
    """Resolve from the venue directory (static table first, then learned)."""

    def __init__(self, venues):
        self.venues = venues

    def resolve(self, event: CandidateEvent) -> Optional[str]:
        coords = self.venues.lookup(event.venue_name)
        if coords is None:
            return None
        return nearest_neighborhood(coords.lat, coords.lng)

class TextHintStrategy:
    """Resolve from the free-text neighborhood hint alone."""

    def resolve(self, event: CandidateEvent) -> Optional[str]:
        return resolve_neighborhood(event.neighborhood_hint)

def default_strategies(venues) -> List[ResolutionStrategy]:
    return [
        ExplicitCoordinatesStrategy(),
        VenueTableStrategy(venues),
        TextHintStrategy(),
    ]

def resolve_event_neighborhood(
    event: CandidateEvent,
    strategies: Sequence[ResolutionStrategy]
) -> Optional[str]:
    """Run the strategy chain and return the first neighborhood found."""
    for strategy in strategies:
        name = strategy.resolve(event)
        if name:
            return name
    return None

def _nyc_now(now: Optional[datetime] = None) -> datetime:
    if now is None:
        return datetime.now(NYC_TZ)
    if now.tzinfo is None:
        return NYC_TZ.localize(now)
    return now.astimezone(NYC_TZ)

def get_nyc_date_string(day_offset: int = 0, now: Optional[datetime] = None) -> str:
    """
    Get today's (or today + offset) NYC date as YYYY-MM-DD.

    Calendar-day arithmetic, so fall-back days never land on the wrong date.
    """
    today = _nyc_now(now).date()
    return (today + timedelta(days=day_offset)).isoformat()

def parse_as_nyc_time(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware NYC datetime.

    Values without an offset are New York civil time. Returns None for empty
    or unparseable input.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return NYC_TZ.localize(parsed)
    return parsed.astimezone(NYC_TZ)

def _parse_clock_time(value: Optional[str]) -> Optional[datetime]:
    """Parse only values that carry a time of day, not bare dates."""
    if not value or not _HAS_CLOCK_TIME.search(value):
        return None
    return parse_as_nyc_time(value)

def get_event_date(event: CandidateEvent) -> Optional[str]:
    """NYC calendar date (YYYY-MM-DD) from date_local or start_time_local."""
    if event.date_local:
        return event.date_local.strip()[:10]
    if not event.start_time_local:
        return None
    if _DATE_ONLY.match(event.start_time_local.strip()):
        return event.start_time_local.strip()
    parsed = parse_as_nyc_time(event.start_time_local)
    if parsed:
        return parsed.date().isoformat()
    return None

def filter_upcoming_events(
    events: Sequence[E],
    now: Optional[datetime] = None,
    grace_hours: Optional[float] = None
) -> List[E]:
    """
    Drop events that have most likely already ended.

    Args:
        events: Events to filter
        now: Reference time (defaults to the current time)
        grace_hours: How long after its start an event is still live

    Returns:
        Events that are still happening or have not started
    """
    current = _nyc_now(now)
    grace = settings.UPCOMING_GRACE_HOURS if grace_hours is None else grace_hours
    grace_start = current - timedelta(hours=grace)
    today = current.date().isoformat()

    kept = []
    for event in events:
        end = _parse_clock_time(event.end_time_local)
        if end is not None and end > current:
            kept.append(event)
            continue

        start = _parse_clock_time(event.start_time_local)
        if start is not None:
            if start > current:
                kept.append(event)
            elif start > grace_start and end is None:
                kept.append(event)
            continue

        if end is not None:
            # Only an end time, and it has passed
            continue

        event_date = get_event_date(event)
        if event_date and event_date < today:
            continue
        kept.append(event)

    return kept

def _date_tier(event: CandidateEvent, today: str, tomorrow: str) -> int:
    event_date = get_event_date(event)
    if not event_date or event_date == today:
        return 0
    if event_date == tomorrow:
        return 1
    return 2

def rank_events_by_proximity(
    events: Sequence[E],
    target: Optional[str],
    now: Optional[datetime] = None,
    max_distance_km: Optional[float] = None
) -> List[E]:
    """
    Rank events for a target neighborhood.

    Sort key is (date tier, centroid distance): today/undated before
    tomorrow before later, nearest first within a tier. Events beyond the
    cutoff or without a resolved neighborhood are excluded.

    Args:
        events: Events to rank
        target: Target neighborhood name or alias; None passes events through
        now: Reference time for date tiers
        max_distance_km: Hard distance cutoff

    Returns:
        Ranked events
    """
    if not target:
        return list(events)

    target_name = match_alias(target)
    if not target_name:
        logger.warning(f"Unknown target neighborhood '{target}', skipping proximity ranking")
        return list(events)

    cutoff = settings.PROXIMITY_CUTOFF_KM if max_distance_km is None else max_distance_km
    target_data = NEIGHBORHOODS[target_name]
    today = get_nyc_date_string(0, now)
    tomorrow = get_nyc_date_string(1, now)

    scored: List[Tuple[int, float, E]] = []
    for event in events:
        hood = match_alias(getattr(event, 'neighborhood', None))
        if not hood:
            continue
        hood_data = NEIGHBORHOODS[hood]
        dist = haversine(target_data['lat'], target_data['lng'], hood_data['lat'], hood_data['lng'])
        if dist > cutoff:
            continue
        scored.append((_date_tier(event, today, tomorrow), dist, event))

    scored.sort(key=lambda item: (item[0], item[1]))
    return [event for _, _, event in scored]

def filter_by_time_after(events: Sequence[E], time_after: Optional[str]) -> List[E]:
    """
    Keep events starting at or after HH:MM (NYC time).

    Early-morning starts count as late night, so 01:00 passes a 22:00 filter.
    Events without a clock time are kept. When nothing matches, the input
    is returned unchanged.
    """
    match = _HHMM.match(time_after or '')
    if not match:
        return list(events)

    threshold = int(match.group(1)) * 60 + int(match.group(2))
    if threshold < LATE_NIGHT_CUTOFF_MINUTES:
        threshold += 24 * 60

    filtered = []
    for event in events:
        start = _parse_clock_time(event.start_time_local)
        if start is None:
            filtered.append(event)
            continue
        minutes = start.hour * 60 + start.minute
        if minutes < LATE_NIGHT_CUTOFF_MINUTES:
            minutes += 24 * 60
        if minutes >= threshold:
            filtered.append(event)

    return filtered if filtered else list(events)

_CATEGORY_PATTERNS = [
    ('comedy', re.compile(r'\b(comedy|stand-?up|improv|open mic)\b')),
    ('art', re.compile(r'\b(gallery|exhibit|art show|opening reception|installation)\b')),
    ('nightlife', re.compile(r'\b(dj|dance party|club night|rave|techno|house music)\b')),
    ('live_music', re.compile(r'\b(concert|live music|band|singer|songwriter|jazz|acoustic)\b')),
    ('theater', re.compile(r'\b(theater|theatre|musical|play|performance|broadway)\b')),
    ('food_drink', re.compile(r'\b(food|tasting|wine|beer|cocktail|brunch|dinner)\b')),
    ('community', re.compile(r'\b(workshop|class|meetup|volunteer|community|market|fair|festival)\b')),
]

def infer_category(text: Optional[str]) -> str:
    """Guess an event category from its name and description."""
    lowered = (text or '').lower()
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(lowered):
            return category
    return 'other'

