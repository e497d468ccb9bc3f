"""
Utility functions for event identity and cross-source deduplication.

IDs are derived from the normalized event name, venue and date only, so the
same show listed by two sources collapses to a single ID. The source is
folded in only when all three are empty.
"""

import hashlib
import logging
import re
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from pulse.schemas.event import CandidateEvent, CanonicalEvent
from pulse.schemas.source import SourceSpec
from pulse.services.location_services import (
    ResolutionStrategy,
    default_strategies,
    get_event_date,
    resolve_event_neighborhood,
)

logger = logging.getLogger(__name__)

ID_LENGTH = 12

# Parentheticals that open with a ticketing/admin status keyword, whatever
# follows it ("(Sold Out!)", "(18+ Only)"). Anything else in parentheses
# (set times, "Early Show") is kept.
_NOISE_PARENTHETICAL = re.compile(
    r'\s*\(\s*(?:'
    r'sold[\s-]*out|free|'
    r'\d{1,2}\s*\+|all[\s-]*ages|ages\s*\d{1,2}\s*\+?|'
    r'cancell?ed|postponed|rescheduled|new date|moved|'
    r'low tickets|few tickets left|limited tickets|waitlist|'
    r'rsvp|tickets?|on sale now'
    r')(?!\w)[^)]*\)\s*',
    re.IGNORECASE,
)
_AND_FRIENDS = re.compile(r'\s*&\s*(?:friends|more|guests)\b.*', re.IGNORECASE)
_FEATURING = re.compile(r'(?:\b(?:ft|feat|featuring|with)\b|\bw/).*', re.IGNORECASE)
_PUNCTUATION = re.compile(r'[^\w\s]')
_WHITESPACE = re.compile(r'\s+')

def normalize_event_name(name: Optional[str]) -> str:
    """
    Normalize an event name for hashing (never for display).

    Args:
        name: Raw event name

    Returns:
        Lowercased name with status parentheticals, "& Friends" suffixes,
        featured-artist tails and punctuation removed
    """
    text = (name or '').lower()
    text = _NOISE_PARENTHETICAL.sub(' ', text)
    text = _AND_FRIENDS.sub('', text)
    text = _FEATURING.sub('', text)
    text = _PUNCTUATION.sub('', text)
    return _WHITESPACE.sub(' ', text).strip()

def make_event_id(
    name: Optional[str],
    venue: Optional[str],
    date: Optional[str],
    source: Optional[str] = None,
    url: Optional[str] = None
) -> str:
    """
    Generate a stable event ID from name + venue + date.

    Args:
        name: Event name
        venue: Venue name
        date: Event date (YYYY-MM-DD) or start time
        source: Source label, used only when name/venue/date are all empty
        url: Optional URL, used alongside source in the empty case

    Returns:
        12 character hex ID
    """
    norm_name = normalize_event_name(name)
    norm_venue = (venue or '').lower().strip()
    norm_date = (date or '').strip()

    if norm_name or norm_venue or norm_date:
        raw = f"{norm_name}|{norm_venue}|{norm_date}"
    else:
        raw = f"__empty__|{(source or '').strip()}|{(url or '').strip()}"

    return hashlib.md5(raw.encode('utf-8')).hexdigest()[:ID_LENGTH]

def dedupe_in_priority_order(
    batches: Iterable[Sequence[CanonicalEvent]]
) -> Tuple[List[CanonicalEvent], int]:
    """
    Merge per-source batches, keeping the first event seen for each ID.

    Args:
        batches: Event batches, highest priority first

    Returns:
        Tuple of (merged events, total raw events seen)
    """
    merged: List[CanonicalEvent] = []
    seen: Set[str] = set()
    total_raw = 0

    for batch in batches:
        total_raw += len(batch)
        for event in batch:
            if event.id in seen:
                continue
            seen.add(event.id)
            merged.append(event)

    if total_raw:
        logger.debug(f"Deduplicated {total_raw} raw events to {len(merged)}")
    return merged, total_raw

def normalize_candidate(
    candidate: CandidateEvent,
    spec: SourceSpec,
    venues,
    strategies: Optional[Sequence[ResolutionStrategy]] = None
) -> CanonicalEvent:
    """
    Turn an adapter candidate into a canonical, ID-assigned event.

    Args:
        candidate: Raw event from an adapter
        spec: Registry entry of the source that produced it
        venues: Venue directory used for coordinates and resolution
        strategies: Neighborhood resolution chain (defaults to coordinates,
            venue table, then text hint)

    Returns:
        CanonicalEvent carrying the registry weight and a resolved
        neighborhood (or None)
    """
    event_date = get_event_date(candidate)
    event_id = make_event_id(
        candidate.name,
        candidate.venue_name,
        event_date,
        source=spec.label,
        url=candidate.source_url or candidate.ticket_url,
    )

    data = candidate.model_dump()
    data.update(
        id=event_id,
        source_name=candidate.source_name or spec.label,
        source_type=spec.source_type,
        source_weight=spec.weight,
    )

    if not candidate.has_coordinates:
        coords = venues.lookup(candidate.venue_name)
        if coords is not None:
            data['latitude'] = coords.lat
            data['longitude'] = coords.lng

    event = CanonicalEvent(**data)
    chain = strategies if strategies is not None else default_strategies(venues)
    event.neighborhood = resolve_event_neighborhood(event, chain)
    return event
