"""
Source registry.

Merge order is fixed by configuration (weight descending, then merge rank,
then label) and never by adapter completion order.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from pulse.schemas.source import SourceSpec
from pulse.utils.errors import SourceConfigError

logger = logging.getLogger(__name__)

SOURCES: List[SourceSpec] = [
    SourceSpec(label='Skint', weight=0.9, merge_rank=0, endpoint='https://theskint.com/'),
    SourceSpec(label='NonsenseNYC', weight=0.9, merge_rank=1, endpoint='https://nonsensenyc.com/',
               source_type='newsletter'),
    SourceSpec(label='RA', weight=0.85, merge_rank=0, endpoint='https://ra.co/'),
    SourceSpec(label='OhMyRockness', weight=0.85, merge_rank=1, endpoint='https://www.ohmyrockness.com/shows'),
    SourceSpec(label='Dice', weight=0.8, merge_rank=0, endpoint='https://dice.fm/browse/new-york'),
    SourceSpec(label='BrooklynVegan', weight=0.8, merge_rank=1, endpoint='https://www.brooklynvegan.com/'),
    SourceSpec(label='BAM', weight=0.8, merge_rank=2,
               endpoint='https://www.bam.org/api/BAMApi/GetCalendarEventsByDayWithOnGoing'),
    SourceSpec(label='SmallsLIVE', weight=0.8, merge_rank=3, endpoint='https://www.smallslive.com/events/today'),
    SourceSpec(label='NYCParks', weight=0.75, merge_rank=0, endpoint='https://www.nycgovparks.org/events'),
    SourceSpec(label='DoNYC', weight=0.75, merge_rank=1, endpoint='https://donyc.com/events/today'),
    SourceSpec(label='Songkick', weight=0.75, merge_rank=2,
               endpoint='https://www.songkick.com/metro-areas/7644-us-new-york/today'),
    SourceSpec(label='Eventbrite', weight=0.7, merge_rank=0,
               endpoint='https://www.eventbrite.com/d/ny--new-york/events--today/'),
    SourceSpec(label='NYPL', weight=0.7, merge_rank=1,
               endpoint='https://www.eventbrite.com/o/new-york-public-library-for-the-performing-arts-5993389089'),
    SourceSpec(label='EventbriteComedy', weight=0.7, merge_rank=2),
    SourceSpec(label='EventbriteArts', weight=0.7, merge_rank=3),
    SourceSpec(label='Tavily', weight=0.6, merge_rank=0, source_type='search'),
]

def validate_sources(sources: Optional[Iterable[SourceSpec]] = None) -> List[SourceSpec]:
    """
    Validate a source registry.

    Raises:
        SourceConfigError: On a missing label, duplicate label, or weight
            outside (0, 1]
    """
    specs = list(SOURCES if sources is None else sources)
    seen = set()
    for spec in specs:
        if not spec.label or not spec.label.strip():
            raise SourceConfigError("Source registry entry has no label")
        if spec.label in seen:
            raise SourceConfigError(f"Duplicate source label '{spec.label}'")
        if not 0 < spec.weight <= 1:
            raise SourceConfigError(
                f"Source '{spec.label}' has weight {spec.weight}, expected a value in (0, 1]"
            )
        seen.add(spec.label)
    return specs

def merge_order(sources: Optional[Sequence[SourceSpec]] = None) -> List[SourceSpec]:
    """Sources sorted by weight desc, merge_rank asc, label asc."""
    specs = SOURCES if sources is None else sources
    return sorted(specs, key=lambda s: (-s.weight, s.merge_rank, s.label))

def get_source(label: str, sources: Optional[Sequence[SourceSpec]] = None) -> Optional[SourceSpec]:
    for spec in (SOURCES if sources is None else sources):
        if spec.label == label:
            return spec
    return None
