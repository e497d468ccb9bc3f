"""
Schema package initialization.
"""

from pulse.schemas.event import CandidateEvent, CanonicalEvent, Coordinates
from pulse.schemas.source import (
    AdapterResult,
    HealthHistoryEntry,
    ScrapeStats,
    SourceHealth,
    SourceSpec,
    SourceStatus,
)

__all__ = [
    'CandidateEvent',
    'CanonicalEvent',
    'Coordinates',
    'AdapterResult',
    'HealthHistoryEntry',
    'ScrapeStats',
    'SourceHealth',
    'SourceSpec',
    'SourceStatus',
]
