"""Source registry, adapter result and health schemas."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pulse.schemas.event import CandidateEvent

class SourceStatus(str, Enum):
    """Outcome of one adapter run"""
    OK = "ok"
    EMPTY = "empty"
    ERROR = "error"
    TIMEOUT = "timeout"

    @property
    def is_failure(self) -> bool:
        return self in (SourceStatus.ERROR, SourceStatus.TIMEOUT)

class SourceSpec(BaseModel):
    """Registry entry for one event source."""
    label: str = Field(description="Unique source label, e.g. 'Dice'")
    weight: float = Field(description="Trust weight in (0, 1], higher merges first")
    merge_rank: int = Field(default=0, description="Tie-break among equal weights")
    endpoint: Optional[str] = Field(default=None, description="Canonical URL for reachability probes")
    source_type: str = Field(default="scraper", description="Source type tag")

    model_config = ConfigDict(frozen=True)

class AdapterResult(BaseModel):
    """What every wrapped adapter call produces, whatever the adapter did."""
    events: List[CandidateEvent] = Field(default_factory=list)
    duration_ms: int = 0
    status: SourceStatus = SourceStatus.EMPTY
    error: Optional[str] = None

class HealthHistoryEntry(BaseModel):
    """One run in a source's rolling history."""
    timestamp: datetime
    count: int
    duration_ms: Optional[int] = None
    status: SourceStatus

class SourceHealth(BaseModel):
    """Rolling operational status for one source."""
    consecutive_zeros: int = 0
    last_count: int = 0
    last_status: Optional[SourceStatus] = None
    last_error: Optional[str] = None
    last_http_status: Optional[int] = None
    last_duration_ms: Optional[int] = None
    last_scrape_at: Optional[datetime] = None
    total_scrapes: int = 0
    total_successes: int = 0
    history: List[HealthHistoryEntry] = Field(default_factory=list)

    @property
    def success_rate(self) -> Optional[float]:
        if self.total_scrapes == 0:
            return None
        return self.total_successes / self.total_scrapes

class ScrapeStats(BaseModel):
    """Scrape-level metrics for the last completed cycle."""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_duration_ms: Optional[int] = None
    total_events: int = 0
    deduped_events: int = 0
    sources_ok: int = 0
    sources_failed: int = 0
    sources_empty: int = 0
    geocoded: int = 0
    venues_learned: int = 0
