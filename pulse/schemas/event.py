"""
Event schema definitions.
"""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

class Coordinates(BaseModel):
    """Latitude/longitude pair."""
    lat: float
    lng: float

    model_config = ConfigDict(frozen=True)

class CandidateEvent(BaseModel):
    """Raw event as returned by a source adapter, before ID assignment."""
    name: Optional[str] = None
    description_short: Optional[str] = None

    # Venue information
    venue_name: Optional[str] = None
    venue_address: Optional[str] = None
    neighborhood_hint: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Timing (ISO-8601; values without an offset are NYC civil time)
    start_time_local: Optional[str] = None
    end_time_local: Optional[str] = None
    date_local: Optional[str] = None
    time_window: Optional[str] = None

    # Price and category
    is_free: bool = False
    price_display: Optional[str] = None
    category: str = "other"
    subcategory: Optional[str] = None
    confidence: float = 0.5

    # Source information
    source_name: str = ""
    source_type: str = ""
    source_weight: float = 0.5
    ticket_url: Optional[str] = None
    source_url: Optional[str] = None
    map_hint: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def has_coordinates(self) -> bool:
        return (
            self.latitude is not None and self.longitude is not None
            and not math.isnan(self.latitude) and not math.isnan(self.longitude)
        )

class CanonicalEvent(CandidateEvent):
    """Deduplicated, ID-assigned, geo-resolved event held in the cache."""
    id: str = Field(min_length=12, max_length=12)
    neighborhood: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
