"""Test configuration and fixtures."""

import asyncio
import os
from typing import Dict, List, Optional

# Settings are read at import time
os.environ["LOG_TO_FILE"] = "false"
os.environ["ENDPOINT_CHECKS_ENABLED"] = "false"
os.environ["GEOCODER_ENABLED"] = "true"

import pytest
from datetime import datetime

from pulse.schemas.event import CandidateEvent, Coordinates
from pulse.services.location_services import NYC_TZ
from pulse.services.venue_directory import VenueDirectory

# Monday 2026-10-19, 8 PM in New York (EDT)
NOW = NYC_TZ.localize(datetime(2026, 10, 19, 20, 0))
TODAY = "2026-10-19"
TOMORROW = "2026-10-20"

class FakeAdapter:
    """Adapter double with a call counter."""

    def __init__(
        self,
        name: str,
        events: Optional[List[CandidateEvent]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        weight: float = 0.5,
        source_type: str = "scraper"
    ):
        self.name = name
        self.events = events or []
        self.error = error
        self.delay = delay
        self.weight = weight
        self.source_type = source_type
        self.calls = 0

    async def fetch(self) -> List[CandidateEvent]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return [e.model_copy() for e in self.events]

class FakeGeocoder:
    """Geocoder double answering from a fixed table."""

    def __init__(self, results: Optional[Dict[str, Coordinates]] = None):
        self.results = results or {}
        self.calls: List[str] = []

    async def geocode(self, name, address=None, hint=None):
        self.calls.append(name)
        return self.results.get(name)

class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

@pytest.fixture
def make_event():
    """Factory for candidate events."""
    def _make(name="Jazz Night", venue_name="Smalls Jazz Club", **kwargs):
        return CandidateEvent(name=name, venue_name=venue_name, **kwargs)
    return _make

@pytest.fixture
def venues():
    """Venue directory with only the static table loaded."""
    return VenueDirectory()

@pytest.fixture
def fake_clock():
    """Fake monotonic clock starting at zero."""
    return FakeClock()
