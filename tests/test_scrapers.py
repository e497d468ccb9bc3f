"""Tests for source adapters and the source registry."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from pulse.schemas.event import CandidateEvent
from pulse.schemas.source import SourceSpec, SourceStatus
from pulse.scrapers.base import BaseSourceAdapter, ExtractionAdapter, check_endpoint
from pulse.scrapers.jsonld import JsonLdAdapter
from pulse.scrapers.registry import SOURCES, get_source, merge_order, validate_sources
from pulse.utils.errors import AdapterFailure, SourceConfigError

SMALLS_EVENT = {
    "@context": "https://schema.org",
    "@type": "MusicEvent",
    "name": "Late Set &amp; Jam",
    "description": "Jazz trio   followed by an open jam.",
    "startDate": "2026-10-19T22:30:00-04:00",
    "location": {
        "@type": "Place",
        "name": "Smalls Jazz Club",
        "address": {
            "@type": "PostalAddress",
            "streetAddress": "183 W 10th St",
            "addressLocality": "New York",
            "addressRegion": "NY",
            "postalCode": "10014",
        },
    },
    "offers": {"@type": "Offer", "price": "25", "priceCurrency": "USD"},
    "url": "https://www.smallslive.com/events/1",
}

GRAPH_PAYLOAD = {
    "@graph": [
        {"@type": "WebPage", "name": "Listings"},
        {
            "@type": "Event",
            "name": "Sunset Yoga",
            "startDate": "2026-10-19",
            "location": {
                "name": "Domino Park",
                "geo": {"latitude": "40.7145", "longitude": "-73.9680"},
            },
            "offers": [{"price": 0}],
        },
    ]
}

def _page(*blocks):
    scripts = "".join(
        f'<script type="application/ld+json">{block}</script>' for block in blocks
    )
    return f"<html><head>{scripts}</head><body></body></html>"

class StubAdapter(BaseSourceAdapter):
    name = "Stub"

    def __init__(self, result=None, error=None, delay=0.0, **kwargs):
        super().__init__(**kwargs)
        self.result = result or []
        self.error = error
        self.delay = delay

    async def fetch_events(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result

class TestJsonLd:
    @pytest.fixture
    def adapter(self):
        return JsonLdAdapter(name="SmallsLIVE", url="https://www.smallslive.com/events/today", weight=0.8)

    def test_parses_events(self, adapter):
        page = _page(json.dumps(SMALLS_EVENT), json.dumps(GRAPH_PAYLOAD), "{not valid json")

        events = adapter.parse(page)

        assert [e.name for e in events] == ["Late Set & Jam", "Sunset Yoga"]
        smalls, yoga = events
        assert smalls.venue_name == "Smalls Jazz Club"
        assert smalls.venue_address == "183 W 10th St, New York, NY, 10014"
        assert smalls.neighborhood_hint == "New York"
        assert smalls.price_display == "$25"
        assert smalls.is_free is False
        assert smalls.category == "live_music"
        assert smalls.description_short == "Jazz trio followed by an open jam."
        assert smalls.ticket_url == "https://www.smallslive.com/events/1"
        assert smalls.source_weight == 0.8
        assert smalls.source_type == "jsonld"

        assert yoga.is_free is True
        assert yoga.price_display == "free"
        assert yoga.latitude == pytest.approx(40.7145)
        assert yoga.longitude == pytest.approx(-73.9680)

    def test_item_list(self, adapter):
        payload = {
            "@type": "ItemList",
            "itemListElement": [
                {"@type": "ListItem", "position": 1, "item": {"@type": "ComedyEvent", "name": "Open Mic"}},
                {"@type": "ListItem", "position": 2, "item": {"@type": "Event"}},
            ],
        }
        events = adapter.parse(_page(json.dumps(payload)))
        assert [e.name for e in events] == ["Open Mic"]

    def test_page_without_json_ld(self, adapter):
        assert adapter.parse("<html><body>Nothing tonight</body></html>") == []

    @pytest.mark.asyncio
    async def test_fetch_events(self, adapter):
        with patch.object(adapter, "fetch_text", AsyncMock(return_value=_page(json.dumps(SMALLS_EVENT)))):
            events = await adapter.fetch()

        assert len(events) == 1
        assert events[0].source_name == "SmallsLIVE"
        assert adapter.last_status == SourceStatus.OK

class TestFetchWrapper:
    @pytest.mark.asyncio
    async def test_ok(self):
        adapter = StubAdapter(result=[CandidateEvent(name="Show"), "not an event"])
        events = await adapter.fetch()

        assert [e.name for e in events] == ["Show"]
        assert events[0].source_name == "Stub"
        assert adapter.last_status == SourceStatus.OK
        assert adapter.last_error is None

    @pytest.mark.asyncio
    async def test_empty(self):
        adapter = StubAdapter()
        assert await adapter.fetch() == []
        assert adapter.last_status == SourceStatus.EMPTY

    @pytest.mark.asyncio
    async def test_http_failure(self):
        adapter = StubAdapter(error=AdapterFailure("Stub", "HTTP 503 from https://example.com", 503))
        assert await adapter.fetch() == []
        assert adapter.last_status == SourceStatus.ERROR
        assert adapter.last_http_status == 503
        assert "HTTP 503" in adapter.last_error

    @pytest.mark.asyncio
    async def test_unexpected_exception(self):
        adapter = StubAdapter(error=RuntimeError("layout changed"))
        assert await adapter.fetch() == []
        assert adapter.last_status == SourceStatus.ERROR
        assert adapter.last_error == "RuntimeError: layout changed"

    @pytest.mark.asyncio
    async def test_timeout(self):
        adapter = StubAdapter(delay=1.0, timeout=0.05)
        assert await adapter.fetch() == []
        assert adapter.last_status == SourceStatus.TIMEOUT

    @pytest.mark.asyncio
    async def test_status_resets_between_runs(self):
        adapter = StubAdapter(error=RuntimeError("flaky"))
        await adapter.fetch()
        adapter.error = None
        adapter.result = [CandidateEvent(name="Back")]
        await adapter.fetch()
        assert adapter.last_status == SourceStatus.OK
        assert adapter.last_error is None

    @pytest.mark.parametrize("weight", [0, -0.5, 1.2])
    def test_rejects_bad_weight(self, weight):
        with pytest.raises(ValueError):
            StubAdapter(weight=weight)

class TestExtractionAdapter:
    @pytest.mark.asyncio
    async def test_sync_extractor(self):
        def extract(raw_text, source_name, source_url):
            return [CandidateEvent(name=line) for line in raw_text.splitlines() if line]

        adapter = ExtractionAdapter("Skint", "https://theskint.com/", extract, weight=0.9)
        with patch.object(adapter, "fetch_text", AsyncMock(return_value="Free Jazz\nPoetry Slam\n")):
            events = await adapter.fetch()

        assert [e.name for e in events] == ["Free Jazz", "Poetry Slam"]
        assert adapter.source_type == "extraction"

    @pytest.mark.asyncio
    async def test_async_extractor(self):
        extract = AsyncMock(return_value=[CandidateEvent(name="Rooftop Party")])
        adapter = ExtractionAdapter("NonsenseNYC", "https://nonsensenyc.com/", extract)
        with patch.object(adapter, "fetch_text", AsyncMock(return_value="raw newsletter")):
            events = await adapter.fetch()

        assert [e.name for e in events] == ["Rooftop Party"]
        extract.assert_awaited_once_with("raw newsletter", "NonsenseNYC", "https://nonsensenyc.com/")

    @pytest.mark.asyncio
    async def test_blank_page_skips_extractor(self):
        extract = AsyncMock()
        adapter = ExtractionAdapter("Skint", "https://theskint.com/", extract)
        with patch.object(adapter, "fetch_text", AsyncMock(return_value="   ")):
            assert await adapter.fetch() == []
        extract.assert_not_called()
        assert adapter.last_status == SourceStatus.EMPTY

    @pytest.mark.asyncio
    async def test_extractor_failure(self):
        def extract(raw_text, source_name, source_url):
            raise KeyError("events")

        adapter = ExtractionAdapter("Skint", "https://theskint.com/", extract)
        with patch.object(adapter, "fetch_text", AsyncMock(return_value="raw")):
            assert await adapter.fetch() == []
        assert adapter.last_status == SourceStatus.ERROR
        assert "extraction failed" in adapter.last_error

class TestRegistry:
    def test_default_registry_is_valid(self):
        specs = validate_sources()
        assert len(specs) == 16
        assert len({s.label for s in specs}) == 16

    def test_merge_order(self):
        """Test merge order follows weight, then rank, then label"""
        ordered = [s.label for s in merge_order()]
        assert ordered[:3] == ["Skint", "NonsenseNYC", "RA"]
        assert ordered[-1] == "Tavily"
        assert ordered == [s.label for s in SOURCES]

    def test_merge_order_ties_by_label(self):
        specs = [
            SourceSpec(label="Zed", weight=0.7),
            SourceSpec(label="Alpha", weight=0.7),
            SourceSpec(label="Top", weight=0.9, merge_rank=5),
        ]
        assert [s.label for s in merge_order(specs)] == ["Top", "Alpha", "Zed"]

    @pytest.mark.parametrize("specs", [
        [SourceSpec(label="Dice", weight=0.8), SourceSpec(label="Dice", weight=0.7)],
        [SourceSpec(label="Dice", weight=0)],
        [SourceSpec(label="Dice", weight=1.2)],
        [SourceSpec(label="  ", weight=0.5)],
    ])
    def test_invalid_registry(self, specs):
        with pytest.raises(SourceConfigError):
            validate_sources(specs)

    def test_get_source(self):
        assert get_source("Dice").weight == 0.8
        assert get_source("Nope") is None

class TestCheckEndpoint:
    @pytest.mark.asyncio
    async def test_returns_status(self):
        session = MagicMock()
        session.head.return_value.__aenter__ = AsyncMock(return_value=MagicMock(status=405))
        session.head.return_value.__aexit__ = AsyncMock(return_value=False)

        assert await check_endpoint("https://ra.co/", session=session) == 405
        args, kwargs = session.head.call_args
        assert args[0] == "https://ra.co/"
        assert kwargs['headers']['User-Agent'] == "PulseSMS/1.0 HealthCheck"

    @pytest.mark.asyncio
    async def test_unreachable_is_none(self):
        session = MagicMock()
        session.head.side_effect = aiohttp.ClientConnectionError("refused")
        assert await check_endpoint("https://ra.co/", session=session) is None
