import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest

from pulse.core.config import settings
from pulse.schemas.event import Coordinates
from pulse.schemas.source import SourceStatus
from pulse.services.event_collection import EventCollectionService, create_event_collection_service
from pulse.services.geocoding import NominatimGeocoder
from pulse.services.venue_directory import LearnedVenueStore, VenueDirectory
from pulse.utils.errors import SourceConfigError

from conftest import NOW, TODAY, TOMORROW, FakeAdapter, FakeGeocoder

def _service(adapters, **kwargs):
    return EventCollectionService({a.name: a for a in adapters}, **kwargs)

@pytest.mark.asyncio
async def test_concurrent_refreshes_share_one_run(make_event):
    """Test overlapping refresh calls run the adapters once"""
    dice = FakeAdapter("Dice", events=[make_event(date_local=TODAY)], delay=0.05)
    service = _service([dice])

    results = await asyncio.gather(service.refresh(), service.refresh(), service.refresh())

    assert dice.calls == 1
    assert results[0] is results[1] is results[2]
    assert service.store.size == 1
    assert not service.running

@pytest.mark.asyncio
async def test_refresh_after_completion_runs_again(make_event):
    dice = FakeAdapter("Dice", events=[make_event()])
    service = _service([dice])
    await service.refresh()
    await service.refresh()
    assert dice.calls == 2

@pytest.mark.asyncio
async def test_failures_are_isolated(make_event):
    """Test errors and timeouts in some sources do not affect the rest"""
    adapters = [FakeAdapter(f"Source {i}", events=[make_event(name=f"Show {i}")]) for i in range(7)]
    adapters.append(FakeAdapter("Broken A", error=RuntimeError("layout changed")))
    adapters.append(FakeAdapter("Broken B", error=ConnectionError("refused")))
    adapters.append(FakeAdapter("Slow", events=[make_event(name="Never")], delay=1.0))
    service = _service(adapters, adapter_timeout=0.05)

    events = await service.refresh()

    assert len(events) == 7
    assert service.last_stats.sources_ok == 7
    assert service.last_stats.sources_failed == 3
    assert service.last_stats.sources_empty == 0
    assert service.health.get("Slow").last_status == SourceStatus.TIMEOUT
    assert service.health.get("Broken A").last_error == "layout changed"
    for label in ("Broken A", "Broken B", "Slow"):
        assert service.health.get(label).consecutive_zeros == 1
    assert service.health.get("Source 0").consecutive_zeros == 0
    assert service.get_health_status()['status'] == 'degraded'

@pytest.mark.asyncio
async def test_all_failed_replaces_cache(make_event):
    """Test a cycle where every source fails still replaces the cache"""
    dice = FakeAdapter("Dice", events=[make_event()])
    service = _service([dice])
    await service.refresh()
    assert service.store.size == 1

    dice.error = RuntimeError("down")
    assert await service.refresh() == []
    assert service.store.size == 0
    assert service.get_health_status()['status'] == 'critical'

@pytest.mark.asyncio
async def test_merge_order_ignores_completion_order(make_event):
    """Test the higher-weight source wins a duplicate even when it finishes last"""
    skint = FakeAdapter("Skint", events=[make_event(date_local=TODAY, price_display="free")], delay=0.03)
    tavily = FakeAdapter("Tavily", events=[make_event(date_local=TODAY, price_display="$10")])
    service = _service([tavily, skint])

    events = await service.refresh()

    assert len(events) == 1
    assert events[0].source_name == "Skint"
    assert events[0].source_weight == 0.9
    assert events[0].price_display == "free"
    assert service.last_stats.total_events == 2
    assert service.last_stats.deduped_events == 1

class TestGetEvents:
    @pytest.fixture
    def service(self, make_event):
        adapter = FakeAdapter("Dice", events=[
            make_event(name="Good Room Party", venue_name="Good Room", date_local=TODAY),
            make_event(name="Baby's Tonight", venue_name="Baby's All Right",
                       start_time_local="2026-10-19T21:00:00"),
            make_event(name="Nowadays Rave", venue_name="Nowadays", date_local=TODAY),
            make_event(name="Tomorrow Show", venue_name="Baby's All Right", date_local=TOMORROW),
            make_event(name="Early Show", venue_name="Baby's All Right",
                       start_time_local="2026-10-19T16:00:00"),
        ])
        return _service([adapter])

    @pytest.mark.asyncio
    async def test_tonight_near_target(self, service):
        """Test first call fills the cache, then filters and ranks"""
        events = await service.get_events("Williamsburg", now=NOW)
        assert [e.name for e in events] == ["Baby's Tonight", "Good Room Party"]

    @pytest.mark.asyncio
    async def test_limit(self, service):
        events = await service.get_events("Williamsburg", limit=1, now=NOW)
        assert [e.name for e in events] == ["Baby's Tonight"]

    @pytest.mark.asyncio
    async def test_no_target(self, service):
        events = await service.get_events(None, now=NOW)
        assert {e.name for e in events} == {"Good Room Party", "Baby's Tonight", "Nowadays Rave"}

    @pytest.mark.asyncio
    async def test_cached_between_calls(self, service):
        await service.get_events("Williamsburg", now=NOW)
        await service.get_events("Greenpoint", now=NOW)
        assert service.adapters["Dice"].calls == 1

    @pytest.mark.asyncio
    async def test_never_raises(self, service):
        with patch.object(service.store, "snapshot", side_effect=RuntimeError("boom")):
            assert await service.get_events("Williamsburg", now=NOW) == []

@pytest.mark.asyncio
async def test_alert_after_repeated_empty_runs():
    hook = AsyncMock()
    service = _service([FakeAdapter("Skint")], alert_hook=hook)

    await service.refresh()
    await service.refresh()
    hook.assert_not_awaited()

    await service.refresh()
    hook.assert_awaited_once()
    failures, stats = hook.await_args.args
    assert failures[0]['source'] == "Skint"
    assert failures[0]['consecutive_zeros'] == 3
    assert stats.sources_empty == 1

@pytest.mark.asyncio
async def test_alert_hook_errors_are_swallowed():
    hook = AsyncMock(side_effect=RuntimeError("webhook down"))
    service = _service([FakeAdapter("Skint")], alert_hook=hook)
    for _ in range(3):
        await service.refresh()
    assert hook.await_count == 1

@pytest.mark.asyncio
async def test_endpoint_probes(make_event):
    checker = AsyncMock(return_value=200)
    service = _service([FakeAdapter("Dice", events=[make_event()])], endpoint_checker=checker)

    await service.refresh()

    checker.assert_awaited_once_with("https://dice.fm/browse/new-york")
    assert service.health.get("Dice").last_http_status == 200
    assert service.get_health_status()['sources']['Dice']['http_status'] == 200

@pytest.mark.asyncio
async def test_endpoint_probe_failure_is_none(make_event):
    checker = AsyncMock(side_effect=OSError("dns"))
    service = _service([FakeAdapter("Dice", events=[make_event()])], endpoint_checker=checker)
    await service.refresh()
    assert service.health.get("Dice").last_http_status is None
    assert service.store.size == 1

@pytest.mark.asyncio
async def test_geocodes_and_persists_venues(tmp_path, make_event):
    """Test unknown venues are geocoded, placed and written to the learned file"""
    path = tmp_path / "venues-learned.json"
    geocoder = FakeGeocoder({"Mystery Hall": Coordinates(lat=40.7150, lng=-73.9843)})
    venues = VenueDirectory(geocoder=geocoder, store=LearnedVenueStore(str(path)))
    adapter = FakeAdapter("Dice", events=[make_event(name="Secret Show", venue_name="Mystery Hall")])
    service = _service([adapter], venues=venues)

    events = await service.refresh()

    assert events[0].neighborhood == "Lower East Side"
    assert service.last_stats.geocoded == 1
    assert service.last_stats.venues_learned == 1
    with open(path) as f:
        assert "mystery hall" in json.load(f)

    # Second cycle hits the learned table
    await service.refresh()
    assert geocoder.calls == ["Mystery Hall"]
    assert service.last_stats.venues_learned == 0

@pytest.mark.asyncio
async def test_status_reports(make_event):
    service = _service([FakeAdapter("Dice", events=[make_event()])])

    health = service.get_health_status()
    assert health['status'] == 'ok'
    assert health['cache']['last_refresh'] is None
    assert service.get_cache_status()['cache_age_minutes'] is None

    await service.refresh()

    health = service.get_health_status()
    assert set(health) == {'status', 'cache', 'scrape', 'sources'}
    assert health['cache']['size'] == 1
    assert health['cache']['fresh'] is True
    assert health['scrape']['sources_ok'] == 1
    assert health['sources']['Dice']['success_rate'] == "100%"

    cache = service.get_cache_status()
    assert cache['cache_size'] == 1
    assert cache['cache_age_minutes'] == 0
    assert cache['sources']['Dice']['last_count'] == 1

    raw = service.get_raw_cache()
    assert len(raw['events']) == 1
    assert raw['timestamp'] is not None

def test_unregistered_adapter_gets_spec():
    service = _service([FakeAdapter("Local Zine", weight=0.4, source_type="newsletter")])
    spec = service.sources[0]
    assert spec.label == "Local Zine"
    assert spec.weight == 0.4
    assert spec.source_type == "newsletter"

def test_invalid_adapter_weight_rejected():
    with pytest.raises(SourceConfigError):
        _service([FakeAdapter("Local Zine", weight=1.5)])

def test_sources_in_merge_order():
    service = _service([FakeAdapter("Tavily"), FakeAdapter("Dice"), FakeAdapter("Skint")])
    assert [s.label for s in service.sources] == ["Skint", "Dice", "Tavily"]

def test_create_service_with_production_collaborators(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "LEARNED_VENUES_PATH", str(tmp_path / "venues-learned.json"))
    service = create_event_collection_service({"Dice": FakeAdapter("Dice")})

    assert isinstance(service.venues.geocoder, NominatimGeocoder)
    assert service.endpoint_checker is None
    assert service.venues.learned_count == 0
