"""
Service for collecting events from all registered sources into the cache.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from pulse.core.config import settings
from pulse.schemas.event import CanonicalEvent
from pulse.schemas.source import AdapterResult, ScrapeStats, SourceSpec, SourceStatus
from pulse.scrapers.base import check_endpoint
from pulse.scrapers.registry import SOURCES, merge_order, validate_sources
from pulse.services.cache_service import EventStore
from pulse.services.geocoding import NominatimGeocoder
from pulse.services.location_services import (
    filter_upcoming_events,
    get_event_date,
    get_nyc_date_string,
    rank_events_by_proximity,
)
from pulse.services.venue_directory import LearnedVenueStore, VenueDirectory
from pulse.utils.deduplication import dedupe_in_priority_order, normalize_candidate
from pulse.utils.errors import PersistenceFailure
from pulse.utils.monitoring import SourceHealthMonitor
from pulse.utils.single_flight import SingleFlight

logger = logging.getLogger(__name__)

AlertHook = Callable[[List[Dict[str, Any]], ScrapeStats], Awaitable[Any]]
EndpointChecker = Callable[[str], Awaitable[Optional[int]]]

class EventCollectionService:
    """Service for refreshing and serving the daily event cache"""

    def __init__(
        self,
        adapters: Mapping[str, Any],
        venues: Optional[VenueDirectory] = None,
        store: Optional[EventStore] = None,
        health: Optional[SourceHealthMonitor] = None,
        sources: Optional[Sequence[SourceSpec]] = None,
        alert_hook: Optional[AlertHook] = None,
        endpoint_checker: Optional[EndpointChecker] = None,
        adapter_timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the collection service.

        Args:
            adapters: Source label -> adapter (anything with async fetch())
            venues: Venue directory used for resolution and backfill
            store: Event cache
            health: Per-source health monitor
            sources: Source registry (defaults to SOURCES)
            alert_hook: Optional async callable(failures, stats)
            endpoint_checker: Async callable(url) -> HTTP status; None disables probes
            adapter_timeout: Hard deadline per adapter call in seconds
            clock: Monotonic clock used for durations

        Raises:
            SourceConfigError: If the resulting registry is invalid
        """
        registry = {spec.label: spec for spec in (SOURCES if sources is None else sources)}
        specs = []
        for label, adapter in adapters.items():
            spec = registry.get(label) or SourceSpec(
                label=label,
                weight=getattr(adapter, 'weight', 0.5),
                source_type=getattr(adapter, 'source_type', 'scraper'),
                endpoint=getattr(adapter, 'url', None),
            )
            specs.append(spec)

        self.sources: List[SourceSpec] = merge_order(validate_sources(specs))
        self.adapters = dict(adapters)
        self.venues = venues or VenueDirectory()
        self.store = store or EventStore()
        self.health = health or SourceHealthMonitor(labels=[s.label for s in self.sources])
        self.alert_hook = alert_hook
        self.endpoint_checker = endpoint_checker
        self.adapter_timeout = adapter_timeout or settings.ADAPTER_TIMEOUT_SECONDS
        self._clock = clock

        self.last_stats = ScrapeStats()
        self._flight: SingleFlight[List[CanonicalEvent]] = SingleFlight(self._refresh_cycle)

    @property
    def running(self) -> bool:
        return self._flight.running

    async def refresh(self) -> List[CanonicalEvent]:
        """
        Run one refresh cycle, or join the one already in flight.

        Returns:
            The deduplicated events stored by the cycle
        """
        return await self._flight.run()

    def _elapsed_ms(self, start: float) -> int:
        return int((self._clock() - start) * 1000)

    async def _run_adapter(self, spec: SourceSpec) -> AdapterResult:
        """Run one adapter under the deadline; never raises."""
        adapter = self.adapters[spec.label]
        start = self._clock()
        try:
            events = await asyncio.wait_for(adapter.fetch(), timeout=self.adapter_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[{spec.label}] Timed out after {self.adapter_timeout}s")
            return AdapterResult(
                duration_ms=self._elapsed_ms(start),
                status=SourceStatus.TIMEOUT,
                error=f"timed out after {self.adapter_timeout}s",
            )
        except Exception as e:
            logger.error(f"[{spec.label}] Adapter failed: {str(e)}")
            return AdapterResult(
                duration_ms=self._elapsed_ms(start),
                status=SourceStatus.ERROR,
                error=str(e) or type(e).__name__,
            )

        events = list(events or [])
        duration_ms = self._elapsed_ms(start)
        reported = getattr(adapter, 'last_status', None)
        if not events and isinstance(reported, SourceStatus) and reported.is_failure:
            return AdapterResult(
                duration_ms=duration_ms,
                status=reported,
                error=getattr(adapter, 'last_error', None),
            )

        return AdapterResult(
            events=events,
            duration_ms=duration_ms,
            status=SourceStatus.OK if events else SourceStatus.EMPTY,
        )

    async def _probe_endpoints(self) -> Dict[str, Optional[int]]:
        """HEAD-probe every source endpoint. Diagnostic only."""
        if self.endpoint_checker is None:
            return {}

        targets = [s for s in self.sources if s.endpoint]

        async def probe(spec: SourceSpec) -> Tuple[str, Optional[int]]:
            try:
                return spec.label, await self.endpoint_checker(spec.endpoint)
            except Exception as e:
                logger.debug(f"[{spec.label}] Endpoint probe failed: {str(e)}")
                return spec.label, None

        results = await asyncio.gather(*(probe(s) for s in targets))
        return dict(results)

    def _normalize_batch(self, spec: SourceSpec, result: AdapterResult) -> List[CanonicalEvent]:
        batch = []
        for candidate in result.events:
            try:
                batch.append(normalize_candidate(candidate, spec, self.venues))
            except Exception as e:
                logger.warning(f"[{spec.label}] Skipping malformed event '{candidate.name}': {str(e)}")
        return batch

    async def _refresh_cycle(self) -> List[CanonicalEvent]:
        started_at = datetime.utcnow()
        start = self._clock()
        logger.info(f"Starting refresh across {len(self.sources)} sources")

        adapter_results, http_statuses = await asyncio.gather(
            asyncio.gather(*(self._run_adapter(spec) for spec in self.sources)),
            self._probe_endpoints(),
        )

        now = datetime.utcnow()
        ok = failed = empty = 0
        batches = []
        for spec, result in zip(self.sources, adapter_results):
            if spec.label in http_statuses:
                self.health.record_http_status(spec.label, http_statuses[spec.label])
            self.health.record_result(spec.label, result, timestamp=now)

            if result.status == SourceStatus.OK:
                ok += 1
            elif result.status.is_failure:
                failed += 1
            else:
                empty += 1

            batches.append(self._normalize_batch(spec, result))

        merged, total_raw = dedupe_in_priority_order(batches)

        geocoded = 0
        try:
            geocoded = await self.venues.backfill_neighborhoods(merged)
        except Exception as e:
            logger.error(f"Neighborhood backfill failed: {str(e)}")

        venues_learned = self.venues.unsaved_count
        try:
            self.venues.save()
        except PersistenceFailure as e:
            logger.error(f"Failed to persist learned venues: {str(e)}")

        self.store.replace(merged)

        self.last_stats = ScrapeStats(
            started_at=started_at,
            completed_at=datetime.utcnow(),
            total_duration_ms=self._elapsed_ms(start),
            total_events=total_raw,
            deduped_events=len(merged),
            sources_ok=ok,
            sources_failed=failed,
            sources_empty=empty,
            geocoded=geocoded,
            venues_learned=venues_learned,
        )

        logger.info(
            f"Cache refreshed: {len(merged)} deduped events ({total_raw} raw from "
            f"{ok} ok / {failed} failed / {empty} empty sources)"
        )

        await self._send_alerts()
        return merged

    async def _send_alerts(self) -> None:
        failures = self.health.alertable()
        if not failures or self.alert_hook is None:
            return
        try:
            await self.alert_hook(failures, self.last_stats)
        except Exception as e:
            logger.error(f"Health alert hook failed: {str(e)}")

    async def get_events(
        self,
        neighborhood: Optional[str],
        limit: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> List[CanonicalEvent]:
        """
        Get tonight's events near a neighborhood.

        Triggers one refresh if the cache has never been filled.

        Args:
            neighborhood: Target neighborhood (None for no proximity ranking)
            limit: Maximum number of events
            now: Reference time

        Returns:
            Upcoming, ranked events dated today or undated
        """
        limit = settings.RESULT_LIMIT if limit is None else limit
        try:
            if self.store.is_empty():
                await self.refresh()

            events = self.store.snapshot().events
            upcoming = filter_upcoming_events(events, now=now)
            ranked = rank_events_by_proximity(upcoming, neighborhood, now=now)

            today = get_nyc_date_string(0, now)
            tonight = [e for e in ranked if get_event_date(e) in (None, today)]
        except Exception as e:
            logger.error(f"Error getting events for {neighborhood}: {str(e)}", exc_info=True)
            return []

        logger.info(
            f"{len(tonight)} tonight events near {neighborhood} "
            f"({len(ranked)} ranked, cache: {len(events)})"
        )
        return tonight[:limit]

    def get_raw_cache(self) -> Dict[str, Any]:
        return self.store.raw()

    def get_cache_status(self) -> Dict[str, Any]:
        return {
            'cache_size': self.store.size,
            'cache_age_minutes': self.store.age_minutes(),
            'cache_fresh': not self.store.is_empty(),
            'sources': {
                label: h.model_dump(mode='json') for label, h in self.health.sources.items()
            },
        }

    def get_health_status(self) -> Dict[str, Any]:
        """Overall, cache, scrape and per-source health."""
        snapshot = self.store.snapshot()
        return {
            'status': self.health.overall_status(has_scraped=self.last_stats.started_at is not None),
            'cache': {
                'size': len(snapshot.events),
                'age_minutes': self.store.age_minutes(),
                'fresh': len(snapshot.events) > 0,
                'last_refresh': (
                    datetime.fromtimestamp(snapshot.timestamp, tz=timezone.utc).isoformat()
                    if snapshot.timestamp is not None else None
                ),
            },
            'scrape': self.last_stats.model_dump(mode='json'),
            'sources': self.health.source_report(),
        }

def create_event_collection_service(
    adapters: Mapping[str, Any],
    alert_hook: Optional[AlertHook] = None
) -> EventCollectionService:
    """
    Build the service with production collaborators: Nominatim geocoding,
    the learned-venue file, and endpoint probes.

    Learned venues are loaded here, before the first refresh.
    """
    geocoder = NominatimGeocoder() if settings.GEOCODER_ENABLED else None
    venues = VenueDirectory(geocoder=geocoder, store=LearnedVenueStore())
    venues.load()

    return EventCollectionService(
        adapters=adapters,
        venues=venues,
        alert_hook=alert_hook,
        endpoint_checker=check_endpoint if settings.ENDPOINT_CHECKS_ENABLED else None,
    )
