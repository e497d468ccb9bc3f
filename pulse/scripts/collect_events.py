#!/usr/bin/env python3

import argparse
import asyncio
from typing import Dict, Sequence

from dotenv import load_dotenv

# Load environment variables from .env file before settings are read
load_dotenv()

from pulse.schemas.source import SourceSpec
from pulse.scrapers.jsonld import JsonLdAdapter
from pulse.scrapers.registry import SOURCES
from pulse.services.event_collection import EventCollectionService, create_event_collection_service
from pulse.tasks.event_collection import DailyScrapeTask
from pulse.utils.logging import setup_logger

logger = setup_logger("pulse")

def build_jsonld_adapters(sources: Sequence[SourceSpec] = SOURCES) -> Dict[str, JsonLdAdapter]:
    """One generic JSON-LD adapter per registry source that has an endpoint."""
    return {
        spec.label: JsonLdAdapter(name=spec.label, url=spec.endpoint, weight=spec.weight)
        for spec in sources
        if spec.endpoint
    }

async def collect_once(service: EventCollectionService, neighborhood: str = None) -> None:
    events = await service.refresh()
    logger.info(f"Collected {len(events)} events")

    health = service.get_health_status()
    logger.info(f"Health status: {health['status']}")
    for label, source in health['sources'].items():
        logger.info(
            f"{label}: {source['status']} ({source['last_count']} events, "
            f"{source['duration_ms']}ms, http {source['http_status']})"
        )

    if neighborhood:
        nearby = await service.get_events(neighborhood)
        for event in nearby:
            logger.info(f"{event.neighborhood} | {event.name} @ {event.venue_name} | {event.start_time_local}")

async def main() -> None:
    parser = argparse.ArgumentParser(description="Collect tonight's NYC events")
    parser.add_argument('--schedule', action='store_true', help="Run the daily scrape loop")
    parser.add_argument('--neighborhood', help="Print tonight's events near this neighborhood")
    args = parser.parse_args()

    service = create_event_collection_service(build_jsonld_adapters())

    if args.schedule:
        await DailyScrapeTask(service).run()
    else:
        await collect_once(service, args.neighborhood)

if __name__ == "__main__":
    asyncio.run(main())
