"""
Generic adapter for pages that publish schema.org Event objects as JSON-LD.
"""

import html
import json
import logging
from typing import Any, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup

from pulse.schemas.event import CandidateEvent
from pulse.scrapers.base import BaseSourceAdapter
from pulse.services.location_services import infer_category

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_CHARS = 200

def _is_event_type(value: Any) -> bool:
    types = value if isinstance(value, list) else [value]
    return any(
        isinstance(t, str) and (t.endswith('Event') or t == 'Festival')
        for t in types
    )

def _iter_event_nodes(data: Any) -> Iterator[Dict[str, Any]]:
    """Yield Event objects from a JSON-LD payload, including @graph and ItemList containers."""
    if isinstance(data, list):
        for item in data:
            yield from _iter_event_nodes(item)
        return
    if not isinstance(data, dict):
        return

    if _is_event_type(data.get('@type')):
        yield data
    for node in data.get('@graph') or []:
        yield from _iter_event_nodes(node)
    for element in data.get('itemListElement') or []:
        if isinstance(element, dict) and 'item' in element:
            yield from _iter_event_nodes(element['item'])
        else:
            yield from _iter_event_nodes(element)

def _clean(text: Any) -> Optional[str]:
    if not isinstance(text, str):
        return None
    cleaned = ' '.join(html.unescape(text).split())
    return cleaned or None

def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value

def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None

def _format_address(address: Any) -> Optional[str]:
    if isinstance(address, str):
        return _clean(address)
    if not isinstance(address, dict):
        return None
    parts = [
        address.get('streetAddress'),
        address.get('addressLocality'),
        address.get('addressRegion'),
        address.get('postalCode'),
    ]
    return _clean(', '.join(p for p in parts if isinstance(p, str) and p.strip()))

def _parse_offers(offers: Any, free_flag: Any) -> Dict[str, Any]:
    offer = _first(offers)
    result = {'is_free': free_flag is True, 'price_display': None}
    if not isinstance(offer, dict):
        return result

    price = offer.get('price', offer.get('lowPrice'))
    amount = _to_float(price)
    if amount is not None:
        if amount == 0:
            result['is_free'] = True
            result['price_display'] = 'free'
        else:
            currency = offer.get('priceCurrency') or 'USD'
            symbol = '$' if currency == 'USD' else f"{currency} "
            result['price_display'] = f"{symbol}{amount:g}"
    elif isinstance(price, str) and price.strip():
        result['price_display'] = price.strip()
        result['is_free'] = result['is_free'] or 'free' in price.lower()
    return result

class JsonLdAdapter(BaseSourceAdapter):
    """Adapter that reads JSON-LD Event blocks from a listing page."""

    source_type = "jsonld"

    def parse(self, page: str) -> List[CandidateEvent]:
        """
        Parse candidate events out of an HTML page.

        Args:
            page: Raw HTML

        Returns:
            Candidate events; malformed blocks are skipped
        """
        soup = BeautifulSoup(page, 'html.parser')
        events: List[CandidateEvent] = []

        for script_tag in soup.find_all('script', {'type': 'application/ld+json'}):
            try:
                data = json.loads(script_tag.string or '')
            except json.JSONDecodeError:
                logger.warning(f"[{self.name}] Failed to parse JSON-LD script tag")
                continue

            for node in _iter_event_nodes(data):
                event = self._parse_event(node)
                if event is not None:
                    events.append(event)

        logger.debug(f"[{self.name}] Found {len(events)} events in JSON-LD")
        return events

    def _parse_event(self, node: Dict[str, Any]) -> Optional[CandidateEvent]:
        name = _clean(node.get('name'))
        if not name:
            return None

        description = _clean(node.get('description'))
        start = _clean(node.get('startDate'))
        end = _clean(node.get('endDate'))

        location = _first(node.get('location'))
        venue_name = venue_address = hint = None
        lat = lng = None
        if isinstance(location, dict):
            venue_name = _clean(location.get('name'))
            address = location.get('address')
            venue_address = _format_address(address)
            if isinstance(address, dict):
                hint = _clean(address.get('addressLocality'))
            geo = location.get('geo')
            if isinstance(geo, dict):
                lat = _to_float(geo.get('latitude'))
                lng = _to_float(geo.get('longitude'))
        elif isinstance(location, str):
            venue_name = _clean(location)

        price = _parse_offers(node.get('offers'), node.get('isAccessibleForFree'))
        url = _first(node.get('url'))

        return CandidateEvent(
            name=name,
            description_short=description[:DESCRIPTION_MAX_CHARS] if description else None,
            venue_name=venue_name,
            venue_address=venue_address,
            neighborhood_hint=hint,
            latitude=lat,
            longitude=lng,
            start_time_local=start,
            end_time_local=end,
            is_free=price['is_free'],
            price_display=price['price_display'],
            category=infer_category(f"{name} {description or ''}"),
            confidence=0.8,
            source_name=self.name,
            source_type=self.source_type,
            source_weight=self.weight,
            ticket_url=url if isinstance(url, str) else None,
            source_url=self.url,
        )

    async def fetch_events(self) -> List[CandidateEvent]:
        page = await self.fetch_text()
        return self.parse(page)
