"""
Base classes for event source adapters.

Every adapter declares a name, source type and trust weight and implements
fetch_events(). The public fetch() bounds it with a deadline and converts any
failure into an empty list plus last_error/last_status, so a broken source
never takes the rest of a refresh down with it.
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, List, Optional, Union

import aiohttp

from pulse.core.config import settings
from pulse.schemas.event import CandidateEvent
from pulse.schemas.source import SourceStatus
from pulse.utils.errors import AdapterFailure, AdapterTimeout

logger = logging.getLogger(__name__)

FETCH_HEADERS: Dict[str, str] = {
    'User-Agent': settings.USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.8,*/*;q=0.7',
    'Accept-Language': 'en-US,en;q=0.9',
}

Extractor = Callable[
    [str, str, Optional[str]],
    Union[List[CandidateEvent], Awaitable[List[CandidateEvent]]]
]

class BaseSourceAdapter(ABC):
    """Base class for all event source adapters."""

    name: str = ""
    source_type: str = "scraper"
    weight: float = 0.5
    url: Optional[str] = None

    def __init__(
        self,
        name: Optional[str] = None,
        url: Optional[str] = None,
        weight: Optional[float] = None,
        source_type: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.name = name or self.name or type(self).__name__
        self.url = url or self.url
        self.weight = self.weight if weight is None else weight
        self.source_type = source_type or self.source_type
        self.timeout = timeout or settings.ADAPTER_TIMEOUT_SECONDS
        self.session = session

        if not 0 < self.weight <= 1:
            raise ValueError(f"{self.name}: weight must be in (0, 1], got {self.weight}")

        self.last_error: Optional[str] = None
        self.last_status: Optional[SourceStatus] = None
        self.last_http_status: Optional[int] = None

    @abstractmethod
    async def fetch_events(self) -> List[CandidateEvent]:
        """
        Fetch tonight's candidate events from the source.

        Raises:
            AdapterFailure: On network or parse errors
        """
        pass

    async def fetch(self) -> List[CandidateEvent]:
        """
        Run fetch_events() under the adapter deadline.

        Returns:
            Candidate events, or an empty list on any failure
        """
        self.last_error = None
        try:
            events = await asyncio.wait_for(self.fetch_events(), timeout=self.timeout)
        except asyncio.TimeoutError:
            self.last_status = SourceStatus.TIMEOUT
            self.last_error = f"timed out after {self.timeout}s"
            logger.warning(f"[{self.name}] Fetch timed out after {self.timeout}s")
            return []
        except AdapterFailure as e:
            self.last_status = SourceStatus.TIMEOUT if isinstance(e, AdapterTimeout) else SourceStatus.ERROR
            self.last_error = str(e)
            self.last_http_status = e.http_status or self.last_http_status
            logger.error(f"[{self.name}] Fetch failed: {str(e)}")
            return []
        except Exception as e:
            self.last_status = SourceStatus.ERROR
            self.last_error = f"{type(e).__name__}: {str(e)}"
            logger.error(f"[{self.name}] Unexpected error: {str(e)}", exc_info=True)
            return []

        events = [e for e in (events or []) if isinstance(e, CandidateEvent)]
        for event in events:
            if not event.source_name:
                event.source_name = self.name
        self.last_status = SourceStatus.OK if events else SourceStatus.EMPTY
        logger.info(f"[{self.name}] Fetched {len(events)} events")
        return events

    async def _get(self, session: aiohttp.ClientSession, url: str, **kwargs) -> str:
        async with session.get(url, **kwargs) as response:
            self.last_http_status = response.status
            if response.status >= 400:
                raise AdapterFailure(self.name, f"HTTP {response.status} from {url}", response.status)
            return await response.text()

    async def fetch_text(self, url: Optional[str] = None, **kwargs) -> str:
        """
        GET a page with the shared fetch headers.

        Raises:
            AdapterFailure: On HTTP errors or connection failures
            AdapterTimeout: When the request exceeds the adapter timeout
        """
        target = url or self.url
        if not target:
            raise AdapterFailure(self.name, "no URL configured")

        try:
            if self.session is not None:
                return await self._get(self.session, target, **kwargs)

            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(headers=FETCH_HEADERS, timeout=timeout) as session:
                return await self._get(session, target, **kwargs)
        except asyncio.TimeoutError as e:
            raise AdapterTimeout(self.name, f"request to {target} timed out") from e
        except aiohttp.ClientError as e:
            raise AdapterFailure(self.name, f"request to {target} failed: {str(e)}") from e

class ExtractionAdapter(BaseSourceAdapter):
    """
    Adapter for unstructured pages: fetches raw text and hands it to an
    injected extractor.
    """

    source_type = "extraction"

    def __init__(self, name: str, url: str, extract: Extractor, **kwargs):
        super().__init__(name=name, url=url, **kwargs)
        self.extract = extract

    async def fetch_events(self) -> List[CandidateEvent]:
        raw_text = await self.fetch_text()
        if not raw_text or not raw_text.strip():
            return []

        try:
            result = self.extract(raw_text, self.name, self.url)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise AdapterFailure(self.name, f"extraction failed: {str(e)}") from e
        return list(result or [])

async def check_endpoint(
    url: str,
    timeout: Optional[float] = None,
    session: Optional[aiohttp.ClientSession] = None
) -> Optional[int]:
    """
    HEAD-probe a source endpoint.

    Returns:
        HTTP status code, or None when the endpoint is unreachable
    """
    headers = {'User-Agent': settings.HEALTHCHECK_USER_AGENT}
    client_timeout = aiohttp.ClientTimeout(total=timeout or settings.ENDPOINT_CHECK_TIMEOUT_SECONDS)

    async def _head(client: aiohttp.ClientSession) -> int:
        async with client.head(url, headers=headers, allow_redirects=True, timeout=client_timeout) as response:
            return response.status

    try:
        if session is not None:
            return await _head(session)
        async with aiohttp.ClientSession() as client:
            return await _head(client)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.debug(f"Endpoint check failed for {url}: {str(e)}")
        return None

