"""Task for refreshing the event cache once a day at a fixed NYC time."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

import pytz

from pulse.core.config import settings

logger = logging.getLogger(__name__)

def seconds_until_next_run(
    now: datetime,
    hour: int = 10,
    tz: str = "America/New_York"
) -> float:
    """
    Seconds from now until the next occurrence of hour:00 in a timezone.

    Computed in civil time, so DST transitions and month/year rollovers are
    handled. If the target hour has been reached or passed today, the next
    run is tomorrow.

    Args:
        now: Current time (naive values are treated as UTC)
        hour: Target hour of day (0-23)
        tz: IANA timezone name

    Returns:
        Delay in seconds (always > 0)
    """
    zone = pytz.timezone(tz)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_now = now.astimezone(zone)

    target_day = local_now.date()
    candidate = zone.normalize(zone.localize(datetime(target_day.year, target_day.month, target_day.day, hour)))
    if candidate <= local_now:
        target_day = target_day + timedelta(days=1)
        candidate = zone.normalize(zone.localize(datetime(target_day.year, target_day.month, target_day.day, hour)))

    return (candidate - now).total_seconds()

class DailyScrapeTask:
    """Runs the collection service's refresh every day at the scrape hour."""

    def __init__(
        self,
        service,
        hour: Optional[int] = None,
        tz: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        """Initialize the daily scrape task.

        Args:
            service: Anything with an async refresh()
            hour: Hour of day to run (defaults to SCRAPE_HOUR)
            tz: Timezone for the hour (defaults to SCRAPE_TIMEZONE)
            sleep: Coroutine function used to wait
            clock: Returns the current aware datetime
        """
        self.service = service
        self.hour = settings.SCRAPE_HOUR if hour is None else hour
        self.tz = tz or settings.SCRAPE_TIMEZONE
        self._sleep = sleep
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    async def run(self, max_runs: Optional[int] = None) -> None:
        """Sleep until the next scrape, refresh, reschedule.

        Args:
            max_runs: Stop after this many refreshes (None runs forever)
        """
        runs = 0
        while max_runs is None or runs < max_runs:
            delay = seconds_until_next_run(self._clock(), hour=self.hour, tz=self.tz)
            logger.info(f"Next scrape scheduled in {delay / 3600:.1f} hours ({self.hour}:00 {self.tz})")
            await self._sleep(delay)

            try:
                await self.service.refresh()
            except Exception as e:
                logger.error(f"Scheduled scrape failed: {str(e)}", exc_info=True)
            runs += 1

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.ensure_future(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Daily scrape task stopped")
