"""
Monitoring utilities for tracking source health across refresh cycles.

This module provides:
- Per-source health tracking (consecutive empty runs, success rate, history)
- Overall health status (ok / degraded / critical)
- A cooldown wrapper for health alert delivery
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from pulse.core.config import settings
from pulse.schemas.source import (
    AdapterResult,
    HealthHistoryEntry,
    ScrapeStats,
    SourceHealth,
)

logger = logging.getLogger(__name__)

class SourceHealthMonitor:
    """Track per-source health across refresh cycles"""

    def __init__(
        self,
        labels: Iterable[str] = (),
        warn_threshold: Optional[int] = None,
        history_max: Optional[int] = None
    ):
        """
        Initialize the health monitor.

        Args:
            labels: Source labels to track from the start
            warn_threshold: Consecutive empty runs before a source is flagged
            history_max: Number of runs kept in each source's history
        """
        self.warn_threshold = warn_threshold or settings.HEALTH_WARN_THRESHOLD
        self.history_max = history_max or settings.HEALTH_HISTORY_MAX
        self.sources: Dict[str, SourceHealth] = {label: SourceHealth() for label in labels}

    def get(self, label: str) -> SourceHealth:
        if label not in self.sources:
            self.sources[label] = SourceHealth()
        return self.sources[label]

    def record_result(
        self,
        label: str,
        result: AdapterResult,
        timestamp: Optional[datetime] = None
    ) -> SourceHealth:
        """
        Record one adapter run.

        Args:
            label: Source label
            result: Wrapped adapter result
            timestamp: When the run happened

        Returns:
            Updated health entry
        """
        health = self.get(label)
        now = timestamp or datetime.utcnow()
        count = len(result.events)

        health.last_count = count
        health.last_status = result.status
        health.last_error = result.error
        health.last_duration_ms = result.duration_ms
        health.last_scrape_at = now
        health.total_scrapes += 1

        if count > 0:
            health.total_successes += 1
            health.consecutive_zeros = 0
        else:
            health.consecutive_zeros += 1
            if health.consecutive_zeros >= self.warn_threshold:
                logger.warning(
                    f"Source {label} has returned 0 events for "
                    f"{health.consecutive_zeros} consecutive refreshes",
                    extra={
                        'source': label,
                        'status': result.status.value,
                        'error_message': result.error,
                    }
                )

        health.history.append(HealthHistoryEntry(
            timestamp=now,
            count=count,
            duration_ms=result.duration_ms,
            status=result.status,
        ))
        if len(health.history) > self.history_max:
            health.history = health.history[-self.history_max:]

        return health

    def record_http_status(self, label: str, http_status: Optional[int]) -> None:
        self.get(label).last_http_status = http_status

    def alertable(self) -> List[Dict[str, Any]]:
        """Sources at or past the warn threshold, in alert payload form."""
        return [
            {
                'source': label,
                'consecutive_zeros': h.consecutive_zeros,
                'last_error': h.last_error,
                'last_status': h.last_status.value if h.last_status else None,
            }
            for label, h in self.sources.items()
            if h.consecutive_zeros >= self.warn_threshold
        ]

    def overall_status(self, has_scraped: bool) -> str:
        """
        Aggregate status across sources.

        Returns:
            'critical' when every source failed on its last run (after at
            least one scrape), 'degraded' when any did, otherwise 'ok'
        """
        statuses = [h.last_status for h in self.sources.values()]
        failed = [s is not None and s.is_failure for s in statuses]
        if has_scraped and failed and all(failed):
            return 'critical'
        if any(failed):
            return 'degraded'
        return 'ok'

    def source_report(self) -> Dict[str, Dict[str, Any]]:
        """Per-source status in the shape served by the health endpoint."""
        report = {}
        for label, h in self.sources.items():
            rate = h.success_rate
            report[label] = {
                'status': h.last_status.value if h.last_status else None,
                'last_count': h.last_count,
                'consecutive_zeros': h.consecutive_zeros,
                'duration_ms': h.last_duration_ms,
                'http_status': h.last_http_status,
                'last_error': h.last_error,
                'last_scrape': h.last_scrape_at.isoformat() if h.last_scrape_at else None,
                'success_rate': f"{round(rate * 100)}%" if rate is not None else None,
                'history': [entry.model_dump(mode='json') for entry in h.history],
            }
        return report

AlertSender = Callable[[List[Dict[str, Any]], ScrapeStats], Awaitable[Any]]

class CooldownNotifier:
    """Deliver health alerts at most once per cooldown window."""

    def __init__(
        self,
        send: AlertSender,
        cooldown_hours: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.send = send
        self.cooldown = timedelta(
            hours=settings.ALERT_COOLDOWN_HOURS if cooldown_hours is None else cooldown_hours
        )
        self._clock = clock
        self._last_sent: Optional[float] = None

    def in_cooldown(self) -> bool:
        if self._last_sent is None:
            return False
        return self._clock() - self._last_sent < self.cooldown.total_seconds()

    async def notify(self, failures: List[Dict[str, Any]], stats: ScrapeStats) -> bool:
        """
        Send an alert unless there is nothing to report or the cooldown is active.

        Returns:
            True if the alert was sent
        """
        if not failures:
            return False

        if self.in_cooldown():
            logger.info(f"Alert cooldown active, skipping ({len(failures)} sources failing)")
            return False

        try:
            await self.send(failures, stats)
        except Exception as e:
            logger.error(f"Failed to send health alert: {str(e)}")
            return False

        self._last_sent = self._clock()
        logger.info(f"Health alert sent for {len(failures)} sources")
        return True

    __call__ = notify
