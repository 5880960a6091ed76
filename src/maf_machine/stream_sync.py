"""Concurrent per-activity sensor stream fetching over an injected fetch callable."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from maf_machine.models import SensorStreamSet

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4

FetchStream = Callable[[Any], Awaitable[Any]]


@dataclass
class SyncReport:
    started_at: str
    finished_at: str = ''
    requested: int = 0
    fetched: int = 0
    missing: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class StreamSync:
    """
    Fetches sensor streams for many activities as independent tasks.

    A fetch that raises or returns nothing yields None for that activity;
    the analyzer then falls back to its average-HR estimate. Only
    cancellation of the caller propagates.
    """

    def __init__(self, fetch_stream: FetchStream, max_concurrency: int = DEFAULT_MAX_CONCURRENCY):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._fetch_stream = fetch_stream
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self.last_report: Optional[SyncReport] = None

    async def _fetch_one(self, activity_id, report: SyncReport) -> Optional[SensorStreamSet]:
        async with self._semaphore:
            try:
                payload = await self._fetch_stream(activity_id)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                report.failed += 1
                report.errors.append(f"{activity_id}: {exc}")
                logger.warning("Stream fetch failed for activity %s: %s", activity_id, exc)
                return None

        streams = SensorStreamSet.from_strava(payload)
        if streams is None:
            report.missing += 1
        else:
            report.fetched += 1
        return streams

    async def fetch_all(self, activity_ids: Sequence[Any]) -> Dict[Any, Optional[SensorStreamSet]]:
        """Return {activity_id: SensorStreamSet | None} for every requested id."""
        ids = list(dict.fromkeys(activity_ids))
        report = SyncReport(started_at=_utc_now_iso(), requested=len(ids))
        self.last_report = report

        results = await asyncio.gather(*(self._fetch_one(i, report) for i in ids))

        report.finished_at = _utc_now_iso()
        logger.debug(
            "Stream sync finished: %s fetched, %s missing, %s failed",
            report.fetched, report.missing, report.failed,
        )
        return dict(zip(ids, results))
