"""Collection pipeline: fetch, decode, map and write one snapshot."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from .decoder import decode_snapshot
from .exceptions import CollectorError, ConfigurationError
from .fetcher import SnapshotFetcher
from .mapper import build_points
from .metrics_exporter import mark_success, record_cycle, record_points_written
from .settings import Settings
from .sink import InfluxSink

logger = logging.getLogger(__name__)

SUCCESS = "success"
FAILED = "failed"


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one collection cycle."""

    outcome: str
    points_written: int
    duration_seconds: float
    error: CollectorError | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == SUCCESS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CollectionPipeline:
    """Runs fetch -> decode -> map -> write, isolating failures to the cycle."""

    def __init__(
        self,
        settings: Settings,
        fetcher: SnapshotFetcher | None = None,
        sink: InfluxSink | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher or SnapshotFetcher(settings.source)
        self._sink = sink or InfluxSink(settings.influx)
        self._clock = clock

    def _collect(self) -> int:
        payload = self._fetcher.fetch()
        snapshot = decode_snapshot(payload)

        # One timestamp for every point in the batch
        timestamp = self._clock()
        points = build_points(snapshot, timestamp, self._settings.source.url)
        logger.info(
            "Mapped %d instances (%d total users) into %d points",
            snapshot.total_instances,
            snapshot.total_users,
            len(points),
        )
        return self._sink.write(points)

    def run_cycle(self) -> CycleResult:
        """Run one cycle. Configuration errors propagate; other collector errors fail the cycle."""
        started = time.monotonic()
        try:
            written = self._collect()
        except ConfigurationError:
            raise
        except CollectorError as exc:
            duration = time.monotonic() - started
            logger.error(
                "Collection cycle failed after %.1fs (%s): %s",
                duration,
                type(exc).__name__,
                exc.message,
            )
            record_cycle(FAILED, duration)
            return CycleResult(FAILED, 0, duration, exc)

        duration = time.monotonic() - started
        record_cycle(SUCCESS, duration)
        record_points_written(written)
        mark_success(time.time())
        logger.info("Collection cycle finished in %.1fs (%d points)", duration, written)
        return CycleResult(SUCCESS, written, duration)

    def close(self) -> None:
        self._fetcher.close()
