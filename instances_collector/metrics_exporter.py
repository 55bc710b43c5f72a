"""OpenTelemetry metrics for the collection pipeline.

Instruments are created against the global meter provider. Until ``main``
installs an SDK provider they are no-ops, so tests and one-off runs need no
collector.
"""

from __future__ import annotations

import threading

from opentelemetry import metrics
from opentelemetry.metrics import Observation

# ---------------------------------------------------------------------------
# Meter
# ---------------------------------------------------------------------------
meter = metrics.get_meter("instances-collector")

# ---------------------------------------------------------------------------
# Thread-safe snapshot for observable gauges
# ---------------------------------------------------------------------------
_snapshot_lock = threading.Lock()
_snapshot_values: dict[str, float] = {
    "last_success_timestamp": 0.0,
}


def _observe(key: str) -> list[Observation]:
    """Return a single observation for the given snapshot key."""
    with _snapshot_lock:
        return [Observation(value=_snapshot_values.get(key, 0.0))]


# ---------------------------------------------------------------------------
# Instruments
# ---------------------------------------------------------------------------
collector_last_success_timestamp = meter.create_observable_gauge(
    name="collector_last_success_timestamp",
    callbacks=[lambda options: _observe("last_success_timestamp")],
    description="Unix time of the last successful collection cycle",
    unit="s",
)

collector_cycles_total = meter.create_counter(
    name="collector_cycles_total",
    description="Collection cycles run, by outcome",
    unit="1",
)

collector_points_written_total = meter.create_counter(
    name="collector_points_written_total",
    description="Points written to InfluxDB",
    unit="1",
)

collector_fetch_retries_total = meter.create_counter(
    name="collector_fetch_retries_total",
    description="Retries of the upstream fetch",
    unit="1",
)

collector_cycle_duration_seconds = meter.create_histogram(
    name="collector_cycle_duration_seconds",
    description="Wall time of a collection cycle",
    unit="s",
)

# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def record_cycle(outcome: str, duration_seconds: float) -> None:
    """Count a finished cycle and record its duration."""
    collector_cycles_total.add(1, {"outcome": outcome})
    collector_cycle_duration_seconds.record(duration_seconds, {"outcome": outcome})


def record_points_written(count: int) -> None:
    collector_points_written_total.add(count)


def record_fetch_retry() -> None:
    collector_fetch_retries_total.add(1)


def mark_success(timestamp: float) -> None:
    """Update the last-success gauge."""
    with _snapshot_lock:
        _snapshot_values["last_success_timestamp"] = timestamp
