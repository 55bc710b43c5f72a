"""InfluxDB batch writer."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

import requests
from influxdb import InfluxDBClient
from influxdb.exceptions import InfluxDBClientError, InfluxDBServerError

from .exceptions import ConfigurationError, SinkWriteError
from .mapper import MetricPoint
from .settings import InfluxSettings

logger = logging.getLogger(__name__)

DATABASE = "mastidon"
TIME_PRECISION = "s"
DEFAULT_PORT = 8086


@dataclass(frozen=True)
class InfluxConnection:
    """Parsed form of the INFLUXDB_CONNECTION address."""

    host: str
    port: int
    ssl: bool
    username: str
    password: str
    path: str

    @classmethod
    def from_url(cls, url: str) -> InfluxConnection:
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ConfigurationError("Unsupported InfluxDB address, expected http(s)://host[:port]")
        try:
            port = parts.port or DEFAULT_PORT
        except ValueError as e:
            raise ConfigurationError("Invalid port in InfluxDB address") from e
        return cls(
            host=parts.hostname,
            port=port,
            ssl=parts.scheme == "https",
            username=unquote(parts.username) if parts.username else "root",
            password=unquote(parts.password) if parts.password else "root",
            path=parts.path.strip("/"),
        )

    @property
    def address(self) -> str:
        """Address without credentials, safe to log."""
        scheme = "https" if self.ssl else "http"
        suffix = f"/{self.path}" if self.path else ""
        return f"{scheme}://{self.host}:{self.port}{suffix}"


class InfluxSink:
    """Writes one cycle's points to InfluxDB in a single batch."""

    def __init__(self, settings: InfluxSettings) -> None:
        self._settings = settings
        self._connection = InfluxConnection.from_url(settings.connection)

    @property
    def connection(self) -> InfluxConnection:
        return self._connection

    def _open(self) -> InfluxDBClient:
        conn = self._connection
        return InfluxDBClient(
            host=conn.host,
            port=conn.port,
            username=conn.username,
            password=conn.password,
            database=DATABASE,
            ssl=conn.ssl,
            verify_ssl=self._settings.verify_ssl,
            timeout=self._settings.timeout_seconds,
            path=conn.path,
        )

    def write(self, points: Sequence[MetricPoint]) -> int:
        """Write all points in one call. Returns the number of points written."""
        if not points:
            logger.info("No points to write")
            return 0

        batch = [point.to_influx() for point in points]
        client = self._open()
        try:
            client.write_points(batch, time_precision=TIME_PRECISION, database=DATABASE)
        except (InfluxDBClientError, InfluxDBServerError, requests.RequestException) as exc:
            raise SinkWriteError(
                f"Failed to write {len(batch)} points to InfluxDB: {exc}",
                {"host": self._connection.host, "database": DATABASE},
            ) from exc
        finally:
            client.close()

        logger.info(
            "Wrote %d points to %s, database %s",
            len(batch),
            self._connection.address,
            DATABASE,
        )
        return len(batch)
