"""HTTP client for the upstream instance list."""

from __future__ import annotations

import logging

import httpx

from .exceptions import NetworkError, ServiceUnavailableError, UpstreamError
from .metrics_exporter import record_fetch_retry
from .retry import RetryConfig, with_retry_sync
from .settings import SourceSettings

logger = logging.getLogger(__name__)

USER_AGENT = "instances-collector/0.1.0"


class SnapshotFetcher:
    """Synchronous fetcher for the instance list, with retry on transient failures."""

    def __init__(self, settings: SourceSettings, client: httpx.Client | None = None) -> None:
        self._url = settings.url
        self._client = client or httpx.Client(
            timeout=settings.timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )
        self._retry = RetryConfig(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay_seconds,
            max_delay=settings.retry_max_delay_seconds,
            retryable_exceptions=(NetworkError, ServiceUnavailableError),
        )

    def fetch_once(self) -> bytes:
        """Single GET attempt, mapping failures onto the collector error taxonomy."""
        try:
            resp = self._client.get(self._url)
        except httpx.TransportError as exc:
            raise NetworkError(f"GET {self._url} failed: {exc}", {"url": self._url}) from exc

        status = resp.status_code
        if status == 429 or status >= 500:
            raise ServiceUnavailableError(
                f"GET {self._url} returned {status}", {"url": self._url, "status": status}
            )
        if status >= 400:
            raise UpstreamError(
                f"GET {self._url} returned {status}", {"url": self._url, "status": status}
            )
        return resp.content

    def fetch(self) -> bytes:
        """Fetch the raw payload, retrying transient failures with backoff."""
        payload = with_retry_sync(
            self.fetch_once,
            config=self._retry,
            operation_name=f"GET {self._url}",
            on_retry=lambda exc, attempt: record_fetch_retry(),
        )
        logger.info("Fetched %d bytes from %s", len(payload), self._url)
        return payload

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()
