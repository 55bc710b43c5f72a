"""Exception hierarchy for the instances collector."""

from typing import Any


class CollectorError(Exception):
    """Base exception for all collector errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(CollectorError):
    """Errors that may succeed on retry or on the next cycle."""

    pass


class NetworkError(TransientError):
    """Network-related transient errors (timeout, connection refused)."""

    pass


class ServiceUnavailableError(TransientError):
    """Upstream temporarily unavailable (429 or 5xx responses)."""

    pass


class SinkWriteError(TransientError):
    """Writing the batch to InfluxDB failed."""

    pass


class PermanentError(CollectorError):
    """Errors that will not succeed on retry."""

    pass


class UpstreamError(PermanentError):
    """Upstream answered with a non-retryable status."""

    pass


class DecodeError(PermanentError):
    """Payload could not be turned into an instance snapshot."""

    pass


class MalformedPayloadError(DecodeError):
    """Payload is not valid JSON."""

    pass


class UnexpectedShapeError(DecodeError):
    """Payload is valid JSON but does not match the snapshot shape."""

    pass


class ConfigurationError(PermanentError):
    """Missing or invalid configuration."""

    pass
