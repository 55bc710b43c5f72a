"""Decode the raw list payload into an InstanceSnapshot."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from .exceptions import MalformedPayloadError, UnexpectedShapeError
from .models import InstanceSnapshot

logger = logging.getLogger(__name__)


def decode_snapshot(payload: bytes) -> InstanceSnapshot:
    """Parse payload bytes as JSON and validate them into a snapshot.

    Raises MalformedPayloadError when the bytes are not JSON, and
    UnexpectedShapeError when the JSON does not fit the snapshot model.
    """
    if not payload or not payload.strip():
        raise MalformedPayloadError("Empty payload", {"size": len(payload)})

    try:
        document = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedPayloadError(
            f"Payload is not valid JSON: {e}", {"size": len(payload)}
        ) from e

    if not isinstance(document, dict):
        raise UnexpectedShapeError(
            f"Expected a JSON object at top level, got {type(document).__name__}"
        )

    try:
        snapshot = InstanceSnapshot.model_validate(document)
    except ValidationError as e:
        raise UnexpectedShapeError(
            f"Payload does not match the instance list shape ({e.error_count()} errors)",
            {"errors": e.errors(include_url=False)[:10]},
        ) from e

    logger.debug(
        "Decoded snapshot: %d instances, %d total users",
        snapshot.total_instances,
        snapshot.total_users,
    )
    return snapshot
