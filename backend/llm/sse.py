"""Server-sent event decoding for provider streams."""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def decode_data_line(line: str) -> dict[str, Any] | None:
    """Decode one SSE line into its JSON payload.

    Returns None for anything that is not a ``data:`` frame carrying a JSON
    object: comments, ``event:`` lines, blank lines, the ``[DONE]`` sentinel
    and malformed or partial JSON.
    """
    if not line.startswith(DATA_PREFIX):
        return None

    payload = line[len(DATA_PREFIX) :].strip()
    if not payload or payload == DONE_SENTINEL:
        return None

    try:
        event = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("Skipping malformed SSE payload: %.80s", payload)
        return None

    return event if isinstance(event, dict) else None
