from __future__ import annotations

import logging
from dataclasses import dataclass

from app.interpretation.errors import ErrorKind, fail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Envelope:
    text: str
    boundary_found: bool


def trim_response(raw: str | None) -> str:
    trimmed = (raw or "").strip()
    if not trimmed:
        raise fail(ErrorKind.EMPTY_UPSTREAM_RESPONSE, raw)
    return trimmed


def locate_envelope(trimmed: str) -> Envelope:
    start = trimmed.find("{")
    end = trimmed.rfind("}")
    if start >= 0 and end > start:
        envelope = trimmed[start : end + 1]
        logger.debug("envelope_extracted start=%s end=%s length=%s", start, end, len(envelope))
        return Envelope(text=envelope, boundary_found=True)

    logger.warning("envelope_boundary_not_found length=%s", len(trimmed))
    return Envelope(text=trimmed, boundary_found=False)


def extract_envelope(raw: str | None) -> Envelope:
    """Isolate the JSON object candidate between the first '{' and the last '}'.

    Empty or whitespace-only input raises an ``InterpretationError`` carrying
    ``EmptyUpstreamResponse``. A missing brace pair is not terminal: the whole
    trimmed text is returned so bare JSON still gets a chance to parse.
    """
    return locate_envelope(trim_response(raw))
