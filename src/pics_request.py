"""
PICS Protocol Request parsing.

A PICS-aware client may ask for labels from specific rating services, and
for a specific level of detail, by sending a protocol request header:

    Protocol-Request: {PICS-1.1 {params full services "http://a/" "http://b/"}}}

The parsing below follows the de facto wire shape (fixed prefix, positional
substring search) rather than the full PICS grammar. It is isolated behind
parse_protocol_request() so it can be replaced without touching callers.

Usage:
    from pics_request import PicsRequestContext

    context = PicsRequestContext(request.headers.get("Protocol-Request"))
    if context.parsed:
        print(context.parsed.services)
"""

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

# Name of the inbound request header (HTTP_PROTOCOL_REQUEST in CGI terms)
PROTOCOL_REQUEST_HEADER = "Protocol-Request"

REQUEST_START = "{pics-1.1 {params "
SERVICES_MARKER = 'services "'
REQUEST_END = '"}}}'
SERVICE_SEPARATOR = '" "'

# Requests naming this many services or more are rejected
MAX_REQUESTED_SERVICES = 10


class DetailLevel(Enum):
    """Completeness of a PICS label, from least to most verbose."""
    MINIMAL = "minimal"
    SHORT = "short"
    FULL = "full"
    SIGNED = "signed"


# Checked in this order; the first substring found wins.
_DETAIL_PRIORITY = (
    ("params short", DetailLevel.SHORT),
    ("params full", DetailLevel.FULL),
    ("params signed", DetailLevel.SIGNED),
)


@dataclass(frozen=True)
class ParsedPicsRequest:
    """A recognized PICS protocol request."""
    completeness: DetailLevel
    services: tuple[str, ...]


def parse_protocol_request(header_value: str | None) -> ParsedPicsRequest | None:
    """
    Parse a PICS protocol request header.

    Malformed requests are not an error: anything that does not match the
    expected shape is treated as if no request had been sent.

    Args:
        header_value: Raw value of the Protocol-Request header, or None

    Returns:
        ParsedPicsRequest, or None if no valid request is present
    """
    if not header_value:
        return None

    lowered = header_value.lower()
    if not lowered.startswith(REQUEST_START):
        return None

    middle = lowered.find(SERVICES_MARKER)
    end = lowered.find(REQUEST_END)
    if middle == -1 or end == -1:
        logger.debug("PICS request missing services list: %r", header_value)
        return None

    payload_start = middle + len(SERVICES_MARKER)
    if end < payload_start:
        logger.debug("PICS request terminator precedes services list: %r", header_value)
        return None

    completeness = DetailLevel.MINIMAL
    for needle, level in _DETAIL_PRIORITY:
        if needle in lowered:
            completeness = level
            break

    # Service URLs keep their original case
    payload = header_value[payload_start:end]
    if '"' in payload:
        services = tuple(payload.split(SERVICE_SEPARATOR))
    else:
        services = (payload,)

    # sanity check
    if len(services) >= MAX_REQUESTED_SERVICES:
        logger.warning(
            "Ignoring PICS request naming %d services (limit %d)",
            len(services), MAX_REQUESTED_SERVICES - 1,
        )
        return None

    return ParsedPicsRequest(completeness=completeness, services=services)


class PicsRequestContext:
    """
    Parsed protocol request for a single page render.

    The header is parsed at most once, on first access, and the result
    (including "no request") is reused for the rest of the render so every
    rating system sees the same request. Create one context per request;
    never share one between renders.
    """

    _UNPARSED = object()

    def __init__(self, header_value: str | None = None):
        self.header_value = header_value
        self._parsed = self._UNPARSED

    @property
    def parsed(self) -> ParsedPicsRequest | None:
        if self._parsed is self._UNPARSED:
            self._parsed = parse_protocol_request(self.header_value)
        return self._parsed

    @property
    def detail_level(self) -> DetailLevel:
        """Requested completeness, or minimal when there is no request."""
        parsed = self.parsed
        return parsed.completeness if parsed else DetailLevel.MINIMAL

    def __repr__(self) -> str:
        return f"PicsRequestContext(header_value={self.header_value!r})"
