"""
PICS-1.1 label encoding and header consolidation.

Every active rating system produces one raw header per page. Those that
speak PICS produce a "PICS-Label: (PICS-1.1 ...)" header (or the equivalent
meta tag); the functions here turn label records into such headers and
merge the headers of all systems into the single consolidated label that
PICS requires, honoring the client's protocol request when there is one.

All text interpolated into a label (comments, requested service URLs) is
passed through sanitize_label_text() first.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pics_request import DetailLevel, PicsRequestContext

if TYPE_CHECKING:
    from rating_systems.base import LabelRecord

logger = logging.getLogger(__name__)

HTTP_LABEL_START = "PICS-Label: (PICS-1.1 "
HTTP_LABEL_END = ")"
META_LABEL_START = "<meta http-equiv='PICS-Label' content='(PICS-1.1 "
META_LABEL_END = ")' />"

PROTOCOL_ADVERTISEMENT = "Protocol: {PICS-1.1 {headers PICS-Label}}"

TIMESTAMP_FORMAT = "%Y.%m.%dT%H:%M-0000"

# Quote, CR, LF, NUL and backslash would let a value break out of its label
_UNSAFE_LABEL_CHARS = re.compile(r'["\r\n\0\\]')


def sanitize_label_text(text: str) -> str:
    """Strip characters that could inject into a PICS label."""
    return _UNSAFE_LABEL_CHARS.sub("", text)


def format_label_timestamp(timestamp: float) -> str:
    """Format a POSIX timestamp the way PICS 'on' options expect (UTC)."""
    return datetime.fromtimestamp(timestamp, UTC).strftime(TIMESTAMP_FORMAT)


# ============================================================
# Encoder
# ============================================================

def encode_label_options(record: "LabelRecord", detail: DetailLevel) -> str:
    """
    Build the option clauses of a label for the requested detail level.

    Levels are cumulative: full and signed add generic and comment options
    on top of what short adds, and minimal adds nothing.
    """
    detail = DetailLevel(detail)
    options = ""

    if detail in (DetailLevel.FULL, DetailLevel.SIGNED):
        comment = sanitize_label_text(record.effective_comment)
        options += "gen false "
        if comment:
            options += f'comment "{comment}" '

    if detail is not DetailLevel.MINIMAL:
        options += f'on "{format_label_timestamp(record.timestamp)}" '

    return options


def encode_header(
    system_url: str,
    record: "LabelRecord",
    detail: DetailLevel = DetailLevel.MINIMAL,
) -> str:
    """
    Create a single PICS-Label HTTP header from one label record.

    Args:
        system_url: URL identifying the rating service
        record: The (possibly combined) label record for the page
        detail: Requested label completeness

    Returns:
        The raw header line, e.g. 'PICS-Label: (PICS-1.1 "url" l r (n 0))'
    """
    options = encode_label_options(record, detail)
    return (
        f'{HTTP_LABEL_START}"{system_url}" l {options}r ({record.label.data})'
        f"{HTTP_LABEL_END}"
    )


def encode_meta_header(system_url: str, record: "LabelRecord") -> str:
    """Create a PICS-Label meta tag. HTML labels never carry options."""
    return f'{META_LABEL_START}"{system_url}" l r ({record.label.data}){META_LABEL_END}'


# ============================================================
# Label list handling
# ============================================================

def split_label_list(body: str) -> list[str]:
    """
    Split the body of a PICS-1.1 label list into single-service labels.

    Each label starts with a quoted service URL and ends with a
    parenthesized group (ratings or error), so a new label begins at a
    top-level quoted string that directly follows such a group.
    """
    fragments = []
    start = 0
    depth = 0
    in_quote = False
    after_group = False

    for index, char in enumerate(body):
        if in_quote:
            if char == '"':
                in_quote = False
            continue

        if char == '"':
            if depth == 0:
                if after_group:
                    fragments.append(body[start:index].strip())
                    start = index
                after_group = False
            in_quote = True
        elif char == "(":
            if depth == 0:
                after_group = False
            depth += 1
        elif char == ")":
            if depth > 0:
                depth -= 1
            if depth == 0:
                after_group = True
        elif depth == 0 and not char.isspace():
            after_group = False

    tail = body[start:].strip()
    if tail:
        fragments.append(tail)
    return fragments


def label_service(fragment: str) -> str | None:
    """Return the service URL a label fragment is for, if it has one."""
    if not fragment.startswith('"'):
        return None
    end = fragment.find('"', 1)
    if end == -1:
        return None
    return fragment[1:end]


def _partition(headers: Iterable[str], start: str, end: str) -> tuple[list[str], list[str]]:
    """Separate PICS label fragments from all other headers."""
    pics = []
    notpics = []
    for header in headers:
        if header.startswith(start) and header.endswith(end) and len(header) >= len(start) + len(end):
            pics.extend(split_label_list(header[len(start):len(header) - len(end)]))
        else:
            notpics.append(header)
    return pics, notpics


def _requested_labels(
    fragments: Sequence[str],
    services: Sequence[str],
    active_services: Iterable[str],
) -> list[str]:
    """Filter fragments by requested service, adding errors for the rest."""
    active = set(active_services)
    labels = []
    labelled = set()

    for fragment in fragments:
        service = label_service(fragment)
        if service is None:
            logger.debug("Dropping PICS label without a service URL: %r", fragment)
            continue
        labelled.add(service)
        if service in services:
            labels.append(fragment)

    # Throw errors for requests not filled
    for service in services:
        if service in labelled:
            continue
        url = sanitize_label_text(service)
        if service in active:
            labels.append(f'"{url}" l error (not-labeled)')
        else:
            labels.append(f'"{url}" error (service-unavailable)')

    return labels


# ============================================================
# Combiners
# ============================================================

def combine_pics_headers(
    headers: Iterable[str],
    active_services: Iterable[str],
    context: PicsRequestContext | None = None,
) -> list[str]:
    """
    Consolidate the HTTP headers of all rating systems for one page.

    Args:
        headers: Raw headers generated by all rating systems
        active_services: System URLs of all active rating systems
        context: Protocol request context of the current render

    Returns:
        The non-PICS headers unchanged, followed by the Protocol header when
        a request was honored and one consolidated PICS-Label header
    """
    pics, notpics = _partition(headers, HTTP_LABEL_START, HTTP_LABEL_END)

    request = context.parsed if context is not None else None
    if request is not None:
        if PROTOCOL_ADVERTISEMENT not in notpics:
            notpics.append(PROTOCOL_ADVERTISEMENT)
        pics = _requested_labels(pics, request.services, active_services)
        logger.debug(
            "Answered PICS request for %d service(s) with %d label(s)",
            len(request.services), len(pics),
        )

    if pics:
        notpics.append(HTTP_LABEL_START + " ".join(pics) + HTTP_LABEL_END)

    return notpics


def combine_html_headers(headers: Iterable[str]) -> list[str]:
    """Consolidate the meta headers of all rating systems for one page."""
    pics, notpics = _partition(headers, META_LABEL_START, META_LABEL_END)

    if pics:
        notpics.append(META_LABEL_START + " ".join(pics) + META_LABEL_END)

    return notpics
