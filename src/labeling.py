"""
Page labeling.

Collects one raw header from every active rating system that has labels
for the current page and hands the whole set to the matching combiner,
exactly once per render.

Usage:
    from labeling import build_http_headers
    from pics_request import PicsRequestContext

    headers = build_http_headers(
        {"rsaci": [record]},
        PicsRequestContext(request.headers.get("Protocol-Request")),
    )
"""

import logging
from collections.abc import Mapping, Sequence

from pics_labels import combine_html_headers, combine_pics_headers
from pics_request import PicsRequestContext
from rating_systems import (
    LabelRecord,
    RatingSystem,
    get_active_rating_systems,
    get_html_header,
    get_http_header,
)

logger = logging.getLogger(__name__)


def _labelled_systems(
    records_by_system: Mapping[str, Sequence[LabelRecord]],
    active: Mapping[str, RatingSystem],
):
    for system_id, system in active.items():
        records = records_by_system.get(system_id)
        if records:
            yield system, records

    for system_id in records_by_system:
        if system_id not in active:
            logger.warning("Ignoring labels for inactive rating system %s", system_id)


def build_http_headers(
    records_by_system: Mapping[str, Sequence[LabelRecord]],
    context: PicsRequestContext,
    active: Mapping[str, RatingSystem] | None = None,
) -> list[str]:
    """
    Build the consolidated HTTP label headers for a page.

    Args:
        records_by_system: Label records of the page's items, per system id
        context: Protocol request context of the current render
        active: Active rating systems (defaults to the configured ones)

    Returns:
        Header lines to send, PICS labels consolidated into one
    """
    if active is None:
        active = get_active_rating_systems()

    headers = []
    for system, records in _labelled_systems(records_by_system, active):
        header = get_http_header(system, records, context)
        if header:
            headers.append(header)

    active_services = [system.system_url() for system in active.values()]
    return combine_pics_headers(headers, active_services, context)


def build_html_headers(
    records_by_system: Mapping[str, Sequence[LabelRecord]],
    active: Mapping[str, RatingSystem] | None = None,
) -> list[str]:
    """Build the consolidated HTML head elements for a page."""
    if active is None:
        active = get_active_rating_systems()

    headers = []
    for system, records in _labelled_systems(records_by_system, active):
        header = get_html_header(system, records)
        if header:
            headers.append(header)

    return combine_html_headers(headers)


def split_header_line(line: str) -> tuple[str, str]:
    """Split a raw 'Name: value' header line for a response object."""
    name, _, value = line.partition(":")
    return name.strip(), value.strip()
