"""
Flask integration for PICS page labels.

Each request gets its own PicsRequestContext, built from the client's
Protocol-Request header, so concurrent requests never share a parsed
request. Views attach the label records of the items they render; after
the view returns, one header per active rating system is generated and
the set is consolidated into the response headers.

Usage:
    from api.pics_middleware import attach_page_labels

    @app.route("/post/<int:post_id>")
    def show_post(post_id):
        attach_page_labels("rsaci", [record_for(post_id)])
        return render_template("post.html")

Templates can emit the matching meta tags with {{ pics_meta_tags() }}.
"""

import logging
from collections.abc import Iterable

from flask import Flask, Response, current_app, g, request
from markupsafe import Markup

from labeling import build_html_headers, build_http_headers, split_header_line
from monitoring.logging import LoggingContext
from pics_request import PROTOCOL_REQUEST_HEADER, PicsRequestContext
from rating_systems import LabelRecord, RatingSystem, RatingSystemNotFoundError

logger = logging.getLogger(__name__)

EXTENSION_KEY = "pics_rating_systems"


def get_active_systems() -> dict[str, RatingSystem]:
    """Rating systems activated for the current app."""
    return current_app.extensions[EXTENSION_KEY]


def get_active_system(system_id: str) -> RatingSystem:
    """
    Look up one active rating system.

    Raises:
        RatingSystemNotFoundError: If the system is unknown or inactive
    """
    system = get_active_systems().get(system_id)
    if system is None:
        raise RatingSystemNotFoundError(f"Rating system not found: {system_id}")
    return system


def get_pics_context() -> PicsRequestContext:
    """Protocol request context of the current request."""
    if "pics_context" not in g:
        g.pics_context = PicsRequestContext(request.headers.get(PROTOCOL_REQUEST_HEADER))
    return g.pics_context


def attach_page_labels(system_id: str, records: Iterable[LabelRecord]) -> None:
    """Add label records of rendered items to the current page."""
    get_active_system(system_id)
    if "page_labels" not in g:
        g.page_labels = {}
    g.page_labels.setdefault(system_id, []).extend(records)


def pics_meta_tags() -> Markup:
    """HTML head elements for the labels attached so far."""
    labels = g.get("page_labels")
    if not labels:
        return Markup("")
    return Markup("\n".join(build_html_headers(labels, get_active_systems())))


def setup_pics_labels(app: Flask, systems: dict[str, RatingSystem]) -> None:
    """
    Install PICS labeling on a Flask app.

    Args:
        app: Flask application instance
        systems: Active rating systems, keyed by identifier
    """
    app.extensions[EXTENSION_KEY] = systems
    app.add_template_global(pics_meta_tags, "pics_meta_tags")

    @app.before_request
    def create_pics_context():
        g.page_labels = {}
        get_pics_context()

    @app.after_request
    def add_label_headers(response: Response) -> Response:
        labels = g.get("page_labels")
        if not labels:
            return response

        context = get_pics_context()
        with LoggingContext(pics_systems=",".join(labels)):
            for line in build_http_headers(labels, context, get_active_systems()):
                name, value = split_header_line(line)
                response.headers.add(name, value)

            if context.parsed:
                logger.debug(
                    "Labeled response for PICS request (%s)",
                    context.parsed.completeness.value,
                )
        return response
