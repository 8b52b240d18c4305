"""
Rating systems blueprint.

This blueprint handles:
- Health check
- Listing the active rating systems and their category structure
- Validating label selections and previewing the headers they produce
- Previewing the consolidated labels of a page with several items
"""

import logging
import time
from collections import defaultdict

from flask import Blueprint, jsonify, request

from labeling import build_html_headers, build_http_headers
from rating_systems import (
    Label,
    LabelDataError,
    LabelRecord,
    RatingError,
    RatingSystemNotFoundError,
    get_html_header,
    get_http_header,
)

from .pics_middleware import (
    attach_page_labels,
    get_active_system,
    get_active_systems,
    get_pics_context,
)
from .utils import (
    MAX_COMMENT_LENGTH,
    MAX_LABEL_DATA_LENGTH,
    MAX_PAGE_ITEMS,
    error_response,
    record_from_item,
    validate_json_schema,
    validate_timestamp,
)

logger = logging.getLogger(__name__)

ratings_bp = Blueprint("ratings", __name__)


@ratings_bp.errorhandler(RatingSystemNotFoundError)
def handle_not_found(error):
    return error_response(str(error), 404)


@ratings_bp.errorhandler(RatingError)
def handle_rating_error(error):
    return error_response(str(error), 400)


@ratings_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    from api import __version__

    return jsonify({
        "status": "healthy",
        "service": "PICS content rating",
        "version": __version__,
        "rating_systems": list(get_active_systems()),
    })


@ratings_bp.route("/rating-systems", methods=["GET"])
def list_rating_systems():
    """List the active rating systems."""
    return jsonify({
        "rating_systems": [
            {"id": system_id, **system.get_info()}
            for system_id, system in get_active_systems().items()
        ],
    })


@ratings_bp.route("/rating-systems/<system_id>", methods=["GET"])
def get_rating_system_detail(system_id: str):
    """
    Get one rating system with its category structure.

    Returns:
        System info plus categories in display order
    """
    system = get_active_system(system_id)
    return jsonify({
        "id": system_id,
        **system.get_info(),
        "categories": {key: category.to_dict() for key, category in system.structure.items()},
    })


@ratings_bp.route("/rating-systems/<system_id>/labels", methods=["POST"])
def create_label(system_id: str):
    """
    Validate label selections and return the resulting label.

    The response itself is labeled with the new label.

    Request body:
    {
        "values": {"n": ["0"], "s": ["0"], "v": ["2"], "l": ["1"]},
        "comment": "optional free text"
    }
    """
    system = get_active_system(system_id)
    data = request.get_json(silent=True)

    is_valid, error = validate_json_schema(
        data,
        required_fields={"values": dict},
        optional_fields={"comment": str},
        max_lengths={"comment": MAX_COMMENT_LENGTH},
    )
    if not is_valid:
        return error_response(error)

    label_data = system.validate_input(data["values"])
    if not label_data.is_valid:
        return error_response("Invalid label selections", errors=label_data.errors)

    label = Label(data=system.label_from_data(label_data.values), comments=data.get("comment") or "")
    record = LabelRecord(label=label, timestamp=time.time())
    attach_page_labels(system_id, [record])

    logger.info("Validated %s label %r", system_id, label.data)
    return jsonify({
        "system": system_id,
        "data": label.data,
        "values": label_data.values,
        "http_header": get_http_header(system, [record], get_pics_context()),
        "html_header": get_html_header(system, [record]),
    })


@ratings_bp.route("/pages/labels", methods=["POST"])
def preview_page_labels():
    """
    Preview the consolidated labels for a page showing several items.

    Honors the Protocol-Request header of this request.

    Request body:
    {
        "items": [
            {"system": "rsaci", "data": "n 0 s 0 v 2 l 0", "timestamp": 1700000000},
            {"system": "rsaci", "data": "n 1 s 0 v 0 l 3", "comment": "forum thread"}
        ]
    }
    """
    data = request.get_json(silent=True)
    is_valid, error = validate_json_schema(data, required_fields={"items": list})
    if not is_valid:
        return error_response(error)

    items = data["items"]
    if not items or len(items) > MAX_PAGE_ITEMS:
        return error_response(f"A page needs between 1 and {MAX_PAGE_ITEMS} items")

    records_by_system = defaultdict(list)
    for index, item in enumerate(items):
        is_valid, error = validate_json_schema(
            item,
            required_fields={"system": str, "data": str},
            optional_fields={"comment": str},
            max_lengths={"data": MAX_LABEL_DATA_LENGTH, "comment": MAX_COMMENT_LENGTH},
        )
        if not is_valid:
            return error_response(f"Item {index}: {error}")

        error = validate_timestamp(item.get("timestamp"))
        if error:
            return error_response(f"Item {index}: {error}")

        system = get_active_system(item["system"])
        record = record_from_item(item)
        try:
            system.data_from_label(record.label)
        except LabelDataError as e:
            return error_response(f"Item {index}: {e}")
        records_by_system[item["system"]].append(record)

    active = get_active_systems()
    return jsonify({
        "http_headers": build_http_headers(records_by_system, get_pics_context(), active),
        "html_headers": build_html_headers(records_by_system, active),
    })
