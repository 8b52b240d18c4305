"""
Shared utilities for the content rating API.

This module contains request validation helpers used across blueprints.
"""

import time
from typing import Any

from flask import jsonify

from rating_systems import Label, LabelRecord

# Bounded parameters - max values for iteration parameters
MAX_PAGE_ITEMS = 100
MAX_COMMENT_LENGTH = 1000
MAX_LABEL_DATA_LENGTH = 2000

# Last second of 9999-12-31 UTC
MAX_TIMESTAMP = 253402300799


def error_response(message: str, status: int = 400, **details: Any):
    """Build a JSON error response."""
    body = {"error": message}
    body.update(details)
    return jsonify(body), status


def validate_json_schema(
    data: Any,
    required_fields: dict[str, type | tuple[type, ...]],
    optional_fields: dict[str, type | tuple[type, ...]] | None = None,
    max_lengths: dict[str, int] | None = None,
) -> tuple[bool, str | None]:
    """
    Validate a JSON payload against a simple schema.

    Args:
        data: The JSON data to validate
        required_fields: Dict mapping field names to expected types
        optional_fields: Dict mapping optional field names to expected types
        max_lengths: Dict mapping field names to maximum string lengths

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(data, dict):
        return False, "Request body must be a JSON object"

    for field_name, expected_type in required_fields.items():
        if field_name not in data:
            return False, f"Missing required field: {field_name}"
        if not isinstance(data[field_name], expected_type):
            return False, f"Field '{field_name}' has the wrong type"

    for field_name, expected_type in (optional_fields or {}).items():
        if data.get(field_name) is not None and not isinstance(data[field_name], expected_type):
            return False, f"Field '{field_name}' has the wrong type"

    for field_name, max_len in (max_lengths or {}).items():
        if isinstance(data.get(field_name), str) and len(data[field_name]) > max_len:
            return False, f"Field '{field_name}' exceeds maximum length of {max_len}"

    return True, None


def validate_timestamp(value: Any) -> str | None:
    """Return an error message unless value is a usable POSIX timestamp."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "Field 'timestamp' has the wrong type"
    # NaN fails every comparison, so it is rejected here too
    if not 0 <= value <= MAX_TIMESTAMP:
        return f"Field 'timestamp' must be between 0 and {MAX_TIMESTAMP}"
    return None


def record_from_item(item: dict[str, Any]) -> LabelRecord:
    """Build a label record from a validated page item."""
    comment = item.get("comment")
    timestamp = item.get("timestamp")
    return LabelRecord(
        label=Label(data=item["data"]),
        timestamp=float(timestamp) if timestamp is not None else time.time(),
        comment=comment,
    )
