"""
Pluggable rating systems.

Each rating system defines its own categories, label data format and
combination rules. The PICS label core works with any of them through the
RatingSystem interface.

Usage:
    from rating_systems import get_rating_system, LabelRecord, Label

    rsaci = get_rating_system("rsaci")
    data = rsaci.validate_input({"n": ["0"], "s": ["0"], "v": ["2"], "l": ["1"]})
    label = Label(data=rsaci.label_from_data(data.values))
"""

from rating_systems.base import (
    CategoryDefinition,
    Label,
    LabelData,
    LabelDataError,
    LabelRecord,
    PicsRatingSystem,
    RatingError,
    RatingPermissionError,
    RatingSystem,
    RatingSystemNotFoundError,
    ValueDefinition,
    get_html_header,
    get_http_header,
)
from rating_systems.registry import (
    available_rating_systems,
    get_active_rating_systems,
    get_rating_system,
    register_rating_system,
)

__all__ = [
    "CategoryDefinition",
    "Label",
    "LabelData",
    "LabelDataError",
    "LabelRecord",
    "PicsRatingSystem",
    "RatingError",
    "RatingPermissionError",
    "RatingSystem",
    "RatingSystemNotFoundError",
    "ValueDefinition",
    "available_rating_systems",
    "get_active_rating_systems",
    "get_html_header",
    "get_http_header",
    "get_rating_system",
    "register_rating_system",
]
