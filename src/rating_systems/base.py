"""
Abstract base class for rating systems.

This module defines the interface that all rating systems must implement,
the records they exchange with the label core, and the shared helpers
that turn a page's label records into a single raw header.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pics_labels import encode_header, encode_meta_header
from pics_request import PicsRequestContext

logger = logging.getLogger(__name__)


class RatingError(Exception):
    """Base exception for rating-related errors."""
    pass


class RatingSystemNotFoundError(RatingError):
    """Raised when no rating system is registered under an identifier."""
    pass


class RatingPermissionError(RatingError):
    """Raised when the caller may not perform an administrative action."""
    pass


class LabelDataError(RatingError):
    """Raised when a stored label cannot be decoded by its rating system."""
    pass


# ============================================================
# Records
# ============================================================

@dataclass(frozen=True)
class ValueDefinition:
    """One selectable rating value within a category."""
    name: str
    description: str = ""
    exclusive: bool = False


@dataclass(frozen=True)
class CategoryDefinition:
    """A rating category and the values that may be selected for it."""
    name: str
    values: dict[str, ValueDefinition]
    optional: bool = False

    @property
    def mixable(self) -> bool:
        """True when two or more values may be selected together."""
        return sum(1 for value in self.values.values() if not value.exclusive) >= 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "optional": self.optional,
            "input_type": "checkbox" if self.mixable else "radio",
            "values": {
                key: {
                    "name": value.name,
                    "description": value.description,
                    "exclusive": value.exclusive,
                }
                for key, value in self.values.items()
            },
        }


@dataclass(frozen=True)
class Label:
    """A stored rating. `data` is in whatever format the rating system uses."""
    data: str
    comments: str = ""


@dataclass(frozen=True)
class LabelRecord:
    """The label of one content item on the page being rendered."""
    label: Label
    timestamp: float
    comment: str | None = None

    @property
    def effective_comment(self) -> str:
        """The record's own comment, falling back to the label's."""
        return self.label.comments if self.comment is None else self.comment


@dataclass
class LabelData:
    """Selected values per category, plus any validation errors."""
    values: dict[str, list[str]] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


# ============================================================
# Rating system interface
# ============================================================

class RatingSystem(ABC):
    """
    Abstract base class for rating systems.

    A rating system knows its own category structure, how to encode a
    selection as label data and back, how to render one label record as a
    raw header, and how to combine several records into the most
    conservative one.
    """

    #: Ordered category definitions. Must not change after construction.
    structure: dict[str, CategoryDefinition] = {}

    @abstractmethod
    def name(self) -> str:
        """Human name of the rating system."""
        pass

    @abstractmethod
    def description(self) -> str:
        """Long description of the rating system."""
        pass

    @abstractmethod
    def system_url(self) -> str:
        """Machine name (rating service URL) of the rating system."""
        pass

    @abstractmethod
    def make_http_header(self, record: LabelRecord, context: PicsRequestContext) -> str:
        """
        Return the raw HTTP header for a single label record.

        Args:
            record: The label for the current page
            context: Protocol request context of the current render

        Returns:
            Header line, or an empty string if there is nothing to send
        """
        pass

    @abstractmethod
    def make_html_header(self, record: LabelRecord) -> str:
        """Return the raw HTML head element for a single label record."""
        pass

    @abstractmethod
    def data_from_label(self, label: Label) -> LabelData:
        """
        Decode a stored label.

        Raises:
            LabelDataError: If the label data cannot be understood
        """
        pass

    @abstractmethod
    def label_from_data(self, values: Mapping[str, Sequence[str]]) -> str:
        """Encode selected values as label data. Inverse of data_from_label."""
        pass

    @abstractmethod
    def combine(self, records: Sequence[LabelRecord]) -> LabelRecord:
        """
        Return a record with the most conservative (severe) combination of
        several records generated by this rating system.
        """
        pass

    # Optional methods with default implementations

    def validate_input(self, form: Mapping[str, Any]) -> LabelData:
        """Validate submitted selections against the category structure."""
        from rating_systems.validation import validate_label_input

        return validate_label_input(self.structure, form)

    def flush_label_file(self, labels: Sequence[Label]) -> None:
        """
        Write out a label file after labels are saved.

        Default implementation does nothing.
        """
        pass

    def uninstall(self, authorized: bool) -> None:
        """
        Check permissions, then remove module-specific data.

        Raises:
            RatingPermissionError: If the caller may not uninstall modules
        """
        if not authorized:
            raise RatingPermissionError(
                f"Not permitted to uninstall rating system {self.name()!r}"
            )
        logger.info("Uninstalling rating system %s", self.system_url())
        self.do_uninstall()

    def do_uninstall(self) -> None:
        """
        Module-specific uninstall tasks, such as deleting label files.

        Default implementation does nothing.
        """
        pass

    def get_info(self) -> dict[str, Any]:
        return {
            "name": self.name(),
            "description": self.description(),
            "system_url": self.system_url(),
        }


class PicsRatingSystem(RatingSystem):
    """Rating system whose labels use the common PICS-1.1 header format."""

    def make_http_header(self, record: LabelRecord, context: PicsRequestContext) -> str:
        return encode_header(self.system_url(), record, context.detail_level)

    def make_html_header(self, record: LabelRecord) -> str:
        return encode_meta_header(self.system_url(), record)


# ============================================================
# Header helpers
# ============================================================

def _page_record(system: RatingSystem, records: Sequence[LabelRecord]) -> LabelRecord:
    """Pick the single record for a page, combining when there are several."""
    if not records:
        raise ValueError(f"No label records for rating system {system.system_url()!r}")
    if len(records) == 1:
        return records[0]
    return system.combine(list(records))


def get_http_header(
    system: RatingSystem,
    records: Sequence[LabelRecord],
    context: PicsRequestContext,
) -> str:
    """
    Return the raw HTTP header for the label(s) of one or more items.

    Args:
        system: Rating system that generated the records
        records: Label records of the items on the current page
        context: Protocol request context of the current render

    Raises:
        ValueError: If records is empty
    """
    return system.make_http_header(_page_record(system, records), context)


def get_html_header(system: RatingSystem, records: Sequence[LabelRecord]) -> str:
    """Return the raw HTML header for the label(s) of one or more items."""
    return system.make_html_header(_page_record(system, records))
