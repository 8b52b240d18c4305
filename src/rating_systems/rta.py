"""
RTA ("Restricted To Adults") rating system.

RTA is not a PICS vocabulary: a page is either labeled adults-only with a
fixed label string or not labeled at all. Its headers pass through the
PICS combiners untouched.
"""

from collections.abc import Mapping, Sequence

from pics_request import PicsRequestContext
from rating_systems.base import (
    CategoryDefinition,
    Label,
    LabelData,
    LabelDataError,
    LabelRecord,
    RatingSystem,
    ValueDefinition,
)

RTA_LABEL = "RTA-5042-1996-1400-1577-RTA"
RTA_SYSTEM_URL = "http://www.rtalabel.org/"

RTA_STRUCTURE: dict[str, CategoryDefinition] = {
    "rta": CategoryDefinition(
        "Restricted To Adults",
        {
            "adult": ValueDefinition(
                name="Adults only",
                description="Content is restricted to adults.",
                exclusive=True,
            ),
        },
    ),
}


class RtaRatingSystem(RatingSystem):
    """Adults-only labeling with the RTA label string."""

    structure = RTA_STRUCTURE

    def name(self) -> str:
        return "RTA"

    def description(self) -> str:
        return "Restricted To Adults label for content unsuitable for minors."

    def system_url(self) -> str:
        return RTA_SYSTEM_URL

    def make_http_header(self, record: LabelRecord, context: PicsRequestContext) -> str:
        if record.label.data != RTA_LABEL:
            return ""
        return f"Rating: {RTA_LABEL}"

    def make_html_header(self, record: LabelRecord) -> str:
        if record.label.data != RTA_LABEL:
            return ""
        return f'<meta name="RATING" content="{RTA_LABEL}" />'

    def data_from_label(self, label: Label) -> LabelData:
        if label.data == RTA_LABEL:
            return LabelData(values={"rta": ["adult"]})
        if label.data:
            raise LabelDataError(f"Unknown RTA label data: {label.data!r}")
        return LabelData(values={"rta": []})

    def label_from_data(self, values: Mapping[str, Sequence[str]]) -> str:
        return RTA_LABEL if "adult" in (values.get("rta") or []) else ""

    def combine(self, records: Sequence[LabelRecord]) -> LabelRecord:
        """Any adults-only item makes the whole page adults-only."""
        restricted = any(record.label.data == RTA_LABEL for record in records)
        return LabelRecord(
            label=Label(data=RTA_LABEL if restricted else ""),
            timestamp=max(record.timestamp for record in records),
        )
