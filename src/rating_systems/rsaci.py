"""
RSACi rating system.

Rates content for nudity, sex, violence and language on a scale of 0
(none) to 4 (most severe). Labels are stored in PICS rating syntax,
e.g. "n 0 s 0 v 2 l 1".
"""

import logging
from collections.abc import Mapping, Sequence

from rating_systems.base import (
    CategoryDefinition,
    Label,
    LabelData,
    LabelDataError,
    LabelRecord,
    PicsRatingSystem,
    ValueDefinition,
)

logger = logging.getLogger(__name__)

RSACI_SYSTEM_URL = "http://www.rsac.org/ratingsv01.html"


def _levels(*descriptions: str) -> dict[str, ValueDefinition]:
    return {
        str(level): ValueDefinition(name=f"Level {level}", description=text, exclusive=True)
        for level, text in enumerate(descriptions)
    }


RSACI_STRUCTURE: dict[str, CategoryDefinition] = {
    "n": CategoryDefinition("Nudity", _levels(
        "No nudity",
        "Revealing attire",
        "Partial nudity",
        "Frontal nudity",
        "Provocative frontal nudity",
    )),
    "s": CategoryDefinition("Sex", _levels(
        "No sexual activity portrayed; romance",
        "Passionate kissing",
        "Clothed sexual touching",
        "Non-explicit sexual touching",
        "Explicit sexual activity",
    )),
    "v": CategoryDefinition("Violence", _levels(
        "No aggressive violence; no natural or accidental violence",
        "Fighting",
        "Killing",
        "Killing with blood and gore",
        "Wanton and gratuitous violence",
    )),
    "l": CategoryDefinition("Language", _levels(
        "Inoffensive slang; no profanity",
        "Mild expletives",
        "Moderate expletives or profanity",
        "Obscene gestures",
        "Crude, vulgar language or extreme hate speech",
    )),
}


class RsaciRatingSystem(PicsRatingSystem):
    """The RSACi labeling vocabulary, served as PICS-1.1 labels."""

    structure = RSACI_STRUCTURE

    def name(self) -> str:
        return "RSACi"

    def description(self) -> str:
        return (
            "Recreational Software Advisory Council ratings for nudity, sex, "
            "violence and language, on a scale of 0 to 4."
        )

    def system_url(self) -> str:
        return RSACI_SYSTEM_URL

    def _levels_from_label(self, label: Label) -> dict[str, int]:
        tokens = label.data.split()
        if len(tokens) % 2:
            raise LabelDataError(f"Unbalanced RSACi label data: {label.data!r}")

        levels = {}
        for key, value in zip(tokens[::2], tokens[1::2]):
            category = self.structure.get(key)
            if category is None or value not in category.values:
                raise LabelDataError(f"Unknown RSACi rating {key} {value}")
            levels[key] = int(value)
        return levels

    def data_from_label(self, label: Label) -> LabelData:
        levels = self._levels_from_label(label)
        return LabelData(values={
            key: [str(levels[key])] if key in levels else []
            for key in self.structure
        })

    def label_from_data(self, values: Mapping[str, Sequence[str]]) -> str:
        parts = []
        for key in self.structure:
            selected = values.get(key) or []
            if selected:
                parts.append(f"{key} {selected[0]}")
        return " ".join(parts)

    def combine(self, records: Sequence[LabelRecord]) -> LabelRecord:
        """Take the highest level in each category and the newest timestamp."""
        worst: dict[str, int] = {}
        for record in records:
            for key, level in self._levels_from_label(record.label).items():
                worst[key] = max(worst.get(key, 0), level)

        data = self.label_from_data({key: [str(level)] for key, level in worst.items()})
        logger.debug("Combined %d RSACi labels into %r", len(records), data)
        return LabelRecord(
            label=Label(data=data),
            timestamp=max(record.timestamp for record in records),
            comment="",
        )
