"""
Validation of submitted label selections.

Submitted input maps a category key to the list of value keys the
operator selected. Each category is checked against the rating system's
structure:

- required categories need at least one selection
- every submitted value must exist in the category
- a single value is always acceptable
- several values are acceptable only if none of them is exclusive
"""

from collections.abc import Mapping
from typing import Any

from rating_systems.base import CategoryDefinition, LabelData


def _validate_category(
    category: CategoryDefinition, submitted: Any
) -> tuple[list[str], str | None]:
    """Return the accepted selection and an error message, if any."""
    if not isinstance(submitted, (list, tuple)):
        return [], f"Input not understood for {category.name}"

    if len(submitted) == 0:
        if category.optional:
            return [], None
        return [], f"Nothing was selected for {category.name}"

    valid = 0
    exclusive = 0
    for value in submitted:
        if isinstance(value, str) and value in category.values:
            valid += 1
            if category.values[value].exclusive:
                exclusive += 1

    if valid == 0:
        return [], f"Input not understood for {category.name}"

    if valid == 1:
        if len(submitted) == 1:
            return list(submitted), None
        return [], f"Input not understood for {category.name}"

    if exclusive == 0 and len(submitted) == valid:
        return list(submitted), None
    return [], f"The combination of selections was not valid for {category.name}"


def validate_label_input(
    structure: Mapping[str, CategoryDefinition],
    form: Mapping[str, Any],
) -> LabelData:
    """
    Filter and validate label inputs against a category structure.

    Args:
        structure: Ordered category definitions of the rating system
        form: Submitted selections keyed by category

    Returns:
        LabelData with one entry per category; categories in error are empty
    """
    data = LabelData()
    for key, category in structure.items():
        if form.get(key) is not None:
            selection, error = _validate_category(category, form[key])
        elif category.optional:
            selection, error = [], None
        else:
            selection, error = [], f"Nothing was selected for {category.name}"

        data.values[key] = selection
        if error:
            data.errors.append(error)

    return data
