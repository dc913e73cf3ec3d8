"""Normalize AI-generated ingredient lines into shopping-list labels."""

from recipesnap.normalize.ingredients import (
    EXCLUDED_ITEMS,
    UNIT_LEXICON,
    is_excluded,
    normalize_ingredient,
    normalize_ingredients,
    strip_quantity,
    strip_unit,
)

__all__ = [
    "EXCLUDED_ITEMS",
    "UNIT_LEXICON",
    "is_excluded",
    "normalize_ingredient",
    "normalize_ingredients",
    "strip_quantity",
    "strip_unit",
]
