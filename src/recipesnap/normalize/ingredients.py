"""Ingredient line to shopping-list label normalization."""

import re
from collections.abc import Iterable

# =============================================================================
# Lexicon Tables
# =============================================================================

# Household staples that are never bought. Seasonings such as salt and pepper
# are kept on the list on purpose.
EXCLUDED_ITEMS: frozenset[str] = frozenset(
    {
        "water",
        "boiled water",
        "hot water",
        "cold water",
        "warm water",
        "tap water",
        "ice",
        "ice cubes",
        "crushed ice",
    }
)

_UNIT_WORDS: tuple[str, ...] = (
    # Volume
    "cup",
    "cups",
    "tbsp",
    "tbsps",
    "tablespoon",
    "tablespoons",
    "tsp",
    "tsps",
    "teaspoon",
    "teaspoons",
    "ml",
    "milliliter",
    "milliliters",
    "l",
    "liter",
    "liters",
    # Weight
    "oz",
    "ounce",
    "ounces",
    "lb",
    "lbs",
    "pound",
    "pounds",
    "g",
    "gram",
    "grams",
    "kg",
    "kilogram",
    "kilograms",
    # Culinary counts
    "pinch",
    "pinches",
    "dash",
    "dashes",
    "clove",
    "cloves",
    "handful",
    "handfuls",
    "slice",
    "slices",
    "piece",
    "pieces",
    "can",
    "cans",
    "bottle",
    "bottles",
    "jar",
    "jars",
    "package",
    "packages",
    "stick",
    "sticks",
    "bunch",
    "bunches",
    "sprig",
    "sprigs",
)

# Longest first so that a token is never pre-empted by a shorter one sharing
# its prefix ("tablespoons" before "tablespoon", "cloves" before "clove").
UNIT_LEXICON: tuple[str, ...] = tuple(sorted(set(_UNIT_WORDS), key=lambda u: (-len(u), u)))

# ASCII digits, decimal points, slashes, range hyphens, whitespace and the Unicode
# vulgar fraction glyphs (¼ ½ ¾ and the U+2150 block).
_QUANTITY_RE = re.compile(r"^[0-9\s/.\-¼-¾⅐-⅞]+")

# One unit token, an optional plural "s", an optional trailing period for
# abbreviations ("oz."), an optional "of", then any whitespace.
_UNIT_RE = re.compile(
    r"^(?:" + "|".join(re.escape(u) for u in UNIT_LEXICON) + r")s?\b\.?(?:\s*of\b)?\s*",
    re.IGNORECASE,
)


# =============================================================================
# Matchers
# =============================================================================


def strip_quantity(text: str) -> str:
    """
    Remove a leading quantity from an ingredient line.

    Handles integers ("2"), decimals ("1.5"), fractions ("1/2"), mixed
    numbers ("1 1/2"), ranges ("1-2") and fraction glyphs ("½"). Text without
    a leading quantity is returned unchanged.
    """
    return _QUANTITY_RE.sub("", text, count=1)


def strip_unit(text: str) -> str:
    """
    Remove a single leading unit token such as "cups", "Tbsp" or "cloves of".

    Only the first unit is removed; "can 14 oz tomatoes" becomes
    "14 oz tomatoes".
    """
    return _UNIT_RE.sub("", text, count=1)


def is_excluded(text: str) -> bool:
    """Check whether a label names a staple that never goes on a shopping list."""
    return text.strip().lower() in EXCLUDED_ITEMS


# =============================================================================
# Normalization
# =============================================================================


def normalize_ingredient(raw: str | None) -> str | None:
    """
    Turn a free-form ingredient line into a shopping-list label.

    Examples:
        "1/2 cup chopped onions" -> "chopped onions"
        "3 cloves garlic, minced" -> "garlic, minced"
        "1 cup water" -> None
        "Salt to taste" -> "Salt to taste"

    Returns:
        The remaining noun phrase with its original casing, or None when the
        line should not produce a shopping item.
    """
    if not raw:
        return None

    if is_excluded(raw):
        return None

    cleaned = strip_unit(strip_quantity(raw)).strip()

    if not cleaned or is_excluded(cleaned):
        return None

    return cleaned


def normalize_ingredients(lines: Iterable[str | None]) -> list[str]:
    """Normalize ingredient lines in order, dropping the omitted ones."""
    labels = []
    for line in lines:
        label = normalize_ingredient(line)
        if label is not None:
            labels.append(label)
    return labels
