"""Unit standardization for grocery list aggregation."""

from types import MappingProxyType


# =============================================================================
# Unit Synonym Tables
# =============================================================================

WEIGHT_UNITS: dict[str, str] = {
    "g": "grams",
    "gram": "grams",
    "grams": "grams",
    "kg": "kilograms",
    "kilogram": "kilograms",
    "kilograms": "kilograms",
    "oz": "ounces",
    "ounce": "ounces",
    "ounces": "ounces",
    "lb": "pounds",
    "lbs": "pounds",
    "pound": "pounds",
    "pounds": "pounds",
}

VOLUME_UNITS: dict[str, str] = {
    "ml": "milliliters",
    "milliliter": "milliliters",
    "milliliters": "milliliters",
    "l": "liters",
    "liter": "liters",
    "liters": "liters",
    "fl oz": "fluid ounces",
    "fluid ounce": "fluid ounces",
    "fluid ounces": "fluid ounces",
    "pt": "pints",
    "pint": "pints",
    "pints": "pints",
    "qt": "quarts",
    "quart": "quarts",
    "quarts": "quarts",
    "gal": "gallons",
    "gallon": "gallons",
    "gallons": "gallons",
    # Cooking measurements
    "tsp": "teaspoons",
    "teaspoon": "teaspoons",
    "teaspoons": "teaspoons",
    "tbsp": "tablespoons",
    "tablespoon": "tablespoons",
    "tablespoons": "tablespoons",
    "cup": "cups",
    "cups": "cups",
}

COUNT_UNITS: dict[str, str] = {
    "piece": "pieces",
    "pieces": "pieces",
    "item": "items",
    "items": "items",
    "each": "each",
    "whole": "whole",
    "clove": "cloves",
    "cloves": "cloves",
    "slice": "slices",
    "slices": "slices",
    "bunch": "bunches",
    "bunches": "bunches",
    "head": "heads",
    "heads": "heads",
    "stalk": "stalks",
    "stalks": "stalks",
    "sprig": "sprigs",
    "sprigs": "sprigs",
    "leaf": "leaves",
    "leaves": "leaves",
    "can": "cans",
    "cans": "cans",
    "jar": "jars",
    "jars": "jars",
    "bottle": "bottles",
    "bottles": "bottles",
    "package": "packages",
    "packages": "packages",
    "bag": "bags",
    "bags": "bags",
    "box": "boxes",
    "boxes": "boxes",
}

SIZE_DESCRIPTORS: dict[str, str] = {
    "large": "large",
    "medium": "medium",
    "small": "small",
    "extra large": "extra large",
    "extra small": "extra small",
}

UNIT_SYNONYMS = MappingProxyType(
    {**WEIGHT_UNITS, **VOLUME_UNITS, **COUNT_UNITS, **SIZE_DESCRIPTORS}
)

_UNIT_FAMILIES: tuple[tuple[str, dict[str, str]], ...] = (
    ("weight", WEIGHT_UNITS),
    ("volume", VOLUME_UNITS),
    ("count", COUNT_UNITS),
    ("size", SIZE_DESCRIPTORS),
)


# =============================================================================
# Standardization
# =============================================================================


def standardize_unit(unit: str | None) -> str:
    """
    Map a unit string to its standard grocery form.

    Examples:
        "Tbsp" -> "tablespoons"
        "LB" -> "pounds"
        "handful" -> "handful" (unknown units pass through cleaned)
    """
    if not unit:
        return ""

    cleaned = " ".join(unit.lower().split())
    return UNIT_SYNONYMS.get(cleaned, cleaned)


def unit_family(unit: str | None) -> str:
    """Return the unit family: weight, volume, count, size or unknown."""
    standard = standardize_unit(unit)
    for family, table in _UNIT_FAMILIES:
        if standard in table:
            return family
    return "unknown"
