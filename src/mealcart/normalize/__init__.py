"""Normalize ingredient names and units into canonical grocery forms."""

from mealcart.normalize.names import (
    INGREDIENT_SYNONYMS,
    clean_ingredient_name,
    normalize_ingredient_name,
)
from mealcart.normalize.units import UNIT_SYNONYMS, standardize_unit, unit_family

__all__ = [
    "INGREDIENT_SYNONYMS",
    "UNIT_SYNONYMS",
    "clean_ingredient_name",
    "normalize_ingredient_name",
    "standardize_unit",
    "unit_family",
]
