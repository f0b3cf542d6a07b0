"""Grocery list building: aggregation, pantry exclusion and export."""

from mealcart.plan.aggregate import (
    AggregatedItem,
    IngredientLine,
    aggregate_ingredients,
    flatten_meal_plan,
    format_amount,
    is_valid_line,
)
from mealcart.plan.pantry import PantryMatch, PantryMatcher
from mealcart.plan.shopping_list import (
    EXPORT_FILENAME,
    PLAIN_TEXT_MEDIA_TYPE,
    GroceryListState,
    filter_items,
    to_plain_text,
)

__all__ = [
    "EXPORT_FILENAME",
    "PLAIN_TEXT_MEDIA_TYPE",
    "AggregatedItem",
    "GroceryListState",
    "IngredientLine",
    "PantryMatch",
    "PantryMatcher",
    "aggregate_ingredients",
    "filter_items",
    "flatten_meal_plan",
    "format_amount",
    "is_valid_line",
    "to_plain_text",
]
