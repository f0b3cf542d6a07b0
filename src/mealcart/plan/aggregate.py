"""Ingredient aggregation across the recipes of a meal plan."""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from mealcart.logging_config import get_logger
from mealcart.normalize.names import normalize_ingredient_name
from mealcart.normalize.units import standardize_unit

logger = get_logger(__name__)

NormalizedKey = tuple[str, str]


@dataclass(frozen=True)
class IngredientLine:
    """One recipe's use of one ingredient."""

    name: str
    amount: float
    unit: str
    organic: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], multiplier: float = 1.0) -> "IngredientLine":
        """Build a line from an inbound ingredient dict.

        Amounts that cannot be read as numbers become 0 and are later dropped.
        """
        try:
            amount = float(data.get("amount") or 0) * multiplier
        except (TypeError, ValueError):
            amount = 0.0

        return cls(
            name=str(data.get("name") or ""),
            amount=amount,
            unit=str(data.get("unit") or ""),
            organic=bool(data.get("organic", False)),
        )

    @property
    def key(self) -> NormalizedKey:
        """The (normalized name, standard unit) pair this line groups under."""
        return normalize_ingredient_name(self.name), standardize_unit(self.unit)


@dataclass
class AggregatedItem:
    """One row of the grocery list: all lines sharing a normalized key."""

    display_name: str
    normalized_name: str
    total_amount: float
    unit: str
    organic: bool = False
    source_count: int = 1

    @property
    def key(self) -> NormalizedKey:
        return self.normalized_name, self.unit

    @property
    def display_amount(self) -> str:
        return format_amount(self.total_amount)

    @property
    def display_text(self) -> str:
        """Human-readable "{amount} {unit} {name}" label."""
        return f"{self.display_amount} {self.unit} {self.display_name}".strip()


@dataclass
class _Group:
    first: IngredientLine
    normalized_name: str
    unit: str
    amounts: list[float] = field(default_factory=list)


def format_amount(amount: float) -> str:
    """
    Format an amount for display.

    Whole numbers print without decimals; anything else keeps at most two
    decimal places with trailing zeros removed (2.5 -> "2.5", 1/3 -> "0.33").
    """
    if amount == int(amount):
        return str(int(amount))
    return f"{amount:.2f}".rstrip("0").rstrip(".")


def is_valid_line(line: IngredientLine) -> bool:
    """Check a line has a name, a unit and a positive finite amount."""
    if not line.name or not line.name.strip():
        return False
    if not line.unit or not line.unit.strip():
        return False
    return math.isfinite(line.amount) and line.amount > 0


def aggregate_ingredients(lines: Iterable[IngredientLine]) -> list[AggregatedItem]:
    """
    Merge ingredient lines into one item per (normalized name, standard unit).

    Output is in first-seen order of each key. The display name and organic
    flag come from the first line of a group; totals are the exact sum of
    every contributing amount regardless of input order.

    Args:
        lines: Ingredient lines from one or more recipes.

    Returns:
        Aggregated grocery items.
    """
    groups: dict[NormalizedKey, _Group] = {}
    dropped = 0

    for line in lines:
        if not is_valid_line(line):
            dropped += 1
            logger.debug(f"Dropping invalid ingredient line: {line!r}")
            continue

        normalized_name, unit = line.key
        group = groups.get((normalized_name, unit))
        if group is None:
            group = _Group(first=line, normalized_name=normalized_name, unit=unit)
            groups[(normalized_name, unit)] = group
        group.amounts.append(line.amount)

    if dropped:
        logger.info(f"Dropped {dropped} invalid ingredient lines before aggregation")

    return [
        AggregatedItem(
            display_name=group.first.name.strip(),
            normalized_name=group.normalized_name,
            total_amount=math.fsum(group.amounts),
            unit=group.unit,
            organic=group.first.organic,
            source_count=len(group.amounts),
        )
        for group in groups.values()
    ]


def flatten_meal_plan(recipes: Iterable[Mapping[str, Any]]) -> list[IngredientLine]:
    """
    Flatten the recipes of a meal plan into a single list of ingredient lines.

    Each recipe is a dict with an "ingredients" list of
    {"name", "amount", "unit", "organic"} dicts and an optional
    "servings_multiplier" applied to every amount in that recipe.
    """
    lines: list[IngredientLine] = []

    for recipe in recipes:
        multiplier = recipe.get("servings_multiplier") or 1.0
        for ingredient in recipe.get("ingredients") or []:
            if isinstance(ingredient, Mapping):
                lines.append(IngredientLine.from_dict(ingredient, multiplier))
            else:
                logger.warning(
                    f"Skipping unreadable ingredient in recipe "
                    f"{recipe.get('name') or recipe.get('id') or '?'}: {ingredient!r}"
                )

    return lines
