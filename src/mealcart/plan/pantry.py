"""Remove grocery items the user already keeps in their pantry."""

from collections.abc import Iterable
from dataclasses import dataclass

from rapidfuzz import fuzz, process

from mealcart.config import get_settings
from mealcart.logging_config import get_logger
from mealcart.normalize.names import normalize_ingredient_name
from mealcart.plan.aggregate import AggregatedItem

logger = get_logger(__name__)


@dataclass
class PantryMatch:
    """Why a grocery item was considered already stocked."""

    item_name: str
    pantry_name: str
    score: float
    match_type: str  # "exact" or "fuzzy"


class PantryMatcher:
    """Match grocery items against pantry inventory names."""

    def __init__(self, pantry_items: Iterable[str], threshold: float | None = None):
        if threshold is None:
            threshold = get_settings().pantry_match_threshold
        self.threshold = threshold
        self.pantry_names: list[str] = []
        for raw in pantry_items:
            normalized = normalize_ingredient_name(raw)
            if normalized and normalized not in self.pantry_names:
                self.pantry_names.append(normalized)

    def match(self, name: str) -> PantryMatch | None:
        """Find the pantry entry covering an ingredient name, if any."""
        if not self.pantry_names:
            return None

        normalized = normalize_ingredient_name(name)
        if not normalized:
            return None

        if normalized in self.pantry_names:
            return PantryMatch(name, normalized, 100.0, "exact")

        best = process.extractOne(
            normalized,
            self.pantry_names,
            scorer=fuzz.token_sort_ratio,
            score_cutoff=self.threshold,
        )
        if best is None:
            return None

        pantry_name, score, _ = best
        return PantryMatch(name, pantry_name, score, "fuzzy")

    def exclude(
        self, items: Iterable[AggregatedItem]
    ) -> tuple[list[AggregatedItem], list[PantryMatch]]:
        """
        Split items into those still to buy and those covered by the pantry.

        Returns:
            Tuple of (items to keep, pantry matches for removed items).
        """
        kept: list[AggregatedItem] = []
        removed: list[PantryMatch] = []

        for item in items:
            found = self.match(item.normalized_name)
            if found is None:
                kept.append(item)
            else:
                found.item_name = item.display_name
                removed.append(found)

        if removed:
            logger.info(f"Pantry covers {len(removed)} of {len(kept) + len(removed)} grocery items")

        return kept, removed
