"""Shopping list export and session-local list state."""

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field, replace

from mealcart.logging_config import get_logger
from mealcart.plan.aggregate import AggregatedItem, NormalizedKey

logger = get_logger(__name__)

PLAIN_TEXT_MEDIA_TYPE = "text/plain"
EXPORT_FILENAME = "grocery-list.txt"


def format_export_line(item: AggregatedItem) -> str:
    """Format one item as "{amount} {unit} {Organic }{name}"."""
    organic = "Organic " if item.organic else ""
    return f"{item.display_amount} {item.unit} {organic}{item.display_name}"


def to_plain_text(
    items: Iterable[AggregatedItem],
    excluded: Collection[str] = frozenset(),
) -> str:
    """
    Render the grocery list as newline-separated plain text.

    Args:
        items: Aggregated grocery items, in display order.
        excluded: Display names of checked-off items to leave out.

    Returns:
        One line per remaining item, without a trailing newline.
    """
    lines = [format_export_line(item) for item in items if item.display_name not in excluded]
    logger.debug(f"Exported {len(lines)} grocery lines ({len(excluded)} excluded names)")
    return "\n".join(lines)


def filter_items(items: Iterable[AggregatedItem], search_term: str | None) -> list[AggregatedItem]:
    """Case-insensitive substring search on display names; order is preserved."""
    items = list(items)
    if not search_term or not search_term.strip():
        return items

    term = search_term.strip().lower()
    return [item for item in items if term in item.display_name.lower()]


@dataclass
class GroceryListState:
    """
    Checked-off and organic toggles for one user's grocery list session.

    Toggles are keyed by the normalized (name, unit) key of the aggregated
    row, so every original spelling merged into a row shares one state.
    """

    checked: set[NormalizedKey] = field(default_factory=set)
    organic_overrides: dict[NormalizedKey, bool] = field(default_factory=dict)

    def toggle_checked(self, item: AggregatedItem) -> bool:
        """Flip the checked state of a row. Returns the new state."""
        if item.key in self.checked:
            self.checked.discard(item.key)
            return False
        self.checked.add(item.key)
        return True

    def toggle_organic(self, item: AggregatedItem) -> bool:
        """Flip the organic flag of a row. Returns the new state."""
        current = self.organic_overrides.get(item.key, item.organic)
        self.organic_overrides[item.key] = not current
        return not current

    def set_organic(self, key: NormalizedKey, organic: bool) -> None:
        self.organic_overrides[key] = organic

    def is_checked(self, item: AggregatedItem) -> bool:
        return item.key in self.checked

    def apply(self, items: Iterable[AggregatedItem]) -> list[AggregatedItem]:
        """Return copies of the items with organic overrides applied."""
        return [
            replace(item, organic=self.organic_overrides[item.key])
            if item.key in self.organic_overrides
            else item
            for item in items
        ]

    def excluded_names(self, items: Iterable[AggregatedItem]) -> set[str]:
        """Display names of checked rows, for use with to_plain_text."""
        return {item.display_name for item in items if item.key in self.checked}

    def export(self, items: Iterable[AggregatedItem]) -> str:
        """Render the list with this session's toggles applied."""
        remaining = [item for item in self.apply(items) if item.key not in self.checked]
        return to_plain_text(remaining)
