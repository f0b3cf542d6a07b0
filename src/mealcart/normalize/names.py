"""Ingredient name normalization for matching across recipes."""

import re
from types import MappingProxyType

# =============================================================================
# Word Lists
# =============================================================================

PREPARATION_ADJECTIVES: tuple[str, ...] = (
    "fresh",
    "dried",
    "frozen",
    "canned",
    "diced",
    "sliced",
    "chopped",
    "minced",
    "ground",
    "cooked",
    "raw",
    "organic",
    "free-range",
    "grass-fed",
    "wild-caught",
)

FILLER_WORDS: tuple[str, ...] = (
    "brand",
    "extra",
    "super",
    "premium",
    "quality",
    "grade",
    "pure",
    "natural",
    "whole",
    "lean",
    "boneless",
    "skinless",
)

# Variant spellings -> canonical grocery name
INGREDIENT_SYNONYMS = MappingProxyType(
    {
        # Proteins
        "chicken breast": "chicken breast",
        "chicken thigh": "chicken thighs",
        "chicken thighs": "chicken thighs",
        "beef": "beef",
        "pork": "pork",
        "salmon": "salmon",
        "shrimp": "shrimp",
        "eggs": "eggs",
        "egg": "eggs",
        # Vegetables
        "bell pepper": "bell peppers",
        "red bell pepper": "red bell peppers",
        "green bell pepper": "green bell peppers",
        "yellow bell pepper": "yellow bell peppers",
        "sweet potato": "sweet potatoes",
        "potato": "potatoes",
        "red onion": "red onions",
        "yellow onion": "yellow onions",
        "white onion": "white onions",
        "onion": "onions",
        "green onion": "green onions",
        "scallion": "green onions",
        "roma tomato": "roma tomatoes",
        "cherry tomato": "cherry tomatoes",
        "grape tomato": "grape tomatoes",
        "tomato": "tomatoes",
        "carrot": "carrots",
        "celery": "celery",
        "broccoli": "broccoli",
        "spinach": "spinach",
        "lettuce": "lettuce",
        "cucumber": "cucumber",
        "zucchini": "zucchini",
        "mushroom": "mushrooms",
        "mushrooms": "mushrooms",
        # Oils and fats
        "olive oil": "olive oil",
        "vegetable oil": "vegetable oil",
        "canola oil": "canola oil",
        "coconut oil": "coconut oil",
        "butter": "butter",
        "unsalted butter": "butter",
        "salted butter": "butter",
        # Dairy
        "milk": "milk",
        "heavy cream": "heavy cream",
        "heavy whipping cream": "heavy cream",
        "sour cream": "sour cream",
        "cream cheese": "cream cheese",
        "cheddar cheese": "cheddar cheese",
        "mozzarella cheese": "mozzarella cheese",
        "parmesan cheese": "parmesan cheese",
        "cheese": "cheese",
        "yogurt": "yogurt",
        # Pantry staples
        "all-purpose flour": "flour",
        "bread flour": "flour",
        "wheat flour": "flour",
        "flour": "flour",
        "brown sugar": "brown sugar",
        "white sugar": "sugar",
        "granulated sugar": "sugar",
        "sugar": "sugar",
        "powdered sugar": "powdered sugar",
        "confectioners sugar": "powdered sugar",
        "baking powder": "baking powder",
        "baking soda": "baking soda",
        "vanilla extract": "vanilla extract",
        "salt": "salt",
        "black pepper": "black pepper",
        "pepper": "black pepper",
        "rice": "rice",
        "pasta": "pasta",
        # Aromatics
        "garlic clove": "garlic",
        "garlic cloves": "garlic",
        "garlic": "garlic",
        "ginger": "ginger",
        "lemon": "lemons",
        "lime": "limes",
        "orange": "oranges",
        "onion powder": "onion powder",
        "garlic powder": "garlic powder",
        # Herbs and spices
        "basil": "basil",
        "oregano": "oregano",
        "thyme": "thyme",
        "rosemary": "rosemary",
        "parsley": "parsley",
        "cilantro": "cilantro",
        "paprika": "paprika",
        "cumin": "cumin",
        "cinnamon": "cinnamon",
        "chili powder": "chili powder",
    }
)

_LEADING_ADJECTIVES_RE = re.compile(
    r"^(?:(?:" + "|".join(re.escape(a) for a in PREPARATION_ADJECTIVES) + r")\s+)+"
)
_PARENTHETICAL_RE = re.compile(r"\([^)]*\)")
_FILLER_RE = re.compile(
    r"\b(?:" + "|".join(FILLER_WORDS) + r")\b",
    re.IGNORECASE,
)


# =============================================================================
# Normalization
# =============================================================================


def _clean_once(name: str) -> str:
    name = name.lower().strip()
    name = _LEADING_ADJECTIVES_RE.sub("", name)
    name = _PARENTHETICAL_RE.sub("", name)
    name = name.split(",", 1)[0]
    name = _FILLER_RE.sub(" ", name)
    return " ".join(name.split())


def clean_ingredient_name(name: str) -> str:
    """
    Strip preparation words, parentheticals, trailing clauses and filler.

    Cleaning repeats until the text stops changing, since removing one
    word can expose another (e.g. "extra fresh basil" -> "fresh basil").
    """
    current = " ".join(name.lower().split())
    while True:
        cleaned = _clean_once(current)
        if cleaned == current:
            return cleaned
        current = cleaned


def normalize_ingredient_name(name: str | None) -> str:
    """
    Normalize an ingredient name to its canonical grocery form.

    - Lowercase and trim
    - Strip a leading run of preparation adjectives (fresh, diced, ...)
    - Drop parentheticals and anything after the first comma
    - Remove brand/quality filler words
    - Map known variants to one canonical name ("tomato" -> "tomatoes")

    Never raises. If cleaning leaves nothing, the lowercased input is returned.

    Examples:
        "Roma tomatoes, diced" -> "roma tomatoes"
        "diced roma tomato" -> "roma tomatoes"
        "2 (15 oz) cans" -> "2 cans"
    """
    if not name:
        return ""

    original = " ".join(name.lower().split())
    cleaned = clean_ingredient_name(original)
    if not cleaned:
        return original

    return INGREDIENT_SYNONYMS.get(cleaned, cleaned)
