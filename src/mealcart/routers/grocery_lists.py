"""API routes for grocery list aggregation, export and partner checkout."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from mealcart.logging_config import get_logger
from mealcart.normalize.names import normalize_ingredient_name
from mealcart.normalize.units import unit_family
from mealcart.partners.base import (
    EmptyIngredientListError,
    PartnerClient,
    PartnerError,
    PartnerUnprocessableError,
    PartnerUpstreamError,
)
from mealcart.partners.instacart import DEFAULT_LIST_TITLE, get_partner_client
from mealcart.plan.aggregate import (
    AggregatedItem,
    IngredientLine,
    aggregate_ingredients,
    flatten_meal_plan,
)
from mealcart.plan.pantry import PantryMatcher
from mealcart.plan.shopping_list import (
    EXPORT_FILENAME,
    PLAIN_TEXT_MEDIA_TYPE,
    GroceryListState,
    filter_items,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/grocery-lists", tags=["grocery-lists"])


# =============================================================================
# Request/Response Schemas
# =============================================================================


class IngredientLineSchema(BaseModel):
    """Ingredient as produced by recipe, meal plan or pantry components."""

    name: str = ""
    amount: float = 0.0
    unit: str = ""
    organic: bool = False

    def to_line(self) -> IngredientLine:
        return IngredientLine(
            name=self.name,
            amount=self.amount,
            unit=self.unit,
            organic=self.organic,
        )


class AggregateRequest(BaseModel):
    """Ingredient lines to merge into a grocery list."""

    ingredients: list[IngredientLineSchema]
    search: str | None = Field(None, description="Case-insensitive filter on item names")
    pantry_items: list[str] = Field(
        default_factory=list, description="Pantry items to leave off the list"
    )


class RecipeSchema(BaseModel):
    """Recipe in a meal plan."""

    id: str | None = None
    name: str = ""
    servings_multiplier: float = Field(1.0, gt=0)
    ingredients: list[IngredientLineSchema] = Field(default_factory=list)


class MealPlanGroceryRequest(BaseModel):
    """Meal plan recipes to build a grocery list from."""

    recipes: list[RecipeSchema]
    search: str | None = None
    pantry_items: list[str] = Field(default_factory=list)


class AggregatedItemSchema(BaseModel):
    """One row of the grocery list."""

    display_name: str
    normalized_name: str
    total_amount: float
    unit: str
    unit_family: str
    organic: bool
    display_text: str
    source_count: int

    @classmethod
    def from_item(cls, item: AggregatedItem) -> "AggregatedItemSchema":
        return cls(
            display_name=item.display_name,
            normalized_name=item.normalized_name,
            total_amount=item.total_amount,
            unit=item.unit,
            unit_family=unit_family(item.unit),
            organic=item.organic,
            display_text=item.display_text,
            source_count=item.source_count,
        )


class PantryMatchSchema(BaseModel):
    """Grocery item left off because the pantry covers it."""

    item_name: str
    pantry_name: str
    score: float
    match_type: str


class GroceryListResponse(BaseModel):
    """Aggregated grocery list."""

    items: list[AggregatedItemSchema]
    total_items: int
    pantry_excluded: list[PantryMatchSchema] = Field(default_factory=list)


class ExportRequest(BaseModel):
    """Grocery list export with the user's checked and organic toggles."""

    ingredients: list[IngredientLineSchema]
    checked: list[str] = Field(default_factory=list, description="Item names checked off")
    organic: list[str] = Field(default_factory=list, description="Item names marked organic")


class ShoppingListRequest(BaseModel):
    """Request to create a partner shopping list."""

    ingredients: list[IngredientLineSchema]
    title: str = DEFAULT_LIST_TITLE


class RecipePageRequest(BaseModel):
    """Request to create a partner recipe page."""

    name: str
    ingredients: list[IngredientLineSchema]
    instructions: list[str] = Field(default_factory=list)
    image_url: str | None = None


class PartnerLinkResponse(BaseModel):
    """Shoppable deep link."""

    url: str


# =============================================================================
# Helper Functions
# =============================================================================


def build_grocery_list(
    lines: list[IngredientLine],
    search: str | None,
    pantry_items: list[str],
) -> GroceryListResponse:
    """Aggregate lines, drop pantry-covered items and apply the search filter."""
    items = aggregate_ingredients(lines)

    pantry_excluded: list[PantryMatchSchema] = []
    if pantry_items:
        items, removed = PantryMatcher(pantry_items).exclude(items)
        pantry_excluded = [
            PantryMatchSchema(
                item_name=m.item_name,
                pantry_name=m.pantry_name,
                score=m.score,
                match_type=m.match_type,
            )
            for m in removed
        ]

    items = filter_items(items, search)

    return GroceryListResponse(
        items=[AggregatedItemSchema.from_item(item) for item in items],
        total_items=len(items),
        pantry_excluded=pantry_excluded,
    )


def state_from_names(
    items: list[AggregatedItem],
    checked: list[str],
    organic: list[str],
) -> GroceryListState:
    """Resolve user toggles given by name onto normalized list rows."""
    checked_names = {normalize_ingredient_name(n) for n in checked}
    organic_names = {normalize_ingredient_name(n) for n in organic}

    state = GroceryListState()
    for item in items:
        if item.normalized_name in checked_names:
            state.toggle_checked(item)
        if item.normalized_name in organic_names:
            state.set_organic(item.key, True)
    return state


def partner_http_error(error: PartnerError | EmptyIngredientListError) -> HTTPException:
    """Translate a partner failure into an HTTP error with a user-facing message."""
    if isinstance(error, EmptyIngredientListError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, PartnerUnprocessableError):
        status_code = 422
    elif isinstance(error, PartnerUpstreamError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_502_BAD_GATEWAY

    return HTTPException(status_code=status_code, detail=error.user_message)


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/aggregate", response_model=GroceryListResponse)
async def aggregate_grocery_list(request: AggregateRequest) -> GroceryListResponse:
    """
    Merge ingredient lines into a deduplicated grocery list.

    Lines are grouped by normalized ingredient name and standard unit.
    Invalid lines are dropped silently.
    """
    lines = [ingredient.to_line() for ingredient in request.ingredients]
    logger.info(f"Aggregating {len(lines)} ingredient lines")
    return build_grocery_list(lines, request.search, request.pantry_items)


@router.post("/from-meal-plan", response_model=GroceryListResponse)
async def grocery_list_from_meal_plan(request: MealPlanGroceryRequest) -> GroceryListResponse:
    """Build the grocery list for every recipe of a meal plan."""
    lines = flatten_meal_plan(recipe.model_dump() for recipe in request.recipes)
    logger.info(f"Building grocery list from {len(request.recipes)} recipes")
    return build_grocery_list(lines, request.search, request.pantry_items)


@router.post("/export")
async def export_grocery_list(request: ExportRequest) -> Response:
    """Download the grocery list as a plain text file."""
    items = aggregate_ingredients(ingredient.to_line() for ingredient in request.ingredients)
    state = state_from_names(items, request.checked, request.organic)
    content = state.export(items)

    return Response(
        content=content,
        media_type=PLAIN_TEXT_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.post("/instacart/shopping-list", response_model=PartnerLinkResponse)
async def create_instacart_shopping_list(
    request: ShoppingListRequest,
    client: PartnerClient = Depends(get_partner_client),
) -> PartnerLinkResponse:
    """Send the grocery list to Instacart and return the shoppable link."""
    lines = [ingredient.to_line() for ingredient in request.ingredients]
    try:
        link = await client.create_shopping_list(lines, request.title)
    except (EmptyIngredientListError, PartnerError) as e:
        logger.warning(f"Shopping list export failed: {e}")
        raise partner_http_error(e) from e

    return PartnerLinkResponse(url=link.url)


@router.post("/instacart/recipe", response_model=PartnerLinkResponse)
async def create_instacart_recipe_page(
    request: RecipePageRequest,
    client: PartnerClient = Depends(get_partner_client),
) -> PartnerLinkResponse:
    """Create a shoppable Instacart recipe page."""
    lines = [ingredient.to_line() for ingredient in request.ingredients]
    try:
        link = await client.create_recipe_list(
            request.name,
            lines,
            request.instructions,
            request.image_url,
        )
    except (EmptyIngredientListError, PartnerError) as e:
        logger.warning(f"Recipe page export failed: {e}")
        raise partner_http_error(e) from e

    return PartnerLinkResponse(url=link.url)


@router.get("/instacart/retailers")
async def list_instacart_retailers(
    postal_code: str = Query(..., min_length=3, max_length=10),
    country_code: str = Query("US", min_length=2, max_length=2),
    client: PartnerClient = Depends(get_partner_client),
) -> list[dict]:
    """List retailers that deliver to a postal code."""
    try:
        return await client.list_retailers(postal_code, country_code.upper())
    except PartnerError as e:
        logger.warning(f"Retailer lookup failed: {e}")
        raise partner_http_error(e) from e
