"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterable
from typing import Any

import httpx
import pytest

from mealcart.partners.base import PartnerClient, PartnerLink, filter_valid_ingredients
from mealcart.partners.instacart import InstacartClient
from mealcart.plan.aggregate import IngredientLine

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require external services)"
    )


# =============================================================================
# Ingredient Fixtures
# =============================================================================


@pytest.fixture
def basil_and_eggs():
    """Two basil spellings that merge, plus eggs sized by "large"."""
    return [
        IngredientLine(name="Fresh Basil", amount=2, unit="tbsp"),
        IngredientLine(name="basil", amount=1, unit="tablespoon"),
        IngredientLine(name="Eggs", amount=2, unit="large"),
    ]


@pytest.fixture
def tomato_lines():
    """Tomato lines with different spellings and unit plurals."""
    return [
        IngredientLine(name="Tomato", amount=2, unit="cup"),
        IngredientLine(name="tomatoes, diced", amount=1, unit="cups"),
    ]


@pytest.fixture
def meal_plan_recipes():
    """Meal plan recipes as returned by the recipe service."""
    return [
        {
            "id": "r1",
            "name": "Caprese Omelette",
            "servings_multiplier": 1.0,
            "ingredients": [
                {"name": "Eggs", "amount": 3, "unit": "large"},
                {"name": "Roma tomatoes, diced", "amount": 1, "unit": "cup"},
                {"name": "Fresh Basil", "amount": 1, "unit": "tbsp"},
            ],
        },
        {
            "id": "r2",
            "name": "Tomato Basil Pasta",
            "servings_multiplier": 2.0,
            "ingredients": [
                {"name": "diced roma tomato", "amount": 1, "unit": "cups"},
                {"name": "basil", "amount": 0.5, "unit": "tablespoon"},
                {"name": "Pasta", "amount": 8, "unit": "oz", "organic": True},
            ],
        },
    ]


# =============================================================================
# Partner Fixtures
# =============================================================================


@pytest.fixture
def mock_instacart_link_response():
    """Successful Instacart products link response."""
    return {"products_link_url": "https://customers.dev.instacart.tools/store/shopping_lists/123"}


@pytest.fixture
def make_instacart_client() -> Callable[..., InstacartClient]:
    """Build an InstacartClient whose HTTP calls go to a mock handler."""

    def _make(handler: Callable[[httpx.Request], Any], **kwargs: Any) -> InstacartClient:
        options = {
            "api_key": "test-key",
            "base_url": "https://connect.test.instacart",
            "linkback_url": "https://mealcart.test/meal-plan",
            "timeout": 5.0,
        }
        options.update(kwargs)
        return InstacartClient(transport=httpx.MockTransport(handler), **options)

    return _make


class StubPartnerClient(PartnerClient):
    """In-memory partner client recording every call."""

    def __init__(self, error: Exception | None = None, url: str = "https://partner.test/list/1"):
        self.error = error
        self.url = url
        self.calls: list[dict[str, Any]] = []
        self.retailers: list[dict[str, Any]] | None = None

    @property
    def name(self) -> str:
        return "stub"

    async def create_shopping_list(
        self, ingredients: Iterable[IngredientLine], title: str
    ) -> PartnerLink:
        valid = filter_valid_ingredients(ingredients)
        self.calls.append({"kind": "shopping_list", "title": title, "ingredients": valid})
        if self.error:
            raise self.error
        return PartnerLink(url=self.url)

    async def create_recipe_list(
        self,
        name: str,
        ingredients: Iterable[IngredientLine],
        instructions: list[str],
        image_url: str | None = None,
    ) -> PartnerLink:
        valid = filter_valid_ingredients(ingredients)
        self.calls.append(
            {
                "kind": "recipe",
                "name": name,
                "ingredients": valid,
                "instructions": instructions,
                "image_url": image_url,
            }
        )
        if self.error:
            raise self.error
        return PartnerLink(url=self.url)

    async def list_retailers(
        self, postal_code: str, country_code: str = "US"
    ) -> list[dict[str, Any]]:
        if self.retailers is None:
            return await super().list_retailers(postal_code, country_code)
        self.calls.append({"kind": "retailers", "postal_code": postal_code})
        return self.retailers


@pytest.fixture
def stub_partner():
    """Stub partner client that succeeds."""
    return StubPartnerClient()


@pytest.fixture
def stub_partner_cls():
    """The stub partner class, for tests that need a failing client."""
    return StubPartnerClient
