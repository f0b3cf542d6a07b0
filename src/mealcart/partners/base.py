"""Base interface and error taxonomy for grocery ordering partners."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from mealcart.logging_config import get_logger
from mealcart.plan.aggregate import IngredientLine, is_valid_line

logger = get_logger(__name__)


@dataclass
class PartnerLink:
    """Shoppable deep link returned by a partner."""

    url: str
    raw_response: dict[str, Any] | None = None


# =============================================================================
# Errors
# =============================================================================


class EmptyIngredientListError(ValueError):
    """Raised when no ingredient survives filtering, before any network call."""

    user_message = "There are no valid ingredients to send."


class PartnerError(Exception):
    """Base exception for partner API failures."""

    user_message = "The grocery partner could not create your list."

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        response: str | None = None,
    ):
        super().__init__(message or self.user_message)
        self.status_code = status_code
        self.response = response


class PartnerAuthError(PartnerError):
    """401: the partner rejected our API key."""

    user_message = "Grocery partner API key invalid. The integration is not authorized."


class PartnerBadRequestError(PartnerError):
    """400: the payload was malformed."""

    user_message = "Malformed ingredient payload sent to the grocery partner."


class PartnerEndpointError(PartnerError):
    """404: the partner endpoint does not exist for us."""

    user_message = "Grocery partner integration misconfigured."


class PartnerUnprocessableError(PartnerError):
    """422: the partner could not match the ingredients."""

    user_message = "These ingredients could not be matched to products."


class PartnerUpstreamError(PartnerError):
    """5xx, timeout or network failure on the partner side."""

    user_message = "The grocery partner is unavailable. Please try again later."


STATUS_ERRORS: dict[int, type[PartnerError]] = {
    400: PartnerBadRequestError,
    401: PartnerAuthError,
    404: PartnerEndpointError,
    422: PartnerUnprocessableError,
}


def error_for_status(status_code: int, body: str) -> PartnerError:
    """Build the partner error for a non-2xx status code."""
    error_cls = STATUS_ERRORS.get(status_code)
    if error_cls is None and status_code >= 500:
        error_cls = PartnerUpstreamError

    if error_cls is None:
        return PartnerError(
            f"Partner API request failed with status {status_code}",
            status_code=status_code,
            response=body,
        )
    return error_cls(status_code=status_code, response=body)


# =============================================================================
# Client Interface
# =============================================================================


def filter_valid_ingredients(ingredients: Iterable[IngredientLine]) -> list[IngredientLine]:
    """
    Drop lines with a blank name, blank unit or non-positive amount.

    Raises:
        EmptyIngredientListError: If nothing survives.
    """
    ingredients = list(ingredients)
    valid: list[IngredientLine] = []
    for ingredient in ingredients:
        if is_valid_line(ingredient):
            valid.append(ingredient)
        else:
            logger.warning(f"Skipping invalid ingredient: {ingredient!r}")

    if not valid:
        raise EmptyIngredientListError(
            f"No valid ingredients found among {len(ingredients)} submitted"
        )
    return valid


class PartnerClient(ABC):
    """Abstract base class for grocery ordering partner clients."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return partner name for logging and identification."""

    @abstractmethod
    async def create_shopping_list(
        self,
        ingredients: Iterable[IngredientLine],
        title: str,
    ) -> PartnerLink:
        """
        Create a shoppable list from ingredient lines.

        Args:
            ingredients: Raw ingredient lines; invalid ones are dropped.
            title: Title shown on the partner landing page.

        Returns:
            PartnerLink with the partner's deep link.
        """

    @abstractmethod
    async def create_recipe_list(
        self,
        name: str,
        ingredients: Iterable[IngredientLine],
        instructions: list[str],
        image_url: str | None = None,
    ) -> PartnerLink:
        """
        Create a shoppable recipe page.

        Args:
            name: Recipe title.
            ingredients: Raw ingredient lines; invalid ones are dropped.
            instructions: Recipe steps in order.
            image_url: Optional recipe image.

        Returns:
            PartnerLink with the partner's deep link.
        """

    async def list_retailers(
        self,
        postal_code: str,
        country_code: str = "US",
    ) -> list[dict[str, Any]]:
        """Fetch retailers serving a postal code, where the partner supports it."""
        raise PartnerEndpointError(f"{self.name} does not support retailer lookup")
