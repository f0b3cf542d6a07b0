"""Instacart Developer Platform client for shoppable grocery lists."""

from collections.abc import Iterable
from typing import Any

import httpx

from mealcart.config import get_settings
from mealcart.logging_config import LoggingContext, get_logger
from mealcart.partners.base import (
    PartnerAuthError,
    PartnerClient,
    PartnerError,
    PartnerLink,
    PartnerUpstreamError,
    error_for_status,
    filter_valid_ingredients,
)
from mealcart.plan.aggregate import AggregatedItem, IngredientLine, aggregate_ingredients

logger = get_logger(__name__)

SHOPPING_LIST_PATH = "/idp/v1/products/products_link"
RECIPE_PATH = "/idp/v1/products/recipe"
RETAILERS_PATH = "/idp/v1/retailers"

DEFAULT_LIST_TITLE = "My Meal Plan Shopping List"


def to_line_item(item: AggregatedItem) -> dict[str, Any]:
    """Map an aggregated item to the Instacart line item shape."""
    return {
        "name": item.normalized_name,
        "display_text": item.display_text,
        "measurements": [{"quantity": item.total_amount, "unit": item.unit}],
    }


class InstacartClient(PartnerClient):
    """
    Client for the Instacart products link and recipe page APIs.

    Each call is a single attempt with a bounded timeout. Failures are
    classified by status code into PartnerError subclasses and never retried.
    """

    MAX_ERROR_BODY = 500

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        linkback_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.instacart_api_key
        self.base_url = (base_url or settings.instacart_url).rstrip("/")
        self.linkback_url = linkback_url or settings.partner_linkback_url
        self.timeout = timeout or settings.partner_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if not self.api_key:
            logger.warning("Instacart API key is not configured; partner calls will fail")

    @property
    def name(self) -> str:
        """Return partner name."""
        return "instacart"

    @property
    def landing_page_configuration(self) -> dict[str, Any]:
        return {
            "partner_linkback_url": self.linkback_url,
            "enable_pantry_items": True,
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
                headers={
                    "Accept": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                    "User-Agent": "Mealcart/1.0",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send one request and classify any failure."""
        if not self.api_key:
            raise PartnerAuthError("Instacart API key is not configured")

        client = await self._get_client()

        try:
            response = await client.request(method, path, json=payload, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"Instacart request timed out after {self.timeout}s: {path}")
            raise PartnerUpstreamError(
                f"Instacart request timed out after {self.timeout}s",
                response=str(e),
            ) from e
        except httpx.TransportError as e:
            logger.error(f"Instacart request failed: {path}: {e}")
            raise PartnerUpstreamError(
                "Could not reach the Instacart API",
                response=str(e),
            ) from e

        if not response.is_success:
            error_detail = response.text[: self.MAX_ERROR_BODY] if response.text else ""
            logger.error(
                f"Instacart API error {response.status_code} for {path}: "
                f"{error_detail or 'No details'}"
            )
            raise error_for_status(response.status_code, error_detail)

        try:
            data = response.json()
        except ValueError as e:
            raise PartnerError(
                "Instacart returned a non-JSON response",
                status_code=response.status_code,
                response=response.text[: self.MAX_ERROR_BODY],
            ) from e

        return data

    def _link_from(self, data: Any) -> PartnerLink:
        url = data.get("products_link_url") if isinstance(data, dict) else None
        if not url or not isinstance(url, str):
            raise PartnerError(
                "Instacart response did not include products_link_url",
                response=str(data)[: self.MAX_ERROR_BODY],
            )
        return PartnerLink(url=url, raw_response=data)

    def build_line_items(self, ingredients: Iterable[IngredientLine]) -> list[dict[str, Any]]:
        """Filter, aggregate and map ingredient lines to Instacart line items."""
        valid = filter_valid_ingredients(ingredients)
        return [to_line_item(item) for item in aggregate_ingredients(valid)]

    async def create_shopping_list(
        self,
        ingredients: Iterable[IngredientLine],
        title: str = DEFAULT_LIST_TITLE,
    ) -> PartnerLink:
        """
        Create an Instacart shopping list page.

        Raises:
            EmptyIngredientListError: If no ingredient is valid. No request is sent.
            PartnerError: If the Instacart call fails.
        """
        with LoggingContext(list_title=title, partner=self.name):
            line_items = self.build_line_items(ingredients)
            payload = {
                "title": title,
                "line_items": line_items,
                "landing_page_configuration": self.landing_page_configuration,
            }

            logger.info(f"Creating Instacart shopping list with {len(line_items)} line items")
            data = await self._request("POST", SHOPPING_LIST_PATH, payload=payload)
            link = self._link_from(data)
            logger.info("Instacart shopping list created")
            return link

    async def create_recipe_list(
        self,
        name: str,
        ingredients: Iterable[IngredientLine],
        instructions: list[str],
        image_url: str | None = None,
    ) -> PartnerLink:
        """
        Create an Instacart recipe page.

        Raises:
            EmptyIngredientListError: If no ingredient is valid. No request is sent.
            PartnerError: If the Instacart call fails.
        """
        with LoggingContext(list_title=name, partner=self.name):
            line_items = self.build_line_items(ingredients)
            payload: dict[str, Any] = {
                "title": name,
                "instructions": list(instructions),
                "ingredients": line_items,
                "landing_page_configuration": self.landing_page_configuration,
            }
            if image_url:
                payload["image_url"] = image_url

            logger.info(
                f"Creating Instacart recipe page with {len(line_items)} ingredients "
                f"and {len(payload['instructions'])} steps"
            )
            data = await self._request("POST", RECIPE_PATH, payload=payload)
            link = self._link_from(data)
            logger.info("Instacart recipe page created")
            return link

    async def list_retailers(
        self,
        postal_code: str,
        country_code: str = "US",
    ) -> list[dict[str, Any]]:
        """
        Fetch retailers that deliver to a postal code.

        Returns:
            List of retailer dictionaries as returned by Instacart.
        """
        logger.info(f"Fetching Instacart retailers for {country_code} {postal_code}")
        data = await self._request(
            "GET",
            RETAILERS_PATH,
            params={"postal_code": postal_code, "country_code": country_code},
        )
        retailers = data.get("retailers", []) if isinstance(data, dict) else []
        logger.info(f"Found {len(retailers)} retailers")
        return retailers

    async def __aenter__(self) -> "InstacartClient":
        """Async context manager entry."""
        await self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()


# Global instance for dependency injection
_instacart_client: InstacartClient | None = None


async def get_partner_client() -> PartnerClient:
    """
    Get the global InstacartClient instance.

    Creates it on first use.
    """
    global _instacart_client
    if _instacart_client is None:
        _instacart_client = InstacartClient()
    return _instacart_client


async def close_partner_client() -> None:
    """Close the global InstacartClient instance."""
    global _instacart_client
    if _instacart_client is not None:
        await _instacart_client.close()
        _instacart_client = None
