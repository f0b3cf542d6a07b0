"""Tests for the Instacart partner client using a mock HTTP transport."""

import asyncio
import json

import httpx
import pytest

from mealcart.partners.base import (
    EmptyIngredientListError,
    PartnerAuthError,
    PartnerBadRequestError,
    PartnerEndpointError,
    PartnerError,
    PartnerUnprocessableError,
    PartnerUpstreamError,
    error_for_status,
)
from mealcart.partners.instacart import (
    RECIPE_PATH,
    RETAILERS_PATH,
    SHOPPING_LIST_PATH,
    InstacartClient,
    to_line_item,
)
from mealcart.plan.aggregate import IngredientLine, aggregate_ingredients


class RecordingHandler:
    """Mock transport handler that records requests and returns a fixed response."""

    def __init__(self, status_code: int = 200, json_body=None, text: str | None = None):
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def payload(self) -> dict:
        return json.loads(self.requests[-1].content)


# =============================================================================
# Line Item Mapping Tests
# =============================================================================


class TestToLineItem:
    """Tests for to_line_item function."""

    def test_shape(self, basil_and_eggs):
        """Test an aggregated item maps to name, display text and one measurement."""
        basil = aggregate_ingredients(basil_and_eggs)[0]

        assert to_line_item(basil) == {
            "name": "basil",
            "display_text": "3 tablespoons Fresh Basil",
            "measurements": [{"quantity": 3.0, "unit": "tablespoons"}],
        }


class TestErrorForStatus:
    """Tests for error_for_status function."""

    def test_unmapped_status_keeps_details(self):
        """Test statuses without a dedicated class keep code and body."""
        error = error_for_status(409, "conflict")

        assert type(error) is PartnerError
        assert error.status_code == 409
        assert error.response == "conflict"
        assert "409" in str(error)

    def test_user_message_as_default(self):
        """Test mapped errors carry their user facing message."""
        error = error_for_status(401, "")
        assert str(error) == PartnerAuthError.user_message


# =============================================================================
# Shopping List Tests
# =============================================================================


class TestCreateShoppingList:
    """Tests for InstacartClient.create_shopping_list."""

    @pytest.mark.asyncio
    async def test_success(
        self, make_instacart_client, basil_and_eggs, mock_instacart_link_response
    ):
        """Test one aggregated POST is sent and the link is returned."""
        handler = RecordingHandler(json_body=mock_instacart_link_response)

        async with make_instacart_client(handler) as client:
            link = await client.create_shopping_list(basil_and_eggs, "Week 42")

        assert link.url == mock_instacart_link_response["products_link_url"]
        assert link.raw_response == mock_instacart_link_response
        assert len(handler.requests) == 1

        request = handler.requests[0]
        assert request.method == "POST"
        assert request.url.path == SHOPPING_LIST_PATH
        assert request.headers["Authorization"] == "Bearer test-key"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["Content-Type"] == "application/json"

        payload = handler.payload
        assert payload["title"] == "Week 42"
        assert payload["landing_page_configuration"] == {
            "partner_linkback_url": "https://mealcart.test/meal-plan",
            "enable_pantry_items": True,
        }
        assert [item["name"] for item in payload["line_items"]] == ["basil", "eggs"]
        assert payload["line_items"][1]["measurements"] == [{"quantity": 2.0, "unit": "large"}]

    @pytest.mark.asyncio
    async def test_invalid_lines_filtered(
        self, make_instacart_client, mock_instacart_link_response
    ):
        """Test invalid lines are dropped before the payload is built."""
        handler = RecordingHandler(json_body=mock_instacart_link_response)
        lines = [
            IngredientLine("salt", 1, "tsp"),
            IngredientLine("pepper", 0, "tsp"),
            IngredientLine("", 2, "cups"),
        ]

        async with make_instacart_client(handler) as client:
            await client.create_shopping_list(lines, "List")

        assert [item["name"] for item in handler.payload["line_items"]] == ["salt"]

    @pytest.mark.asyncio
    async def test_empty_list_sends_nothing(self, make_instacart_client):
        """Test an all-invalid list fails before any request."""
        handler = RecordingHandler(json_body={})

        async with make_instacart_client(handler) as client:
            with pytest.raises(EmptyIngredientListError):
                await client.create_shopping_list([IngredientLine("salt", 0, "tsp")], "List")
            with pytest.raises(EmptyIngredientListError):
                await client.create_shopping_list([], "List")

        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_missing_api_key(self, make_instacart_client, basil_and_eggs):
        """Test a missing key fails as an auth error without a request."""
        handler = RecordingHandler(json_body={})

        async with make_instacart_client(handler, api_key="") as client:
            with pytest.raises(PartnerAuthError):
                await client.create_shopping_list(basil_and_eggs, "List")

        assert handler.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,error_cls",
        [
            (400, PartnerBadRequestError),
            (401, PartnerAuthError),
            (404, PartnerEndpointError),
            (422, PartnerUnprocessableError),
            (500, PartnerUpstreamError),
            (503, PartnerUpstreamError),
            (409, PartnerError),
        ],
    )
    async def test_status_mapping(
        self, make_instacart_client, basil_and_eggs, status_code, error_cls
    ):
        """Test each failure status maps to its error and is never retried."""
        handler = RecordingHandler(status_code=status_code, text="upstream said no")

        async with make_instacart_client(handler) as client:
            with pytest.raises(error_cls) as exc_info:
                await client.create_shopping_list(basil_and_eggs, "List")

        assert type(exc_info.value) is error_cls
        assert exc_info.value.status_code == status_code
        assert exc_info.value.response == "upstream said no"
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_error_body_truncated(self, make_instacart_client, basil_and_eggs):
        """Test long error bodies are cut to a bounded length."""
        handler = RecordingHandler(status_code=500, text="x" * 2000)

        async with make_instacart_client(handler) as client:
            with pytest.raises(PartnerUpstreamError) as exc_info:
                await client.create_shopping_list(basil_and_eggs, "List")

        assert len(exc_info.value.response) == InstacartClient.MAX_ERROR_BODY

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ReadTimeout("timed out"),
            httpx.ConnectError("connection refused"),
        ],
    )
    async def test_network_failures(self, make_instacart_client, basil_and_eggs, exc):
        """Test timeouts and connection failures become upstream errors."""
        calls = []

        def handler(request):
            calls.append(request)
            raise exc

        async with make_instacart_client(handler) as client:
            with pytest.raises(PartnerUpstreamError):
                await client.create_shopping_list(basil_and_eggs, "List")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_non_json_response(self, make_instacart_client, basil_and_eggs):
        """Test a 2xx response that is not JSON is a partner error."""
        handler = RecordingHandler(text="<html>ok</html>")

        async with make_instacart_client(handler) as client:
            with pytest.raises(PartnerError) as exc_info:
                await client.create_shopping_list(basil_and_eggs, "List")

        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_link(self, make_instacart_client, basil_and_eggs):
        """Test a response without a link URL is a partner error."""
        handler = RecordingHandler(json_body={"status": "ok"})

        async with make_instacart_client(handler) as client:
            with pytest.raises(PartnerError, match="products_link_url"):
                await client.create_shopping_list(basil_and_eggs, "List")

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, make_instacart_client, basil_and_eggs):
        """Test cancelling the caller cancels the in-flight request."""
        started = asyncio.Event()

        async def handler(request):
            started.set()
            await asyncio.sleep(10)
            return httpx.Response(200, json={})

        async with make_instacart_client(handler) as client:
            task = asyncio.create_task(client.create_shopping_list(basil_and_eggs, "List"))
            await started.wait()
            task.cancel()

            with pytest.raises(asyncio.CancelledError):
                await task


# =============================================================================
# Recipe Page Tests
# =============================================================================


class TestCreateRecipeList:
    """Tests for InstacartClient.create_recipe_list."""

    @pytest.mark.asyncio
    async def test_payload(
        self, make_instacart_client, basil_and_eggs, mock_instacart_link_response
    ):
        """Test the recipe payload carries title, steps, ingredients and image."""
        handler = RecordingHandler(json_body=mock_instacart_link_response)

        async with make_instacart_client(handler) as client:
            link = await client.create_recipe_list(
                "Basil Omelette",
                basil_and_eggs,
                ["Whisk eggs", "Cook with basil"],
                image_url="https://img.test/omelette.jpg",
            )

        assert link.url == mock_instacart_link_response["products_link_url"]
        assert handler.requests[0].url.path == RECIPE_PATH

        payload = handler.payload
        assert payload["title"] == "Basil Omelette"
        assert payload["instructions"] == ["Whisk eggs", "Cook with basil"]
        assert payload["image_url"] == "https://img.test/omelette.jpg"
        assert [item["name"] for item in payload["ingredients"]] == ["basil", "eggs"]
        assert "landing_page_configuration" in payload

    @pytest.mark.asyncio
    async def test_without_image(
        self, make_instacart_client, basil_and_eggs, mock_instacart_link_response
    ):
        """Test the image field is omitted when not given."""
        handler = RecordingHandler(json_body=mock_instacart_link_response)

        async with make_instacart_client(handler) as client:
            await client.create_recipe_list("Omelette", basil_and_eggs, [])

        assert "image_url" not in handler.payload
        assert handler.payload["instructions"] == []

    @pytest.mark.asyncio
    async def test_empty_recipe_sends_nothing(self, make_instacart_client):
        """Test an all-invalid recipe fails before any request."""
        handler = RecordingHandler(json_body={})

        async with make_instacart_client(handler) as client:
            with pytest.raises(EmptyIngredientListError):
                await client.create_recipe_list("Nothing", [IngredientLine("", 1, "cup")], [])

        assert handler.requests == []


# =============================================================================
# Retailer Lookup Tests
# =============================================================================


class TestListRetailers:
    """Tests for InstacartClient.list_retailers."""

    @pytest.mark.asyncio
    async def test_retailers(self, make_instacart_client):
        """Test retailers are fetched with postal and country codes."""
        retailers = [{"retailer_key": "costco", "name": "Costco"}]
        handler = RecordingHandler(json_body={"retailers": retailers})

        async with make_instacart_client(handler) as client:
            result = await client.list_retailers("94105", "US")

        assert result == retailers
        request = handler.requests[0]
        assert request.method == "GET"
        assert request.url.path == RETAILERS_PATH
        assert request.url.params["postal_code"] == "94105"
        assert request.url.params["country_code"] == "US"

    @pytest.mark.asyncio
    async def test_no_retailers_key(self, make_instacart_client):
        """Test a response without retailers gives an empty list."""
        handler = RecordingHandler(json_body={})

        async with make_instacart_client(handler) as client:
            assert await client.list_retailers("94105") == []
