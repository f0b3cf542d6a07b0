"""Clients for external grocery ordering partners."""

from mealcart.partners.base import (
    EmptyIngredientListError,
    PartnerAuthError,
    PartnerBadRequestError,
    PartnerClient,
    PartnerEndpointError,
    PartnerError,
    PartnerLink,
    PartnerUnprocessableError,
    PartnerUpstreamError,
    filter_valid_ingredients,
)
from mealcart.partners.instacart import (
    InstacartClient,
    close_partner_client,
    get_partner_client,
)

__all__ = [
    "EmptyIngredientListError",
    "InstacartClient",
    "PartnerAuthError",
    "PartnerBadRequestError",
    "PartnerClient",
    "PartnerEndpointError",
    "PartnerError",
    "PartnerLink",
    "PartnerUnprocessableError",
    "PartnerUpstreamError",
    "close_partner_client",
    "filter_valid_ingredients",
    "get_partner_client",
]
