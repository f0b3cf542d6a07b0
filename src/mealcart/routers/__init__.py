"""API routers for the mealcart service."""

from mealcart.routers.grocery_lists import router as grocery_lists_router

__all__ = [
    "grocery_lists_router",
]
