"""API routers for the recipesnap application."""

from recipesnap.routers.profiles import router as profiles_router
from recipesnap.routers.recipes import router as recipes_router
from recipesnap.routers.shopping_list import router as shopping_list_router

__all__ = [
    "profiles_router",
    "recipes_router",
    "shopping_list_router",
]
