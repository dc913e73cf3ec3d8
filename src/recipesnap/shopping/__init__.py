"""Shopping list built from recipe ingredients."""

from recipesnap.shopping.service import (
    RecipeAlreadyInListError,
    ShoppingList,
    ShoppingListService,
    build_shopping_items,
    format_shopping_list_text,
)

__all__ = [
    "RecipeAlreadyInListError",
    "ShoppingList",
    "ShoppingListService",
    "build_shopping_items",
    "format_shopping_list_text",
]
