"""API routes for the per-user shopping list."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from recipesnap.logging_config import get_logger
from recipesnap.repository import ShoppingListRepository
from recipesnap.routers.dependencies import CurrentUser, get_shopping_list_repository
from recipesnap.schemas import Recipe, ShoppingItem
from recipesnap.shopping.service import (
    RecipeAlreadyInListError,
    ShoppingListService,
    format_shopping_list_text,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/shopping-list", tags=["shopping-list"])


# Request/Response schemas
class ShoppingListResponse(BaseModel):
    """A user's shopping list."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[ShoppingItem]
    grouped: dict[str, list[ShoppingItem]]
    total: int
    unchecked_count: int = Field(alias="uncheckedCount")


class AddRecipeResponse(BaseModel):
    """Items added from a recipe."""

    model_config = ConfigDict(populate_by_name=True)

    recipe_name: str = Field(alias="recipeName")
    added: list[ShoppingItem]
    total: int


class ItemKey(BaseModel):
    """Identifies shopping-list rows by text and recipe name."""

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(min_length=1)
    recipe_name: str = Field(alias="recipeName")


class ToggleItemRequest(ItemKey):
    """Request to check or uncheck an item."""

    checked: bool


class MutationResponse(BaseModel):
    """Number of rows affected by a mutation."""

    affected: int


async def get_shopping_list_service(
    repository: Annotated[ShoppingListRepository, Depends(get_shopping_list_repository)],
) -> ShoppingListService:
    return ShoppingListService(repository)


ServiceDep = Annotated[ShoppingListService, Depends(get_shopping_list_service)]


@router.get("", response_model=ShoppingListResponse)
async def get_shopping_list(user_id: CurrentUser, service: ServiceDep) -> ShoppingListResponse:
    """Get the caller's shopping list, also grouped by recipe."""
    shopping_list = await service.get(user_id)
    return ShoppingListResponse(
        items=shopping_list.items,
        grouped=shopping_list.grouped,
        total=len(shopping_list.items),
        unchecked_count=shopping_list.unchecked_count,
    )


@router.post("/recipes", response_model=AddRecipeResponse, status_code=status.HTTP_201_CREATED)
async def add_recipe_to_shopping_list(
    recipe: Recipe,
    user_id: CurrentUser,
    service: ServiceDep,
) -> AddRecipeResponse:
    """
    Add a recipe's ingredients to the shopping list.

    Quantities and units are stripped, and staples like water and ice are
    skipped. A recipe can only be added once.
    """
    try:
        added = await service.add_recipe(user_id, recipe)
    except RecipeAlreadyInListError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="This recipe is already in your shopping list.",
        ) from e

    return AddRecipeResponse(recipe_name=recipe.recipe_name, added=added, total=len(added))


@router.patch("/items", response_model=MutationResponse)
async def toggle_shopping_list_item(
    request: ToggleItemRequest,
    user_id: CurrentUser,
    service: ServiceDep,
) -> MutationResponse:
    """Check or uncheck an item."""
    affected = await service.toggle_item(user_id, request.text, request.recipe_name, request.checked)
    if not affected:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return MutationResponse(affected=affected)


@router.delete("/items", response_model=MutationResponse)
async def remove_shopping_list_item(
    request: ItemKey,
    user_id: CurrentUser,
    service: ServiceDep,
) -> MutationResponse:
    """Remove an item."""
    affected = await service.remove_item(user_id, request.text, request.recipe_name)
    if not affected:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return MutationResponse(affected=affected)


@router.delete("", response_model=MutationResponse)
async def clear_shopping_list(user_id: CurrentUser, service: ServiceDep) -> MutationResponse:
    """Remove every item from the caller's shopping list."""
    return MutationResponse(affected=await service.clear(user_id))


@router.get("/export", response_class=PlainTextResponse)
async def export_shopping_list(user_id: CurrentUser, service: ServiceDep) -> str:
    """Render the shopping list as plain text grouped by recipe."""
    shopping_list = await service.get(user_id)
    return format_shopping_list_text(shopping_list.items)
