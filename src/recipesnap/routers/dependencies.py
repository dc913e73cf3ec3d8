"""Shared FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipesnap.database import get_db
from recipesnap.generate.gemini import GeminiRecipeClient
from recipesnap.logging_config import set_context
from recipesnap.repository import (
    FunctionLogRepository,
    ProfileRepository,
    RecipeRepository,
    ShoppingListRepository,
)

_recipe_client: GeminiRecipeClient | None = None


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header(description="Authenticated user id")] = None,
) -> str:
    """
    Get the caller's user id.

    Authentication happens in front of this service; the identity provider's
    user id arrives in the X-User-Id header.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please sign in to continue.",
        )
    user_id = x_user_id.strip()
    set_context(user_id=user_id)
    return user_id


def get_recipe_client() -> GeminiRecipeClient:
    """Get the process-wide Gemini client."""
    global _recipe_client
    if _recipe_client is None:
        _recipe_client = GeminiRecipeClient()
    return _recipe_client


async def close_recipe_client() -> None:
    global _recipe_client
    if _recipe_client is not None:
        await _recipe_client.close()
        _recipe_client = None


async def get_profile_repository(db: AsyncSession = Depends(get_db)) -> ProfileRepository:
    return ProfileRepository(db)


async def get_recipe_repository(db: AsyncSession = Depends(get_db)) -> RecipeRepository:
    return RecipeRepository(db)


async def get_shopping_list_repository(
    db: AsyncSession = Depends(get_db),
) -> ShoppingListRepository:
    return ShoppingListRepository(db)


async def get_function_log_repository(
    db: AsyncSession = Depends(get_db),
) -> FunctionLogRepository:
    return FunctionLogRepository(db)


CurrentUser = Annotated[str, Depends(get_current_user_id)]
