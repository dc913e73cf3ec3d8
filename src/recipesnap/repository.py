"""Repositories for profiles, saved recipes, shopping-list rows and call logs."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recipesnap.logging_config import get_logger
from recipesnap.models import FunctionLog, Profile, SavedRecipe, ShoppingListItem, utcnow
from recipesnap.schemas import Recipe, ShoppingItem

logger = get_logger(__name__)


class PersistenceError(Exception):
    """Raised when a database operation fails."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class BaseRepository:
    """Shared session handling for the repositories below."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _execute(self, statement: Any, operation: str) -> Any:
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error during {operation}: {e}")
            raise PersistenceError(f"Failed to {operation}", operation=operation) from e

    async def _commit(self, operation: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error during {operation}: {e}")
            raise PersistenceError(f"Failed to {operation}", operation=operation) from e


# =============================================================================
# Profiles
# =============================================================================


class ProfileRepository(BaseRepository):
    """Repository for user profiles."""

    async def get(self, user_id: str) -> Profile | None:
        """Get a user's profile, or None if none was ever stored."""
        result = await self._execute(select(Profile).where(Profile.id == user_id), "fetch profile")
        return result.scalar_one_or_none()

    async def update(self, user_id: str, prefs: list[str]) -> Profile:
        """Insert or replace a user's dietary preferences."""
        profile = await self.get(user_id)
        if profile is None:
            profile = Profile(id=user_id, dietary_prefs=list(prefs), updated_at=utcnow())
            self.session.add(profile)
        else:
            profile.dietary_prefs = list(prefs)
            profile.updated_at = utcnow()

        await self._commit("update profile")
        return profile


# =============================================================================
# Saved Recipes
# =============================================================================


class RecipeRepository(BaseRepository):
    """Repository for saved recipes."""

    @staticmethod
    def _to_recipe(row: SavedRecipe) -> Recipe:
        recipe = Recipe.model_validate(row.recipe_data)
        recipe.id = row.id
        return recipe

    async def save(self, user_id: str, recipe: Recipe) -> Recipe:
        """Store a recipe and return it with its new id."""
        row = SavedRecipe(
            user_id=user_id,
            recipe_data=recipe.model_dump(by_alias=True, exclude_none=True, exclude={"id"}),
            created_at=utcnow(),
        )
        self.session.add(row)
        await self._commit("save recipe")
        logger.info(f"Saved recipe '{recipe.recipe_name}' as {row.id}")
        return self._to_recipe(row)

    async def list_all(self, user_id: str) -> list[Recipe]:
        """List a user's saved recipes, newest first."""
        result = await self._execute(
            select(SavedRecipe)
            .where(SavedRecipe.user_id == user_id)
            .order_by(SavedRecipe.created_at.desc(), SavedRecipe.id),
            "fetch recipes",
        )
        return [self._to_recipe(row) for row in result.scalars().all()]

    async def get(self, user_id: str, recipe_id: str) -> Recipe | None:
        """Get one saved recipe owned by the user."""
        result = await self._execute(
            select(SavedRecipe).where(SavedRecipe.id == recipe_id, SavedRecipe.user_id == user_id),
            "fetch recipe",
        )
        row = result.scalar_one_or_none()
        return self._to_recipe(row) if row else None

    async def delete(self, user_id: str, recipe_id: str) -> bool:
        """Delete a saved recipe. Returns False if it did not exist."""
        result = await self._execute(
            delete(SavedRecipe).where(SavedRecipe.id == recipe_id, SavedRecipe.user_id == user_id),
            "delete recipe",
        )
        await self._commit("delete recipe")
        return result.rowcount > 0


# =============================================================================
# Shopping List
# =============================================================================


class ShoppingListRepository(BaseRepository):
    """Repository for shopping-list rows keyed by (text, recipe_name)."""

    @staticmethod
    def _key(user_id: str, text: str, recipe_name: str) -> tuple:
        return (
            ShoppingListItem.user_id == user_id,
            ShoppingListItem.text == text,
            ShoppingListItem.recipe_name == recipe_name,
        )

    async def list_all(self, user_id: str) -> list[ShoppingItem]:
        """List all rows for a user in insertion order."""
        result = await self._execute(
            select(ShoppingListItem)
            .where(ShoppingListItem.user_id == user_id)
            .order_by(ShoppingListItem.id),
            "fetch shopping list",
        )
        return [ShoppingItem.model_validate(row) for row in result.scalars().all()]

    async def has_recipe(self, user_id: str, recipe_name: str) -> bool:
        """Check whether any row already belongs to the given recipe."""
        result = await self._execute(
            select(func.count())
            .select_from(ShoppingListItem)
            .where(
                ShoppingListItem.user_id == user_id,
                ShoppingListItem.recipe_name == recipe_name,
            ),
            "fetch shopping list",
        )
        return (result.scalar() or 0) > 0

    async def add_items(self, user_id: str, items: Sequence[ShoppingItem]) -> None:
        """Append a batch of rows."""
        self.session.add_all(
            [
                ShoppingListItem(
                    user_id=user_id,
                    text=item.text,
                    recipe_name=item.recipe_name,
                    checked=item.checked,
                )
                for item in items
            ]
        )
        await self._commit("add items to shopping list")

    async def toggle(self, user_id: str, text: str, recipe_name: str, checked: bool) -> int:
        """Set the checked flag on every row matching the key. Returns rows updated."""
        result = await self._execute(
            update(ShoppingListItem)
            .where(*self._key(user_id, text, recipe_name))
            .values(checked=checked),
            "update shopping list item",
        )
        await self._commit("update shopping list item")
        return result.rowcount

    async def remove(self, user_id: str, text: str, recipe_name: str) -> int:
        """Delete every row matching the key. Returns rows deleted."""
        result = await self._execute(
            delete(ShoppingListItem).where(*self._key(user_id, text, recipe_name)),
            "delete shopping list item",
        )
        await self._commit("delete shopping list item")
        return result.rowcount

    async def clear(self, user_id: str) -> int:
        """Delete all rows for a user."""
        result = await self._execute(
            delete(ShoppingListItem).where(ShoppingListItem.user_id == user_id),
            "clear shopping list",
        )
        await self._commit("clear shopping list")
        return result.rowcount


# =============================================================================
# Function Logs
# =============================================================================


class FunctionLogRepository(BaseRepository):
    """Repository for rate-limit bookkeeping."""

    async def count_since(self, user_id: str, function_name: str, since: datetime) -> int:
        result = await self._execute(
            select(func.count())
            .select_from(FunctionLog)
            .where(
                FunctionLog.user_id == user_id,
                FunctionLog.function_name == function_name,
                FunctionLog.created_at >= since,
            ),
            "count function calls",
        )
        return result.scalar() or 0

    async def record(self, user_id: str, function_name: str) -> None:
        self.session.add(
            FunctionLog(user_id=user_id, function_name=function_name, created_at=utcnow())
        )
        await self._commit("record function call")
