"""Tests for the persistence repositories against an in-memory database."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from recipesnap.models import FunctionLog, SavedRecipe
from recipesnap.repository import (
    FunctionLogRepository,
    PersistenceError,
    ProfileRepository,
    RecipeRepository,
)
from recipesnap.schemas import Recipe

# =============================================================================
# Profiles
# =============================================================================


class TestProfileRepository:
    """Tests for ProfileRepository."""

    @pytest.mark.asyncio
    async def test_missing_profile(self, db_session):
        assert await ProfileRepository(db_session).get("nobody") is None

    @pytest.mark.asyncio
    async def test_update_inserts_then_replaces(self, db_session):
        repo = ProfileRepository(db_session)

        created = await repo.update("user-1", ["vegan"])
        assert created.dietary_prefs == ["vegan"]

        await repo.update("user-1", ["vegetarian", "nut-free"])
        profile = await repo.get("user-1")

        assert profile.dietary_prefs == ["vegetarian", "nut-free"]
        assert profile.updated_at is not None


# =============================================================================
# Saved Recipes
# =============================================================================


class TestRecipeRepository:
    """Tests for RecipeRepository."""

    @pytest.mark.asyncio
    async def test_save_assigns_id(self, db_session, sample_recipe):
        saved = await RecipeRepository(db_session).save("user-1", sample_recipe)

        assert saved.id
        assert saved.recipe_name == sample_recipe.recipe_name
        assert saved.ingredients == sample_recipe.ingredients

    @pytest.mark.asyncio
    async def test_list_all_newest_first(self, db_session):
        now = datetime.now(timezone.utc)
        db_session.add_all(
            [
                SavedRecipe(
                    id="old",
                    user_id="user-1",
                    recipe_data={"recipeName": "Old"},
                    created_at=now - timedelta(days=2),
                ),
                SavedRecipe(
                    id="new",
                    user_id="user-1",
                    recipe_data={"recipeName": "New"},
                    created_at=now,
                ),
                SavedRecipe(
                    id="other",
                    user_id="user-2",
                    recipe_data={"recipeName": "Other"},
                    created_at=now,
                ),
            ]
        )
        await db_session.commit()

        recipes = await RecipeRepository(db_session).list_all("user-1")

        assert [r.id for r in recipes] == ["new", "old"]
        assert [r.recipe_name for r in recipes] == ["New", "Old"]

    @pytest.mark.asyncio
    async def test_get_is_scoped_to_owner(self, db_session, sample_recipe):
        repo = RecipeRepository(db_session)
        saved = await repo.save("user-1", sample_recipe)

        assert (await repo.get("user-1", saved.id)).recipe_name == "Tomato Basil Pasta"
        assert await repo.get("user-2", saved.id) is None

    @pytest.mark.asyncio
    async def test_delete(self, db_session, sample_recipe):
        repo = RecipeRepository(db_session)
        saved = await repo.save("user-1", sample_recipe)

        assert await repo.delete("user-2", saved.id) is False
        assert await repo.delete("user-1", saved.id) is True
        assert await repo.get("user-1", saved.id) is None
        assert await repo.delete("user-1", saved.id) is False

    @pytest.mark.asyncio
    async def test_nutrition_round_trips(self, db_session):
        recipe = Recipe.model_validate(
            {
                "recipeName": "Porridge",
                "ingredients": ["1 cup oats"],
                "nutrition": {"calories": "300", "protein": "10g", "carbs": "50g", "fat": "5g"},
            }
        )
        repo = RecipeRepository(db_session)
        saved = await repo.save("user-1", recipe)

        fetched = await repo.get("user-1", saved.id)
        assert fetched.nutrition.calories == "300"
        assert fetched.image_url is None


# =============================================================================
# Function Logs
# =============================================================================


class TestFunctionLogRepository:
    """Tests for FunctionLogRepository."""

    @pytest.mark.asyncio
    async def test_count_since_respects_window(self, db_session):
        now = datetime.now(timezone.utc)
        db_session.add_all(
            [
                FunctionLog(user_id="user-1", function_name="remix-recipe", created_at=now),
                FunctionLog(
                    user_id="user-1",
                    function_name="remix-recipe",
                    created_at=now - timedelta(hours=2),
                ),
                FunctionLog(user_id="user-1", function_name="other", created_at=now),
                FunctionLog(user_id="user-2", function_name="remix-recipe", created_at=now),
            ]
        )
        await db_session.commit()

        repo = FunctionLogRepository(db_session)
        since = now - timedelta(hours=1)

        assert await repo.count_since("user-1", "remix-recipe", since) == 1
        assert await repo.count_since("user-1", "remix-recipe", now - timedelta(days=1)) == 2
        assert await repo.count_since("user-3", "remix-recipe", since) == 0

    @pytest.mark.asyncio
    async def test_record(self, db_session):
        repo = FunctionLogRepository(db_session)
        since = datetime.now(timezone.utc) - timedelta(minutes=1)

        await repo.record("user-1", "remix-recipe")
        await repo.record("user-1", "remix-recipe")

        assert await repo.count_since("user-1", "remix-recipe", since) == 2


class TestPersistenceErrors:
    """Tests for database failure wrapping."""

    @pytest.mark.asyncio
    async def test_execute_failure_is_wrapped(self):
        session = MagicMock()
        session.execute = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("database is locked"))
        )
        session.rollback = AsyncMock()

        with pytest.raises(PersistenceError) as exc_info:
            await RecipeRepository(session).list_all("user-1")

        assert str(exc_info.value) == "Failed to fetch recipes"
        assert exc_info.value.operation == "fetch recipes"
        session.rollback.assert_awaited_once()
