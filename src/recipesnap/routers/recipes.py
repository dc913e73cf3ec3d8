"""API routes for generating, remixing, saving and sharing recipes."""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from recipesnap.config import Settings, get_settings
from recipesnap.generate.gemini import GeminiRecipeClient, build_dietary_context
from recipesnap.logging_config import get_logger
from recipesnap.models import utcnow
from recipesnap.repository import (
    FunctionLogRepository,
    PersistenceError,
    ProfileRepository,
    RecipeRepository,
)
from recipesnap.routers.dependencies import (
    CurrentUser,
    get_function_log_repository,
    get_profile_repository,
    get_recipe_client,
    get_recipe_repository,
)
from recipesnap.schemas import Recipe
from recipesnap.sharing import format_recipe_text

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])

REMIX_FUNCTION_NAME = "remix-recipe"


# Request/Response schemas
class GenerateRecipeRequest(BaseModel):
    """Request to generate a recipe from a photo."""

    model_config = ConfigDict(populate_by_name=True)

    image_data: str = Field(alias="imageData", min_length=1)
    language: str = Field(default="English", min_length=1, max_length=50)


class RemixRecipeRequest(BaseModel):
    """Request to modify an existing recipe."""

    model_config = ConfigDict(populate_by_name=True)

    original_recipe: Recipe = Field(alias="originalRecipe")
    prompt: str = Field(min_length=1, max_length=500)


class SavedRecipeListResponse(BaseModel):
    """List of saved recipes."""

    recipes: list[Recipe]
    total: int


# =============================================================================
# Generation Endpoints
# =============================================================================


@router.post("/generate", response_model=Recipe, response_model_exclude_none=True)
async def generate_recipe(
    request: GenerateRecipeRequest,
    user_id: CurrentUser,
    client: Annotated[GeminiRecipeClient, Depends(get_recipe_client)],
    profiles: Annotated[ProfileRepository, Depends(get_profile_repository)],
) -> Recipe:
    """
    Generate a recipe from a food photo.

    The caller's dietary preferences, when set, are passed to the model so the
    recipe can be adapted to them.
    """
    dietary_context = None
    try:
        profile = await profiles.get(user_id)
        if profile:
            dietary_context = build_dietary_context(profile.dietary_prefs)
    except PersistenceError as e:
        logger.warning(f"Generating without dietary preferences: {e}")

    return await client.generate_from_image(
        request.image_data,
        language=request.language,
        dietary_context=dietary_context,
    )


@router.post("/remix", response_model=Recipe, response_model_exclude_none=True)
async def remix_recipe(
    request: RemixRecipeRequest,
    user_id: CurrentUser,
    client: Annotated[GeminiRecipeClient, Depends(get_recipe_client)],
    logs: Annotated[FunctionLogRepository, Depends(get_function_log_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Recipe:
    """Modify a recipe according to a free-text request, e.g. "make it vegan"."""
    window_start = utcnow() - timedelta(seconds=settings.remix_rate_limit_window_seconds)
    try:
        count = await logs.count_since(user_id, REMIX_FUNCTION_NAME, window_start)
    except PersistenceError as e:
        logger.error(f"Rate limiting error: could not count requests: {e}")
    else:
        if count >= settings.remix_rate_limit_count:
            logger.warning(f"Remix rate limit reached ({count} calls)")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many remix requests. Please try again later.",
            )

    try:
        await logs.record(user_id, REMIX_FUNCTION_NAME)
    except PersistenceError as e:
        logger.error(f"Rate limiting error: could not record request: {e}")

    return await client.remix_recipe(request.original_recipe, request.prompt)


@router.post("/share", response_class=PlainTextResponse)
async def share_recipe(recipe: Recipe) -> str:
    """Render an unsaved recipe as shareable plain text."""
    return format_recipe_text(recipe)


# =============================================================================
# Saved Recipe Endpoints
# =============================================================================


@router.get("/saved", response_model=SavedRecipeListResponse, response_model_exclude_none=True)
async def list_saved_recipes(
    user_id: CurrentUser,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
) -> SavedRecipeListResponse:
    """List the caller's saved recipes, newest first."""
    saved = await recipes.list_all(user_id)
    return SavedRecipeListResponse(recipes=saved, total=len(saved))


@router.post(
    "/saved",
    response_model=Recipe,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def save_recipe(
    recipe: Recipe,
    user_id: CurrentUser,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
) -> Recipe:
    """Save a recipe to the caller's collection."""
    return await recipes.save(user_id, recipe)


async def _get_saved_or_404(recipes: RecipeRepository, user_id: str, recipe_id: str) -> Recipe:
    recipe = await recipes.get(user_id, recipe_id)
    if not recipe:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Recipe {recipe_id} not found",
        )
    return recipe


@router.get("/saved/{recipe_id}", response_model=Recipe, response_model_exclude_none=True)
async def get_saved_recipe(
    recipe_id: str,
    user_id: CurrentUser,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
) -> Recipe:
    """Get one saved recipe."""
    return await _get_saved_or_404(recipes, user_id, recipe_id)


@router.get("/saved/{recipe_id}/share", response_class=PlainTextResponse)
async def share_saved_recipe(
    recipe_id: str,
    user_id: CurrentUser,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
) -> str:
    """Render a saved recipe as shareable plain text."""
    return format_recipe_text(await _get_saved_or_404(recipes, user_id, recipe_id))


@router.delete("/saved/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_recipe(
    recipe_id: str,
    user_id: CurrentUser,
    recipes: Annotated[RecipeRepository, Depends(get_recipe_repository)],
) -> None:
    """Remove a recipe from the caller's collection."""
    if not await recipes.delete(user_id, recipe_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Recipe {recipe_id} not found",
        )
