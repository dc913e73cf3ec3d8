"""API routes for the caller's dietary preference profile."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from recipesnap.logging_config import get_logger
from recipesnap.repository import ProfileRepository
from recipesnap.routers.dependencies import CurrentUser, get_profile_repository
from recipesnap.schemas import Profile

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


class UpdateProfileRequest(BaseModel):
    """Replace the caller's dietary preferences."""

    model_config = ConfigDict(populate_by_name=True)

    dietary_prefs: list[str] = Field(alias="dietaryPrefs", max_length=50)


@router.get("", response_model=Profile)
async def get_profile(
    user_id: CurrentUser,
    profiles: Annotated[ProfileRepository, Depends(get_profile_repository)],
) -> Profile:
    """Get the caller's profile. A user with no stored profile has no preferences."""
    profile = await profiles.get(user_id)
    if profile is None:
        return Profile(id=user_id, dietary_prefs=[])
    return Profile.model_validate(profile)


@router.put("", response_model=Profile)
async def update_profile(
    request: UpdateProfileRequest,
    user_id: CurrentUser,
    profiles: Annotated[ProfileRepository, Depends(get_profile_repository)],
) -> Profile:
    """Replace the caller's dietary preferences."""
    prefs = [p.strip() for p in request.dietary_prefs if p.strip()]
    profile = await profiles.update(user_id, prefs)
    logger.info(f"Updated dietary preferences: {prefs}")
    return Profile.model_validate(profile)
