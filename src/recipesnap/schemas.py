"""Common data schemas shared by the API, services and persistence layer."""

from pydantic import BaseModel, ConfigDict, Field


class Nutrition(BaseModel):
    """Approximate nutrition per serving, as free text from the model."""

    calories: str
    protein: str
    carbs: str
    fat: str


class Recipe(BaseModel):
    """Recipe with ingredients and instructions."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    recipe_name: str = Field(alias="recipeName", min_length=1)
    description: str = ""
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    image_url: str | None = Field(default=None, alias="imageUrl")
    nutrition: Nutrition | None = None


class ShoppingItem(BaseModel):
    """One shopping-list entry."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    text: str
    checked: bool = False
    recipe_name: str = Field(alias="recipeName")


class Profile(BaseModel):
    """User profile with dietary preference tags."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    dietary_prefs: list[str] = Field(default_factory=list, alias="dietaryPrefs")
