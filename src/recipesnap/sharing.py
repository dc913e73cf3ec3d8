"""Plain-text rendering of recipes for copying, sharing and printing."""

from recipesnap.schemas import Recipe


def format_recipe_text(recipe: Recipe) -> str:
    """
    Render a recipe as plain text.

    Ingredients are bulleted and instructions numbered from 1.
    """
    ingredients = "\n".join(f"- {line}" for line in recipe.ingredients)
    instructions = "\n".join(f"{i}. {step}" for i, step in enumerate(recipe.instructions, 1))
    return (
        f"Recipe: {recipe.recipe_name}\n\n"
        f"{recipe.description}\n\n"
        f"Ingredients:\n{ingredients}\n\n"
        f"Instructions:\n{instructions}"
    )
