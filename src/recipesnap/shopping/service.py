"""Shopping list generation from recipes."""

from dataclasses import dataclass, field

from recipesnap.logging_config import get_logger
from recipesnap.normalize.ingredients import normalize_ingredients
from recipesnap.repository import ShoppingListRepository
from recipesnap.schemas import Recipe, ShoppingItem

logger = get_logger(__name__)


class RecipeAlreadyInListError(Exception):
    """Raised when a recipe's items are already on the user's shopping list."""

    def __init__(self, recipe_name: str):
        super().__init__(f"Recipe '{recipe_name}' is already in the shopping list")
        self.recipe_name = recipe_name


@dataclass
class ShoppingList:
    """A user's shopping list with grouped views."""

    items: list[ShoppingItem] = field(default_factory=list)

    @property
    def grouped(self) -> dict[str, list[ShoppingItem]]:
        """Items grouped by recipe name, in the order recipes were first added."""
        groups: dict[str, list[ShoppingItem]] = {}
        for item in self.items:
            groups.setdefault(item.recipe_name, []).append(item)
        return groups

    @property
    def unchecked_count(self) -> int:
        """Number of items still to buy."""
        return sum(1 for item in self.items if not item.checked)


def build_shopping_items(recipe: Recipe) -> list[ShoppingItem]:
    """
    Turn a recipe's ingredient lines into unchecked shopping items.

    Lines that normalize to nothing (water, ice, bare measurements) are
    dropped; the rest keep the recipe's ingredient order.
    """
    labels = normalize_ingredients(recipe.ingredients)
    dropped = len(recipe.ingredients) - len(labels)
    if dropped:
        logger.debug(f"Dropped {dropped} non-shopping ingredient(s) from '{recipe.recipe_name}'")
    return [
        ShoppingItem(text=label, checked=False, recipe_name=recipe.recipe_name)
        for label in labels
    ]


def format_shopping_list_text(items: list[ShoppingItem]) -> str:
    """Render a shopping list as plain text, grouped by recipe."""
    sections = []
    for recipe_name, group in ShoppingList(items=items).grouped.items():
        lines = [f"{recipe_name}:"]
        lines.extend(f"[{'x' if item.checked else ' '}] {item.text}" for item in group)
        sections.append("\n".join(lines))
    return "\n\n".join(sections)


class ShoppingListService:
    """Shopping list operations for a single user session."""

    def __init__(self, repository: ShoppingListRepository):
        self.repository = repository

    async def get(self, user_id: str) -> ShoppingList:
        return ShoppingList(items=await self.repository.list_all(user_id))

    async def add_recipe(self, user_id: str, recipe: Recipe) -> list[ShoppingItem]:
        """
        Add every shoppable ingredient of a recipe to the user's list.

        Raises:
            RecipeAlreadyInListError: If the recipe was added before.
        """
        if await self.repository.has_recipe(user_id, recipe.recipe_name):
            raise RecipeAlreadyInListError(recipe.recipe_name)

        items = build_shopping_items(recipe)
        if items:
            await self.repository.add_items(user_id, items)

        logger.info(
            f"Added {len(items)} item(s) from '{recipe.recipe_name}' "
            f"({len(recipe.ingredients)} ingredient line(s))"
        )
        return items

    async def toggle_item(self, user_id: str, text: str, recipe_name: str, checked: bool) -> int:
        return await self.repository.toggle(user_id, text, recipe_name, checked)

    async def remove_item(self, user_id: str, text: str, recipe_name: str) -> int:
        return await self.repository.remove(user_id, text, recipe_name)

    async def clear(self, user_id: str) -> int:
        removed = await self.repository.clear(user_id)
        logger.info(f"Cleared shopping list ({removed} item(s))")
        return removed
