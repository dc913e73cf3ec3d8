#!/usr/bin/env python
"""
Demo data seeding script.

Populates the database with a demo user so a fresh deployment has something
to show. It will:

1. Wait for the database to accept connections
2. Create the tables if they don't exist
3. Store dietary preferences for the demo user
4. Save a sample recipe (skipped if the user already has one)
5. Add the recipe's ingredients to the demo user's shopping list

Run with: python scripts/seed_demo.py

Environment Variables:
    SEED_USER_ID: User id to seed (default: demo-user)
    SEED_DIETARY_PREFS: Comma-separated dietary preferences (default: vegetarian)
    DATABASE_URL: Database connection string
"""

import asyncio
import os
import sys

from sqlalchemy import text

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from recipesnap.database import AsyncSessionLocal, async_engine, create_tables
from recipesnap.logging_config import configure_logging, get_logger
from recipesnap.repository import ProfileRepository, RecipeRepository, ShoppingListRepository
from recipesnap.schemas import Recipe
from recipesnap.shopping.service import RecipeAlreadyInListError, ShoppingListService

# Configure logging
configure_logging(log_level=os.getenv("LOG_LEVEL", "INFO"))
logger = get_logger(__name__)

SEED_USER_ID = os.getenv("SEED_USER_ID", "demo-user")
SEED_DIETARY_PREFS = [
    p.strip() for p in os.getenv("SEED_DIETARY_PREFS", "vegetarian").split(",") if p.strip()
]

DEMO_RECIPE = Recipe(
    recipe_name="Roasted Tomato Soup",
    description="A velvety soup of oven-roasted tomatoes, garlic and basil.",
    ingredients=[
        "2 lbs ripe tomatoes, halved",
        "1 onion, quartered",
        "6 cloves garlic",
        "3 tbsp olive oil",
        "2 cups vegetable stock",
        "1 cup water",
        "1/2 cup heavy cream",
        "1 handful fresh basil",
        "Salt and pepper to taste",
    ],
    instructions=[
        "Heat the oven to 220°C.",
        "Toss tomatoes, onion and garlic with olive oil and roast for 35 minutes.",
        "Transfer to a pot with the stock and water and simmer for 10 minutes.",
        "Blend until smooth, stir in the cream and basil, and season.",
    ],
)


async def wait_for_database(max_retries: int = 30, retry_delay: int = 2) -> bool:
    """Wait for the database to be available."""
    logger.info("Waiting for database to be ready...")

    for attempt in range(max_retries):
        try:
            async with async_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Database is ready")
            return True
        except Exception as e:
            logger.debug(f"Database not ready (attempt {attempt + 1}/{max_retries}): {e}")
            await asyncio.sleep(retry_delay)

    logger.error("Database did not become ready in time")
    return False


async def seed_demo_user(results: dict) -> None:
    """Store the demo profile, saved recipe and shopping list."""
    async with AsyncSessionLocal() as session:
        await ProfileRepository(session).update(SEED_USER_ID, SEED_DIETARY_PREFS)
        logger.info(f"Stored dietary preferences: {SEED_DIETARY_PREFS}")

        recipes = RecipeRepository(session)
        if await recipes.list_all(SEED_USER_ID):
            logger.info("Demo user already has saved recipes, skipping recipe")
        else:
            saved = await recipes.save(SEED_USER_ID, DEMO_RECIPE)
            results["recipe_saved"] = True
            results["recipe_id"] = saved.id

        service = ShoppingListService(ShoppingListRepository(session))
        try:
            added = await service.add_recipe(SEED_USER_ID, DEMO_RECIPE)
            results["shopping_items_added"] = len(added)
        except RecipeAlreadyInListError:
            logger.info("Demo recipe already on the shopping list, skipping")


async def seed_demo() -> dict:
    """
    Main seeding function.

    Returns:
        Dictionary with seeding results.
    """
    results = {
        "status": "unknown",
        "user_id": SEED_USER_ID,
        "recipe_saved": False,
        "shopping_items_added": 0,
    }

    try:
        # Wait for services
        if not await wait_for_database():
            results["status"] = "failed"
            results["error"] = "Database not available"
            return results

        await create_tables()
        logger.info("Database tables initialized")

        await seed_demo_user(results)
    finally:
        await async_engine.dispose()

    results["status"] = "completed"
    logger.info(f"Seeding completed: {results}")
    return results


def main():
    """Entry point for the seed script."""
    logger.info("=" * 60)
    logger.info("Demo Seeding Script")
    logger.info("=" * 60)
    logger.info(f"User id: {SEED_USER_ID}")
    logger.info(f"Dietary preferences: {SEED_DIETARY_PREFS}")
    logger.info("=" * 60)

    try:
        results = asyncio.run(seed_demo())

        logger.info("=" * 60)
        logger.info("Seeding Results:")
        for key, value in results.items():
            logger.info(f"  {key}: {value}")
        logger.info("=" * 60)

        sys.exit(0 if results["status"] == "completed" else 1)

    except KeyboardInterrupt:
        logger.info("Seeding interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Seeding failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
