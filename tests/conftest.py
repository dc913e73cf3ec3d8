"""Pytest configuration and shared fixtures."""

import json
import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

# Point the application at an in-memory database before any module builds its engine.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("GEMINI_API_KEY", "test-key")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from recipesnap.database import Base, get_db  # noqa: E402
from recipesnap.main import app  # noqa: E402
from recipesnap.routers.dependencies import get_recipe_client  # noqa: E402
from recipesnap.schemas import Recipe  # noqa: E402

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require external services)"
    )
    config.addinivalue_line("markers", "slow: marks tests as slow running")


# =============================================================================
# Recipe Fixtures
# =============================================================================


@pytest.fixture
def sample_recipe_data() -> dict[str, Any]:
    """Recipe document as returned by the model."""
    return {
        "recipeName": "Tomato Basil Pasta",
        "description": "A quick weeknight pasta with garlic and fresh basil.",
        "ingredients": [
            "8 oz spaghetti",
            "2 tbsp olive oil",
            "3 cloves garlic, minced",
            "1 can crushed tomatoes",
            "1 cup water",
            "Salt to taste",
            "Fresh basil leaves",
        ],
        "instructions": [
            "Boil the spaghetti until al dente.",
            "Fry the garlic in olive oil.",
            "Add tomatoes and water, simmer 10 minutes.",
            "Toss with pasta and basil.",
        ],
    }


@pytest.fixture
def sample_recipe(sample_recipe_data) -> Recipe:
    return Recipe.model_validate(sample_recipe_data)


@pytest.fixture
def sample_image_data() -> str:
    """A tiny JPEG-looking data URL."""
    return "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQAAAQABAAD/2wBDAAgGBgcGBQgH"


def make_gemini_body(recipe_data: dict[str, Any] | str, finish_reason: str = "STOP") -> dict:
    """Build a generateContent response around a recipe document."""
    text = recipe_data if isinstance(recipe_data, str) else json.dumps(recipe_data)
    return {
        "candidates": [
            {
                "content": {"parts": [{"text": text}], "role": "model"},
                "finishReason": finish_reason,
            }
        ],
        "usageMetadata": {"promptTokenCount": 1290, "candidatesTokenCount": 210},
    }


@pytest.fixture
def gemini_body(sample_recipe_data) -> dict:
    return make_gemini_body(sample_recipe_data)


@pytest.fixture
def gemini_body_factory():
    """Factory for generateContent responses."""
    return make_gemini_body


@pytest.fixture
def mock_transport_client():
    """Factory for an httpx client whose requests are answered by a handler."""

    def factory(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def mock_recipe_client(sample_recipe):
    """Gemini client double returning the sample recipe."""
    client = MagicMock()
    client.generate_from_image = AsyncMock(return_value=sample_recipe)
    client.remix_recipe = AsyncMock(return_value=sample_recipe)
    return client


@pytest_asyncio.fixture
async def api_client(session_factory, mock_recipe_client):
    """HTTP client for the app backed by the in-memory database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_recipe_client] = lambda: mock_recipe_client

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-User-Id": "user-123"}
