"""FastAPI application entry point."""

import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recipesnap.config import get_settings
from recipesnap.database import async_engine, create_tables
from recipesnap.generate.base import RateLimitError, RecipeGenerationError
from recipesnap.logging_config import LoggingContext, configure_logging, get_logger
from recipesnap.repository import PersistenceError
from recipesnap.routers import profiles_router, recipes_router, shopping_list_router
from recipesnap.routers.dependencies import close_recipe_client

settings = get_settings()

# Configure logging on module load
configure_logging(log_level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting Recipesnap API")

    await create_tables()
    logger.info("Database tables initialized")

    yield

    logger.info("Shutting down Recipesnap API")
    await close_recipe_client()
    await async_engine.dispose()


app = FastAPI(
    title="Recipesnap API",
    description="Turn a food photo into a recipe and a shopping list",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag every log line of a request with a request id."""
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    with LoggingContext(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(RecipeGenerationError)
async def recipe_generation_error_handler(
    request: Request, exc: RecipeGenerationError
) -> JSONResponse:
    """Return the user-facing message for a failed generation call."""
    logger.error(f"Recipe generation failed ({type(exc).__name__}): {exc}")
    headers = {}
    if isinstance(exc, RateLimitError) and exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.user_message},
        headers=headers,
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Surface storage failures to the user."""
    return JSONResponse(
        status_code=500,
        content={"detail": f"{exc}. Please try again."},
    )


app.include_router(recipes_router)
app.include_router(shopping_list_router)
app.include_router(profiles_router)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "recipesnap-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Recipesnap API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
