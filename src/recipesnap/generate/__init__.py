"""Recipe generation through the Gemini image-to-text model."""

from recipesnap.generate.base import (
    ConfigurationError,
    InvalidImageError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    RecipeGenerationError,
    SafetyBlockedError,
    ServiceUnavailableError,
)
from recipesnap.generate.gemini import (
    GeminiRecipeClient,
    build_dietary_context,
    parse_data_url,
)

__all__ = [
    "ConfigurationError",
    "GeminiRecipeClient",
    "InvalidImageError",
    "MalformedResponseError",
    "NetworkError",
    "RateLimitError",
    "RecipeGenerationError",
    "SafetyBlockedError",
    "ServiceUnavailableError",
    "build_dietary_context",
    "parse_data_url",
]
