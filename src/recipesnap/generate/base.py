"""Error taxonomy for recipe generation calls."""

from typing import Any


class RecipeGenerationError(Exception):
    """Base exception for recipe generation failures."""

    status_code: int = 500
    user_message: str = (
        "An unexpected error occurred while generating the recipe. Please try again."
    )

    def __init__(self, message: str | None = None, response: Any = None):
        super().__init__(message or self.user_message)
        self.response = response


class InvalidImageError(RecipeGenerationError):
    """Raised when the image payload is not a base64 data URL."""

    status_code = 400
    user_message = "Invalid image data format. Expected a data URL."


class ConfigurationError(RecipeGenerationError):
    """Raised when the model API key is missing or rejected."""

    status_code = 500
    user_message = "System Configuration Error: API Key is missing or invalid."


class RateLimitError(RecipeGenerationError):
    """Raised when the model API rate limit is exceeded."""

    status_code = 429
    user_message = (
        "We are receiving too many requests right now. Please wait a moment and try again."
    )

    def __init__(
        self,
        message: str | None = None,
        response: Any = None,
        retry_after: int | None = None,
    ):
        super().__init__(message, response)
        self.retry_after = retry_after


class ServiceUnavailableError(RecipeGenerationError):
    """Raised when the model API answers with a server error."""

    status_code = 503
    user_message = "The AI service is currently experiencing issues. Please try again later."


class SafetyBlockedError(RecipeGenerationError):
    """Raised when the request or its answer was blocked by safety filters."""

    status_code = 422
    user_message = (
        "The AI could not generate a recipe for this image. "
        "Please try a different photo containing clear food items."
    )


class NetworkError(RecipeGenerationError):
    """Raised when the model API cannot be reached."""

    status_code = 502
    user_message = "Network error. Please check your internet connection."


class MalformedResponseError(RecipeGenerationError):
    """Raised when the model answer is not a valid recipe document."""

    status_code = 502
