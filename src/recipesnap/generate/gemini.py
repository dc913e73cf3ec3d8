"""Google Gemini client that turns food photos into structured recipes."""

import json
import re
from typing import Any

import httpx
from pydantic import ValidationError

from recipesnap.config import get_settings
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
from recipesnap.logging_config import get_logger
from recipesnap.schemas import Recipe

logger = get_logger(__name__)

_DATA_URL_RE = re.compile(r"^data:(.+);base64,(.+)$", re.DOTALL)

# Finish/block reasons that mean the content was refused rather than failed.
_BLOCK_REASONS = frozenset({"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"})

RECIPE_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "recipeName": {"type": "STRING", "description": "The name of the recipe."},
        "description": {"type": "STRING", "description": "A brief description of the dish."},
        "ingredients": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "A list of ingredients with quantities.",
        },
        "instructions": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Step-by-step cooking instructions.",
        },
    },
    "required": ["recipeName", "description", "ingredients", "instructions"],
}


def parse_data_url(image_data: str) -> tuple[str, str]:
    """
    Split a data URL into its MIME type and base64 payload.

    Raises:
        InvalidImageError: If the string is not a base64 data URL.
    """
    match = _DATA_URL_RE.match(image_data or "")
    if not match:
        raise InvalidImageError()
    return match.group(1), match.group(2)


def build_dietary_context(prefs: list[str] | None) -> str | None:
    """Turn profile preference tags into a prompt sentence."""
    tags = [p.strip() for p in prefs or [] if p and p.strip()]
    if not tags:
        return None
    return (
        f"The user has the following dietary preferences/restrictions: {', '.join(tags)}. "
        "Please adapt the recipe to be suitable for them."
    )


def build_image_prompt(language: str, dietary_context: str | None = None) -> str:
    prompt = (
        f"Analyze the food in this image and generate a detailed recipe in {language}. "
        "The recipe should include a creative name, a short description, a list of "
        "ingredients with measurements, and step-by-step instructions."
    )
    if dietary_context:
        prompt += f" {dietary_context}"
    return prompt + " Ensure the response is in JSON format."


def build_remix_prompt(original: Recipe, request: str) -> str:
    original_json = json.dumps(
        original.model_dump(by_alias=True, exclude_none=True, exclude={"id"}),
        indent=2,
        ensure_ascii=False,
    )
    return (
        f"Original Recipe:\n{original_json}\n\n"
        f'User Request:\n"{request}"\n\n'
        "Based on the user's request, please modify the original recipe. Provide the "
        "complete new recipe, including a potentially updated name and description.\n"
        'For example, if the request is "make it vegan", change ingredients like '
        '"butter" to "vegan butter" and "chicken" to "tofu".\n'
        "Ensure the output is a single, valid JSON object that strictly follows the "
        "provided schema."
    )


class GeminiRecipeClient:
    """Client for the Gemini generateContent REST endpoint."""

    DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout = timeout or settings.gemini_timeout or self.DEFAULT_TIMEOUT
        self._client: httpx.AsyncClient | None = None

    @property
    def generate_url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                    "User-Agent": "Recipesnap/1.0",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, parts: list[dict[str, Any]]) -> dict[str, Any]:
        """Send one generateContent call and return the decoded body."""
        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is not set")

        payload = {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RECIPE_RESPONSE_SCHEMA,
            },
        }

        client = await self._get_client()
        try:
            response = await client.post(
                self.generate_url,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.TransportError as e:
            logger.error(f"Gemini request failed: {type(e).__name__}: {e}")
            raise NetworkError(str(e)) from e

        if response.status_code >= 400:
            raise self._error_for_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError("Gemini returned a non-JSON body") from e

    def _error_for_response(self, response: httpx.Response) -> RecipeGenerationError:
        """Map an error response to the matching exception."""
        detail = response.text[:500] if response.text else "No details"
        status_code = response.status_code
        logger.error(f"Gemini API error {status_code}: {detail}")

        if status_code == 429:
            retry_after = response.headers.get("retry-after")
            return RateLimitError(
                f"Gemini rate limit exceeded: {detail}",
                response=detail,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if status_code >= 500:
            return ServiceUnavailableError(
                f"Gemini returned status {status_code}", response=detail
            )
        if status_code in (401, 403) or "API key" in detail or "API_KEY" in detail:
            return ConfigurationError(f"Gemini rejected the API key: {detail}", response=detail)
        if "SAFETY" in detail or "blocked" in detail:
            return SafetyBlockedError(detail, response=detail)
        return RecipeGenerationError(
            f"Gemini request failed with status {status_code}", response=detail
        )

    @staticmethod
    def _parse_recipe(body: dict[str, Any]) -> Recipe:
        """Extract the recipe document from a generateContent response."""
        block_reason = (body.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise SafetyBlockedError(f"Prompt blocked: {block_reason}", response=body)

        candidates = body.get("candidates") or []
        if not candidates:
            raise MalformedResponseError("Gemini returned no candidates", response=body)

        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        if finish_reason in _BLOCK_REASONS:
            raise SafetyBlockedError(f"Candidate blocked: {finish_reason}", response=body)

        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts).strip()
        if not text:
            raise MalformedResponseError("Gemini returned an empty answer", response=body)

        try:
            return Recipe.model_validate(json.loads(text))
        except (ValueError, ValidationError) as e:
            raise MalformedResponseError(f"Invalid recipe document: {e}", response=text) from e

    async def generate_from_image(
        self,
        image_data: str,
        language: str = "English",
        dietary_context: str | None = None,
    ) -> Recipe:
        """
        Generate a recipe from a food photo.

        Args:
            image_data: Base64 data URL, e.g. "data:image/jpeg;base64,...".
            language: Language the recipe should be written in.
            dietary_context: Optional prompt sentence describing dietary needs.

        Returns:
            The generated recipe.

        Raises:
            RecipeGenerationError: One of its subclasses, classified by cause.
        """
        mime_type, payload = parse_data_url(image_data)
        logger.info(f"Generating recipe from {mime_type} image (language={language})")

        body = await self._request(
            [
                {"inlineData": {"mimeType": mime_type, "data": payload}},
                {"text": build_image_prompt(language, dietary_context)},
            ]
        )
        recipe = self._parse_recipe(body)
        logger.info(
            f"Generated recipe '{recipe.recipe_name}' "
            f"with {len(recipe.ingredients)} ingredients"
        )
        return recipe

    async def remix_recipe(self, original: Recipe, request: str) -> Recipe:
        """Ask the model to modify an existing recipe, e.g. "make it vegan"."""
        logger.info(f"Remixing recipe '{original.recipe_name}'")
        body = await self._request([{"text": build_remix_prompt(original, request)}])
        return self._parse_recipe(body)

    async def __aenter__(self) -> "GeminiRecipeClient":
        """Async context manager entry."""
        await self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.close()
