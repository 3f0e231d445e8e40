"""
Client for the OpenRouter chat-completions API used to generate flashcards.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import requests

from app.core.config import settings
from app.schemas.generation import FlashcardSuggestion
from app.services.prompt_service import (
    FLASHCARD_RESPONSE_SCHEMA,
    generate_flashcards_prompt,
    generate_flashcards_system_instruction,
)
from app.utils.text_utils import strip_markdown_fences

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7
MAX_TOKENS = 4096


class OpenRouterError(Exception):
    """
    Raised when the OpenRouter call fails.

    ``is_retryable`` is set for provider-side failures (HTTP 5xx, timeouts,
    connection errors) that may succeed if tried again later.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, is_retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_retryable = is_retryable


def parse_llm_response(content: str) -> List[Dict[str, str]]:
    """
    Parse the flashcards out of the model's message content.

    The content may be wrapped in a markdown code block.

    Returns:
        List of {'front', 'back'} dicts

    Raises:
        OpenRouterError: If the content is not JSON or has no valid flashcards array
    """
    text = strip_markdown_fences(content)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse LLM JSON response: {e}")
        logger.error(f"Response text: {text[:500]}")
        raise OpenRouterError(f"Failed to parse LLM response: {str(e)}")

    flashcards = parsed.get("flashcards") if isinstance(parsed, dict) else None
    if not isinstance(flashcards, list):
        raise OpenRouterError("Invalid LLM response: missing flashcards array")

    for flashcard in flashcards:
        if not isinstance(flashcard, dict) or not isinstance(flashcard.get("front"), str) \
                or not isinstance(flashcard.get("back"), str):
            raise OpenRouterError("Invalid LLM response: flashcard missing front or back")

    return flashcards


def convert_to_suggestions(flashcards: List[Dict[str, str]]) -> List[FlashcardSuggestion]:
    """Attach 1-based temporary ids ('temp_1', 'temp_2', ...) to parsed flashcards."""
    return [
        FlashcardSuggestion(temp_id=f"temp_{index}", front=flashcard["front"], back=flashcard["back"])
        for index, flashcard in enumerate(flashcards, start=1)
    ]


def build_payload(source_text: str, model_name: str) -> Dict[str, Any]:
    """Request body for a flashcard generation call."""
    return {
        "model": model_name,
        "messages": [
            {"role": "system", "content": generate_flashcards_system_instruction()},
            {"role": "user", "content": generate_flashcards_prompt(source_text)}
        ],
        "temperature": TEMPERATURE,
        "max_tokens": MAX_TOKENS,
        "response_format": {
            "type": "json_schema",
            "json_schema": {
                "name": "flashcard_generation",
                "strict": True,
                "schema": FLASHCARD_RESPONSE_SCHEMA
            }
        }
    }


def generate_flashcards(source_text: str) -> tuple[List[FlashcardSuggestion], str, dict]:
    """
    Call OpenRouter to generate flashcard suggestions from source text.

    Args:
        source_text: The study material (1000-10000 characters)

    Returns:
        Tuple of (suggestions, model name reported by the API, raw API response)

    Raises:
        OpenRouterError: If the API key is missing, the call fails or the response is invalid
    """
    api_key = settings.openrouter_api_key
    if not api_key:
        raise OpenRouterError("OPENROUTER_API_KEY is not configured")

    model_name = settings.openrouter_model
    url = f"{settings.openrouter_base_url.rstrip('/')}/chat/completions"

    try:
        response = requests.post(
            url,
            json=build_payload(source_text, model_name),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "HTTP-Referer": settings.openrouter_app_url,
                "X-Title": settings.openrouter_app_title
            },
            timeout=settings.openrouter_timeout_seconds
        )
    except requests.exceptions.Timeout:
        logger.error("OpenRouter API request timed out")
        raise OpenRouterError("OpenRouter API request timed out", is_retryable=True)
    except requests.exceptions.ConnectionError as e:
        logger.error(f"OpenRouter API connection failed: {str(e)}")
        raise OpenRouterError(f"Failed to connect to OpenRouter API: {str(e)}", is_retryable=True)
    except requests.exceptions.RequestException as e:
        logger.error(f"OpenRouter API request failed: {str(e)}")
        raise OpenRouterError(f"Failed to call OpenRouter API: {str(e)}")

    if not response.ok:
        error_msg = f"OpenRouter API error: {response.status_code} {response.reason}"
        logger.error(f"{error_msg} - {response.text[:500]}")
        raise OpenRouterError(
            error_msg,
            status_code=response.status_code,
            is_retryable=response.status_code >= 500
        )

    try:
        data = response.json()
    except ValueError as e:
        raise OpenRouterError(f"OpenRouter API returned invalid JSON: {str(e)}")

    choices = data.get("choices") or []
    content = None
    if choices and isinstance(choices[0], dict):
        content = (choices[0].get("message") or {}).get("content")
    if not content:
        raise OpenRouterError("OpenRouter API returned empty response")

    suggestions = convert_to_suggestions(parse_llm_response(content))

    usage = data.get("usage") or {}
    logger.info(
        f"OpenRouter generated {len(suggestions)} flashcard(s) with {data.get('model') or model_name} "
        f"({usage.get('prompt_tokens', 0)} prompt / {usage.get('completion_tokens', 0)} completion tokens)"
    )
    return suggestions, data.get("model") or model_name, data
