"""Thin wrapper around the Gemini SDK that returns validated JSON."""

from pydantic import BaseModel, ValidationError
from typing import Optional, Type, TypeVar
import json
import logging

import google.generativeai as genai

from insightstream.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class FlowError(Exception):
    """An AI or data flow could not produce a result."""


class EmptyResponseError(FlowError):
    """The model returned no usable text."""


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


class GenerativeClient:
    """Ask a Gemini model for JSON and validate it against a pydantic model."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None, model=None):
        if model is None:
            api_key = api_key or settings.GEMINI_API_KEY
            if not api_key:
                raise FlowError("Gemini API key is not configured.")
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name or settings.GEMINI_MODEL)
        self.model = model

    def generate_json(self, prompt: str, output_model: Type[T]) -> T:
        """
        Run a prompt and parse the reply.

        Raises:
            EmptyResponseError: If the model returned nothing
            FlowError: If the call failed or the reply does not match output_model
        """
        try:
            response = self.model.generate_content(
                prompt,
                generation_config={"response_mime_type": "application/json"}
            )
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise FlowError(f"AI model request failed: {e}") from e

        try:
            text = response.text
        except ValueError:
            # Blocked or candidate-less responses have no text accessor
            text = None

        if not text or not text.strip():
            raise EmptyResponseError("AI model returned an empty response.")

        try:
            data = json.loads(_strip_code_fence(text))
        except json.JSONDecodeError as e:
            logger.error(f"AI model returned invalid JSON: {text[:200]}")
            raise FlowError("AI model returned invalid JSON.") from e

        try:
            return output_model.model_validate(data)
        except ValidationError as e:
            logger.error(f"AI output failed {output_model.__name__} validation: {e}")
            raise FlowError(f"AI model output did not match the expected format: {e.error_count()} error(s).") from e


_default_client: Optional[GenerativeClient] = None


def get_client() -> GenerativeClient:
    """Shared client built from settings on first use."""
    global _default_client
    if _default_client is None:
        _default_client = GenerativeClient()
    return _default_client
