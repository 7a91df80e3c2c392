from __future__ import annotations

import os

import httpx
import structlog
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from brief2plan.errors import ConfigurationFailure, GenerationFailure

from .llm_base import GenerationRequest, LLMAdapter, LLMResponse

logger = structlog.get_logger(__name__)


class GeminiAdapter(LLMAdapter):
    def __init__(self, model: str = "gemini-flash-latest") -> None:
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise ConfigurationFailure("GEMINI_API_KEY is not set.")

        self.client = genai.Client(api_key=api_key)
        self.model = model

    def complete(self, request: GenerationRequest) -> LLMResponse:
        config = types.GenerateContentConfig(
            temperature=request.temperature,
            max_output_tokens=request.max_tokens,
            response_mime_type="application/json" if request.json_mode else None,
        )
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=request.prompt,
                config=config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise GenerationFailure(f"Gemini request failed: {exc}") from exc

        text = getattr(response, "text", None)
        if not text:
            raise GenerationFailure("Gemini returned empty content.")

        usage_payload = {}
        metadata = getattr(response, "usage_metadata", None)
        if metadata:
            usage_payload = {
                "prompt_tokens": getattr(metadata, "prompt_token_count", None) or 0,
                "completion_tokens": getattr(metadata, "candidates_token_count", None) or 0,
                "total_tokens": getattr(metadata, "total_token_count", None) or 0,
            }
            logger.info("gemini.usage", model=self.model, correlation_id=request.correlation_id, **usage_payload)
        return LLMResponse(raw_text=text, usage=usage_payload)
