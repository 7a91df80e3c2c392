from __future__ import annotations

import os

import structlog
from openai import OpenAI, OpenAIError

from brief2plan.errors import ConfigurationFailure, GenerationFailure

from .llm_base import GenerationRequest, LLMAdapter, LLMResponse

logger = structlog.get_logger(__name__)


class OpenAIAdapter(LLMAdapter):
    def __init__(self, model: str = "gpt-4o") -> None:
        self.api_key = os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ConfigurationFailure("OPENAI_API_KEY is not set.")
        self.model = model
        self.client = OpenAI(api_key=self.api_key)

    def complete(self, request: GenerationRequest) -> LLMResponse:
        kwargs = {
            "model": self.model,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.max_tokens is not None:
            kwargs["max_tokens"] = request.max_tokens
        if request.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            raise GenerationFailure(f"OpenAI request failed: {exc}") from exc

        content = response.choices[0].message.content
        if content is None:
            raise GenerationFailure("OpenAI returned empty content.")

        usage = getattr(response, "usage", None)
        usage_payload = {}
        if usage:
            usage_payload = {
                "prompt_tokens": getattr(usage, "prompt_tokens", None) or 0,
                "completion_tokens": getattr(usage, "completion_tokens", None) or 0,
                "total_tokens": getattr(usage, "total_tokens", None) or 0,
            }
            logger.info("openai.usage", model=self.model, correlation_id=request.correlation_id, **usage_payload)
        else:
            logger.info("openai.usage_missing", model=self.model, correlation_id=request.correlation_id)
        return LLMResponse(raw_text=content, usage=usage_payload)
