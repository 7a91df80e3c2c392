from __future__ import annotations

import json
from typing import Dict, List, Optional

from brief2plan.adapters.llm_base import GenerationRequest, LLMAdapter, LLMResponse
from brief2plan.config import Settings
from brief2plan.errors import ConfigurationFailure, ValidationFailure
from brief2plan.gates.validator import SchemaValidator


def build_adapter(settings: Settings) -> LLMAdapter:
    if settings.mode == "mock":
        from brief2plan.adapters.mock_adapter import MockAdapter

        return MockAdapter()
    if settings.provider == "gemini":
        from brief2plan.adapters.gemini_adapter import GeminiAdapter

        return GeminiAdapter(model=settings.gemini_model)
    if settings.provider == "openai":
        from brief2plan.adapters.openai_adapter import OpenAIAdapter

        return OpenAIAdapter(model=settings.openai_model)
    raise ConfigurationFailure(f"Unknown provider: {settings.provider}")


class GenerationService:
    """Text and schema-validated generation on top of a single backend adapter.

    Neither operation retries. Backend failures surface as ``GenerationFailure``
    raised by the adapter; structured output that does not parse or does not
    satisfy the schema raises ``ValidationFailure``.
    """

    def __init__(self, adapter: LLMAdapter, settings: Settings | None = None) -> None:
        self.adapter = adapter
        self.settings = settings or Settings()
        self.responses: List[LLMResponse] = []

    def generate_text(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        correlation_id: Optional[str] = None,
    ) -> str:
        request = GenerationRequest(
            prompt=prompt,
            temperature=self._temperature(temperature),
            max_tokens=self.settings.max_output_tokens,
            correlation_id=correlation_id,
        )
        return self._complete(request).raw_text

    def generate_structured(
        self,
        prompt: str,
        schema: SchemaValidator,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        correlation_id: Optional[str] = None,
    ) -> Dict:
        request = GenerationRequest(
            prompt=self._structured_prompt(prompt, schema),
            temperature=self._temperature(temperature),
            max_tokens=max_tokens if max_tokens is not None else self.settings.max_output_tokens,
            json_mode=True,
            correlation_id=correlation_id,
        )
        raw_text = self._complete(request).raw_text
        try:
            parsed = json.loads(raw_text)
        except (ValueError, RecursionError) as exc:
            reason = exc.msg if isinstance(exc, json.JSONDecodeError) else str(exc)
            raise ValidationFailure(
                f"{schema.name}: response is not valid JSON ({reason})",
                constraint="json",
            ) from exc
        return schema.validate(parsed)

    def usage_totals(self) -> Dict[str, int]:
        totals: Dict[str, int] = {}
        for response in list(self.responses):
            for key, value in response.usage.items():
                if isinstance(value, int):
                    totals[key] = totals.get(key, 0) + value
        return totals

    def _complete(self, request: GenerationRequest) -> LLMResponse:
        response = self.adapter.complete(request)
        self.responses.append(response)
        return response

    def _temperature(self, value: Optional[float]) -> float:
        return self.settings.temperature if value is None else value

    def _structured_prompt(self, prompt: str, schema: SchemaValidator) -> str:
        return (
            f"{prompt}\n\nRespond with a single JSON object that satisfies this JSON Schema. "
            "Do not wrap it in Markdown.\n\nSCHEMA:\n"
            f"{json.dumps(schema.schema)}\n"
        )
