from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    json_mode: bool = False
    correlation_id: Optional[str] = None


@dataclass
class LLMResponse:
    raw_text: str
    usage: Dict[str, int] = field(default_factory=dict)


class LLMAdapter(Protocol):
    def complete(self, request: GenerationRequest) -> LLMResponse:
        raise NotImplementedError
