from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

from brief2plan.errors import ConfigurationFailure

PROVIDERS = ("openai", "gemini")

API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


@dataclass(frozen=True)
class Settings:
    mode: str = "live"
    provider: str = "openai"
    openai_model: str = "gpt-4o"
    gemini_model: str = "gemini-flash-latest"
    temperature: float = 0.2
    max_output_tokens: int | None = None

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        if env_file is not None:
            load_dotenv(env_file)
        max_tokens = os.getenv("ORCH_MAX_OUTPUT_TOKENS", "")
        return cls(
            provider=os.getenv("BRIEF2PLAN_PROVIDER", "openai").strip().lower(),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-flash-latest"),
            temperature=float(os.getenv("ORCH_TEMPERATURE", "0.2")),
            max_output_tokens=int(max_tokens) if max_tokens else None,
        )

    def override(self, **changes: Any) -> "Settings":
        """Return a copy with every non-None value in ``changes`` applied."""
        applied: Dict[str, Any] = {key: value for key, value in changes.items() if value is not None}
        if "provider" in applied:
            applied["provider"] = str(applied["provider"]).strip().lower()
        return replace(self, **applied)

    def validate(self) -> None:
        if self.mode not in ("mock", "live"):
            raise ConfigurationFailure(f"Unknown mode: {self.mode}")
        if self.provider not in PROVIDERS:
            raise ConfigurationFailure(
                f"Unknown provider: {self.provider}. Expected one of: {', '.join(PROVIDERS)}"
            )
        if self.mode == "live" and not os.getenv(API_KEY_ENV[self.provider]):
            raise ConfigurationFailure(
                f"Missing required API key: {API_KEY_ENV[self.provider]}. "
                "Create a .env file or export the key."
            )
