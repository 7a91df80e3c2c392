from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Tuple

from brief2plan.generation import GenerationService
from brief2plan.state import PlanState
from brief2plan.utils.io import read_text

PROMPTS_DIR = Path(__file__).resolve().parents[1] / "prompts"

StateDiff = Dict[str, Any]


class Stage:
    """One pipeline step.

    ``run`` must not touch the state it receives; it returns a diff holding
    only the fields listed in ``writes`` plus a single ``notes`` entry.
    """

    name: str = ""
    prompt_name: str = ""
    reads: Tuple[str, ...] = ()
    writes: Tuple[str, ...] = ()

    def __init__(self, generation: GenerationService) -> None:
        self.generation = generation

    def run(self, state: PlanState, correlation_id: str) -> StateDiff:
        raise NotImplementedError

    def build_prompt(self, state: PlanState) -> str:
        template = read_text(PROMPTS_DIR / f"{self.prompt_name}.md")
        payload = {field: self._serializable(getattr(state, field)) for field in self.reads}
        return f"{template}\n\nINPUT:\n{json.dumps(payload, indent=2)}\n"

    def _serializable(self, value: Any) -> Any:
        return value if value is not None else "not provided"

    def _diff(self, note: str, **values: Any) -> StateDiff:
        diff: StateDiff = dict(values)
        diff["notes"] = [note]
        return diff
