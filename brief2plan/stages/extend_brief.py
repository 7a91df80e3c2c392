from __future__ import annotations

from brief2plan.state import PlanState

from .base import Stage, StateDiff


class ExtendBriefStage(Stage):
    name = "extendBrief"
    prompt_name = "extend_brief"
    reads = ("brief",)
    writes = ("expanded_brief",)

    def run(self, state: PlanState, correlation_id: str) -> StateDiff:
        expanded = self.generation.generate_text(
            self.build_prompt(state), correlation_id=correlation_id
        )
        return self._diff("Extended brief ready.", expanded_brief=expanded)
