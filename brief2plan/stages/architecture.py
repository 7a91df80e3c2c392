from __future__ import annotations

from brief2plan.state import PlanState

from .base import Stage, StateDiff


class ArchitectureStage(Stage):
    name = "architecture"
    prompt_name = "architecture"
    reads = ("expanded_brief", "user_story_collection")
    writes = ("architecture_design",)

    def run(self, state: PlanState, correlation_id: str) -> StateDiff:
        design = self.generation.generate_text(
            self.build_prompt(state), correlation_id=correlation_id
        )
        return self._diff("Technical architecture ready.", architecture_design=design)
