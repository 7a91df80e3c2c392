from __future__ import annotations

from brief2plan.gates.validator import user_stories_validator
from brief2plan.state import PlanState

from .base import Stage, StateDiff


class UserStoriesStage(Stage):
    name = "userStories"
    prompt_name = "user_stories"
    reads = ("expanded_brief",)
    writes = ("user_story_collection",)

    temperature = 0.4
    max_tokens = 4000

    def run(self, state: PlanState, correlation_id: str) -> StateDiff:
        collection = self.generation.generate_structured(
            self.build_prompt(state),
            user_stories_validator(),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            correlation_id=correlation_id,
        )
        epics = collection["epics"]
        story_count = sum(len(epic["userStories"]) for epic in epics)
        return self._diff(
            f"User stories defined: {len(epics)} epics, {story_count} stories.",
            user_story_collection=collection,
        )
