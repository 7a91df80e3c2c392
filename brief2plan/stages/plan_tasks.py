from __future__ import annotations

from brief2plan.gates.parsers import repair_plan
from brief2plan.gates.validator import plan_validator
from brief2plan.state import PlanState

from .base import Stage, StateDiff


class PlanTasksStage(Stage):
    """Plans one side of the implementation through text generation plus repair.

    The ``*_plan`` field is only written when the response held a valid plan;
    the ``*_tasks`` list is always written.
    """

    label = ""
    plan_field = ""
    tasks_field = ""
    reads = ("expanded_brief", "user_story_collection", "architecture_design")

    def run(self, state: PlanState, correlation_id: str) -> StateDiff:
        raw = self.generation.generate_text(self.build_prompt(state), correlation_id=correlation_id)
        result = repair_plan(raw, plan_validator())
        if result.structured:
            note = f"{self.label} task plan ready: {len(result.items)} tasks."
            return self._diff(note, **{self.plan_field: result.value, self.tasks_field: result.items})
        note = f"{self.label} task plan ready: {len(result.items)} tasks (flat list fallback)."
        return self._diff(note, **{self.tasks_field: result.items})


class PlanBackendTasksStage(PlanTasksStage):
    name = "planBackendTasks"
    prompt_name = "plan_backend_tasks"
    label = "Backend"
    plan_field = "backend_plan"
    tasks_field = "backend_tasks"
    writes = ("backend_plan", "backend_tasks")


class PlanFrontendTasksStage(PlanTasksStage):
    name = "planFrontendTasks"
    prompt_name = "plan_frontend_tasks"
    label = "Frontend"
    plan_field = "frontend_plan"
    tasks_field = "frontend_tasks"
    writes = ("frontend_plan", "frontend_tasks")
