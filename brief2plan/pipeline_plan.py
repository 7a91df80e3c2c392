from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from brief2plan.config import Settings
from brief2plan.errors import ConfigurationFailure
from brief2plan.generation import GenerationService, build_adapter
from brief2plan.observers import LogObserver, RunObserver
from brief2plan.stages.architecture import ArchitectureStage
from brief2plan.stages.base import Stage, StateDiff
from brief2plan.stages.extend_brief import ExtendBriefStage
from brief2plan.stages.plan_tasks import PlanBackendTasksStage, PlanFrontendTasksStage
from brief2plan.stages.user_stories import UserStoriesStage
from brief2plan.state import NOTES, PlanState

INITIAL_FIELDS = frozenset({"brief"})


def default_stages(generation: GenerationService) -> List[Stage]:
    return [
        ExtendBriefStage(generation),
        UserStoriesStage(generation),
        ArchitectureStage(generation),
        PlanBackendTasksStage(generation),
        PlanFrontendTasksStage(generation),
    ]


def plan_waves(stages: Sequence[Stage]) -> List[List[Stage]]:
    """Group stages into waves whose inputs are all produced by earlier waves.

    Declared order is kept inside each wave, which fixes the merge order.
    """
    known = PlanState.field_names()
    for stage in stages:
        undeclared = sorted((set(stage.reads) | set(stage.writes)) - known)
        if undeclared:
            raise ConfigurationFailure(
                f"Stage {stage.name} declares unknown state fields: {', '.join(undeclared)}"
            )

    available = set(INITIAL_FIELDS)
    remaining = list(stages)
    waves: List[List[Stage]] = []
    while remaining:
        ready = [stage for stage in remaining if set(stage.reads) <= available]
        if not ready:
            blocked = ", ".join(
                f"{stage.name} (needs {', '.join(sorted(set(stage.reads) - available))})"
                for stage in remaining
            )
            raise ConfigurationFailure(f"Stage inputs can never be satisfied: {blocked}")
        waves.append(ready)
        for stage in ready:
            available.update(stage.writes)
        remaining = [stage for stage in remaining if stage not in ready]
    return waves


class PlanPipeline:
    def __init__(
        self,
        generation: GenerationService,
        stages: Optional[Iterable[Stage]] = None,
        observer: Optional[RunObserver] = None,
        max_workers: int = 4,
    ) -> None:
        self.generation = generation
        self.stages = list(stages) if stages is not None else default_stages(generation)
        self.observer = observer or LogObserver()
        self.max_workers = max_workers

    @classmethod
    def from_settings(cls, settings: Settings, observer: Optional[RunObserver] = None) -> "PlanPipeline":
        settings.validate()
        return cls(GenerationService(build_adapter(settings), settings), observer=observer)

    def waves(self) -> List[List[Stage]]:
        return plan_waves(self.stages)

    def run(self, brief: str, correlation_id: Optional[str] = None) -> PlanState:
        if not brief or not brief.strip():
            raise ConfigurationFailure("Brief cannot be empty.")
        waves = self.waves()
        correlation_id = correlation_id or str(uuid.uuid4())

        state = PlanState(brief=brief.strip())
        self.observer.run_started(correlation_id, state.brief)
        for wave in waves:
            diffs = self._run_wave(wave, state, correlation_id)
            for diff in diffs:
                state.merge(diff)
        self.observer.run_finished(correlation_id, state)
        return state

    def _run_wave(self, wave: List[Stage], state: PlanState, correlation_id: str) -> List[StateDiff]:
        if len(wave) == 1:
            return [self._run_stage(wave[0], state.snapshot(), correlation_id)]
        workers = max(1, min(len(wave), self.max_workers))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="brief2plan") as executor:
            futures = [
                executor.submit(self._run_stage, stage, state.snapshot(), correlation_id)
                for stage in wave
            ]
            return [future.result() for future in futures]

    def _run_stage(self, stage: Stage, snapshot: PlanState, correlation_id: str) -> StateDiff:
        self.observer.stage_started(stage.name, correlation_id)
        try:
            diff = stage.run(snapshot, correlation_id)
            undeclared = sorted(set(diff) - set(stage.writes) - {NOTES})
            if undeclared:
                raise ConfigurationFailure(
                    f"Stage {stage.name} wrote undeclared fields: {', '.join(undeclared)}"
                )
            if not isinstance(diff.get(NOTES) or [], list):
                raise ConfigurationFailure(f"Stage {stage.name} returned notes that are not a list")
        except Exception as exc:
            self.observer.stage_failed(stage.name, correlation_id, exc)
            raise
        notes = list(diff.get(NOTES) or [])[:1] or [f"{stage.name} completed."]
        self.observer.stage_finished(stage.name, correlation_id, notes[0])
        return {**diff, NOTES: notes}
