from __future__ import annotations

import logging
import sys
from typing import Protocol

import structlog

from brief2plan.state import PlanState


class RunObserver(Protocol):
    def run_started(self, correlation_id: str, brief: str) -> None: ...

    def stage_started(self, stage: str, correlation_id: str) -> None: ...

    def stage_finished(self, stage: str, correlation_id: str, note: str) -> None: ...

    def stage_failed(self, stage: str, correlation_id: str, error: BaseException) -> None: ...

    def run_finished(self, correlation_id: str, state: PlanState) -> None: ...


class LogObserver:
    """Default observer: one structlog event per pipeline transition."""

    def __init__(self, logger=None) -> None:
        self._logger = logger or structlog.get_logger("brief2plan.pipeline")

    def run_started(self, correlation_id: str, brief: str) -> None:
        self._logger.info("run.started", correlation_id=correlation_id, brief_chars=len(brief))

    def stage_started(self, stage: str, correlation_id: str) -> None:
        self._logger.info("stage.started", stage=stage, correlation_id=correlation_id)

    def stage_finished(self, stage: str, correlation_id: str, note: str) -> None:
        self._logger.info("stage.finished", stage=stage, correlation_id=correlation_id, note=note)

    def stage_failed(self, stage: str, correlation_id: str, error: BaseException) -> None:
        self._logger.error(
            "stage.failed",
            stage=stage,
            correlation_id=correlation_id,
            error_type=type(error).__name__,
            error=str(error),
        )

    def run_finished(self, correlation_id: str, state: PlanState) -> None:
        self._logger.info(
            "run.finished",
            correlation_id=correlation_id,
            fields=sorted(state.available_fields()),
            notes=len(state.notes),
        )


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output to stderr so stdout only carries the run summary."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
