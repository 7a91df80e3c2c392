from __future__ import annotations


class Brief2PlanError(Exception):
    """Base class for every failure surfaced by a plan run."""


class GenerationFailure(Brief2PlanError, RuntimeError):
    """The generation backend could not complete a request."""


class ValidationFailure(Brief2PlanError, ValueError):
    def __init__(self, message: str, field: str = "", constraint: str = "") -> None:
        super().__init__(message)
        self.field = field
        self.constraint = constraint


class ConfigurationFailure(Brief2PlanError, RuntimeError):
    """Required configuration is missing or inconsistent."""
