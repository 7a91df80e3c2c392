from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

NOTES = "notes"


@dataclass
class PlanState:
    """Aggregate threaded through a plan run.

    Only the pipeline mutates it, through :meth:`merge`. ``notes`` is an
    append-only log; every other field is overwritten key-wise.
    """

    brief: str
    expanded_brief: Optional[str] = None
    user_story_collection: Optional[Dict] = None
    architecture_design: Optional[str] = None
    backend_plan: Optional[Dict] = None
    frontend_plan: Optional[Dict] = None
    backend_tasks: Optional[List[str]] = None
    frontend_tasks: Optional[List[str]] = None
    notes: List[str] = field(default_factory=list)

    @classmethod
    def field_names(cls) -> frozenset:
        return frozenset(item.name for item in fields(cls))

    def merge(self, diff: Mapping[str, Any]) -> None:
        known = self.field_names()
        unknown = sorted(set(diff) - known)
        if unknown:
            raise ValueError(f"Unknown state fields in diff: {', '.join(unknown)}")
        for key, value in diff.items():
            if key == NOTES:
                self.notes.extend(value)
            else:
                setattr(self, key, value)

    def snapshot(self) -> "PlanState":
        return copy.deepcopy(self)

    def available_fields(self) -> set:
        return {item.name for item in fields(self) if item.name != NOTES and getattr(self, item.name) is not None}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
