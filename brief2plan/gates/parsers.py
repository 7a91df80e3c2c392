from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from brief2plan.gates.validator import SchemaValidator

FLAT_LIST_LIMIT = 60

_BULLET = re.compile(r"^[-*]+(?:\s+|$)")


@dataclass
class RepairResult:
    value: Optional[Dict]
    items: List[str] = field(default_factory=list)
    structured: bool = False
    reason: str = ""


def extract_json_candidate(raw_text: str) -> str:
    start = raw_text.find("{")
    end = raw_text.rfind("}")
    if start >= 0 and end >= start:
        return raw_text[start : end + 1]
    return raw_text


def extract_flat_list(raw_text: str, limit: int = FLAT_LIST_LIMIT) -> List[str]:
    items: List[str] = []
    for line in raw_text.splitlines():
        cleaned = _BULLET.sub("", line.strip()).strip()
        if cleaned:
            items.append(cleaned)
        if len(items) >= limit:
            break
    return items


def flatten_task_names(plan: Dict) -> List[str]:
    return [
        task["name"]
        for epic in plan.get("epics", [])
        for story in epic.get("stories", [])
        for task in story.get("tasks", [])
    ]


def repair_plan(raw_text: str, validator: SchemaValidator) -> RepairResult:
    """Best-effort structured read of ``raw_text``; degrades to a flat list, never raises."""
    candidate = extract_json_candidate(raw_text)
    # ValidationFailure and JSONDecodeError are both ValueError.
    try:
        plan = validator.validate(json.loads(candidate))
    except (ValueError, RecursionError) as exc:
        return RepairResult(value=None, items=extract_flat_list(raw_text), reason=str(exc))
    return RepairResult(value=plan, items=flatten_task_names(plan), structured=True)
