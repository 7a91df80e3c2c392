from __future__ import annotations

from typing import Dict, List, Optional

from brief2plan.state import PlanState
from brief2plan.utils.time import utc_display

PRIORITY_ORDER = ["critical", "high", "medium", "low"]


def _cell(value: object) -> str:
    return str(value).replace("|", "\\|").replace("\n", "<br>")


def _story_count(collection: Optional[Dict]) -> int:
    if not collection:
        return 0
    return sum(len(epic.get("userStories", [])) for epic in collection.get("epics", []))


def _epic_count(plan: Optional[Dict]) -> int:
    return len(plan.get("epics", [])) if plan else 0


def format_user_stories(collection: Dict) -> List[str]:
    lines: List[str] = ["## User Stories", ""]
    goals = collection.get("projectGoals") or []
    if goals:
        lines.extend(["### Project Goals", *[f"- {goal}" for goal in goals], ""])
    for index, epic in enumerate(collection.get("epics", []), start=1):
        lines.extend(
            [
                f"### {index}. {epic['name']}",
                f"> {epic['description']}",
                "",
                "| Story | Priority | Acceptance Criteria |",
                "|-------|----------|---------------------|",
            ]
        )
        stories = sorted(
            epic.get("userStories", []),
            key=lambda story: PRIORITY_ORDER.index(story["priority"])
            if story["priority"] in PRIORITY_ORDER
            else len(PRIORITY_ORDER),
        )
        for story in stories:
            criteria = "<br>".join(f"- {_cell(item)}" for item in story.get("acceptanceCriteria", []))
            lines.append(f"| {_cell(story['description'])} | **{story['priority']}** | {criteria} |")
        lines.append("")
    return lines


def format_plan(plan: Dict, title: str) -> List[str]:
    lines: List[str] = [f"## {title}", ""]
    for epic_index, epic in enumerate(plan.get("epics", []), start=1):
        lines.extend([f"### {epic_index}. {epic['name']}", ""])
        for story_index, story in enumerate(epic.get("stories", []), start=1):
            lines.extend(
                [
                    f"#### {epic_index}.{story_index} {story['name']}",
                    "",
                    "| Task | Goal | Deliverable | Est | Dependencies |",
                    "|------|------|-------------|-----|--------------|",
                ]
            )
            for task in story.get("tasks", []):
                deps = ", ".join(task.get("deps") or []) or "-"
                lines.append(
                    f"| {_cell(task['name'])} | {_cell(task['goal'])} | {_cell(task['deliverable'])} "
                    f"| **{task['estimate']}** | {_cell(deps)} |"
                )
            lines.append("")

    critical_path = plan.get("criticalPath") or []
    risks = plan.get("risks") or []
    if critical_path or risks:
        lines.extend(
            [
                "### Critical Path & Risks",
                "",
                "| Critical Path | Technical Risks |",
                "|---------------|-----------------|",
            ]
        )
        for row in range(max(len(critical_path), len(risks))):
            step = critical_path[row] if row < len(critical_path) else ""
            risk = risks[row] if row < len(risks) else ""
            lines.append(f"| {_cell(step)} | {_cell(risk)} |")
        lines.append("")
    return lines


def format_task_list(tasks: List[str], title: str) -> List[str]:
    """Rendering for a plan that only survived as a flat task list."""
    return [f"## {title}", "", *[f"- {task}" for task in tasks], ""]


def format_markdown(state: PlanState, generated_at: Optional[str] = None) -> str:
    total_tasks = len(state.backend_tasks or []) + len(state.frontend_tasks or [])
    total_epics = _epic_count(state.backend_plan) + _epic_count(state.frontend_plan)
    lines: List[str] = [
        "# Technical Implementation Plan",
        "",
        f"> **Generated:** {generated_at or utc_display()}",
        f"> **User Stories:** {_story_count(state.user_story_collection)} | "
        f"**Epics:** {total_epics} | **Tasks:** {total_tasks}",
        "",
        "---",
        "",
        "## Brief",
        "",
        f"> {state.brief}",
        "",
    ]
    if state.expanded_brief:
        lines.extend(
            [
                "<details>",
                "<summary><strong>Extended Brief</strong></summary>",
                "",
                state.expanded_brief,
                "",
                "</details>",
                "",
            ]
        )
    if state.user_story_collection:
        lines.extend(format_user_stories(state.user_story_collection))
    if state.architecture_design:
        lines.extend(["## System Architecture", "", state.architecture_design, ""])
    for plan, tasks, title in (
        (state.backend_plan, state.backend_tasks, "Backend Implementation"),
        (state.frontend_plan, state.frontend_tasks, "Frontend Implementation"),
    ):
        if plan:
            lines.extend(format_plan(plan, title))
        elif tasks:
            lines.extend(format_task_list(tasks, title))
    return "\n".join(lines).strip() + "\n"


def format_compact(state: PlanState) -> str:
    collection = state.user_story_collection or {}
    backend_epics = _epic_count(state.backend_plan)
    frontend_epics = _epic_count(state.frontend_plan)
    backend_tasks = len(state.backend_tasks or [])
    frontend_tasks = len(state.frontend_tasks or [])
    rule = "-" * 65
    lines = [
        "TECHNICAL IMPLEMENTATION PLAN",
        "=" * 65,
        "",
        "BRIEF",
        rule,
        state.brief,
        "",
        "SUMMARY",
        rule,
        f"User Story Epics:      {len(collection.get('epics', []))}",
        f"User Stories:          {_story_count(collection)}",
        f"Implementation Epics:  {backend_epics + frontend_epics} "
        f"(Backend: {backend_epics}, Frontend: {frontend_epics})",
        f"Backend Tasks:         {backend_tasks}",
        f"Frontend Tasks:        {frontend_tasks}",
        f"Total Tasks:           {backend_tasks + frontend_tasks}",
    ]
    return "\n".join(lines) + "\n"
