from __future__ import annotations

from pathlib import Path
from typing import Dict

from brief2plan.artifacts.plan_markdown import format_markdown
from brief2plan.state import PlanState
from brief2plan.utils.io import write_json, write_text


def write_run_outputs(
    run_dir: Path,
    state: PlanState,
    usage: Dict[str, int] | None = None,
    generated_at: str | None = None,
) -> Path:
    """Persist one finished run and return the path of the Markdown report."""
    write_text(run_dir / "inputs" / "brief.md", state.brief + "\n")
    report_path = run_dir / "artifacts" / "plan.md"
    write_text(report_path, format_markdown(state, generated_at=generated_at))
    write_json(run_dir / "artifacts" / "state.json", state.to_dict())
    if usage:
        write_json(run_dir / "raw" / "usage.json", usage)
    return report_path
