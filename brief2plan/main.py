from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from brief2plan.artifacts.plan_markdown import format_compact
from brief2plan.artifacts.writers import write_run_outputs
from brief2plan.config import PROVIDERS, Settings
from brief2plan.errors import Brief2PlanError, ConfigurationFailure
from brief2plan.observers import configure_logging
from brief2plan.pipeline_plan import PlanPipeline
from brief2plan.utils.io import read_text
from brief2plan.utils.time import utc_timestamp

FRONTMATTER_KEYS = ("provider", "temperature", "max_output_tokens")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brief2plan",
        description="Turn a project brief into a technical implementation plan.",
    )
    parser.add_argument(
        "--brief",
        "-b",
        nargs="+",
        required=True,
        help="Brief text, or the path of a Markdown file holding it",
    )
    parser.add_argument("--mode", choices=["mock", "live"], default="live")
    parser.add_argument("--provider", choices=list(PROVIDERS), default=None)
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--max-output-tokens", type=int, default=None)
    parser.add_argument("--thread-id", default=None, help="Correlation id for the run logs")
    parser.add_argument("--output-dir", default="output")
    return parser


def parse_frontmatter(content: str) -> Tuple[Dict, str]:
    if not content.startswith("---"):
        return {}, content
    parts = content.split("---", 2)
    if len(parts) < 3:
        return {}, content
    try:
        meta = yaml.safe_load(parts[1].strip()) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationFailure(f"Invalid brief front matter: {exc}") from exc
    if not isinstance(meta, dict):
        raise ConfigurationFailure("Brief front matter must be a mapping.")
    return meta, parts[2].lstrip("\n")


def _is_file(text: str) -> bool:
    if not text:
        return False
    try:
        return Path(text).is_file()
    except OSError:
        # Long inline briefs exceed the filesystem's name limit.
        return False


def load_brief(values: List[str]) -> Tuple[str, Dict]:
    """Resolve the ``--brief`` argument to brief text plus front-matter options."""
    joined = " ".join(values).strip()
    options: Dict = {}
    if len(values) == 1 and _is_file(joined):
        meta, joined = parse_frontmatter(read_text(Path(joined)))
        options = {key: meta[key] for key in FRONTMATTER_KEYS if key in meta}
        joined = joined.strip()
    if not joined:
        raise ConfigurationFailure("Brief cannot be empty.")
    return joined, options


def resolve_settings(args: argparse.Namespace, options: Dict, env_file: Optional[Path] = None) -> Settings:
    try:
        temperature = args.temperature if args.temperature is not None else options.get("temperature")
        max_tokens = args.max_output_tokens if args.max_output_tokens is not None else options.get("max_output_tokens")
        settings = Settings.from_env(env_file).override(
            mode=args.mode,
            provider=args.provider or options.get("provider"),
            temperature=float(temperature) if temperature is not None else None,
            max_output_tokens=int(max_tokens) if max_tokens is not None else None,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationFailure(f"Invalid generation option: {exc}") from exc
    settings.validate()
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(os.getenv("BRIEF2PLAN_LOG_LEVEL", "INFO"))
    try:
        brief, options = load_brief(args.brief)
        settings = resolve_settings(args, options, env_file=Path.cwd() / ".env")
        pipeline = PlanPipeline.from_settings(settings)
        print("Starting technical plan generation...")
        state = pipeline.run(brief, args.thread_id or os.getenv("THREAD_ID"))
    except Brief2PlanError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    run_dir = Path(args.output_dir) / utc_timestamp()
    report_path = write_run_outputs(run_dir, state, usage=pipeline.generation.usage_totals())
    print(format_compact(state))
    print(f"Full plan saved to: {report_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
