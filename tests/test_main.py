"""Tests for the command-line entry point."""

import json

import pytest
import structlog

from brief2plan.errors import ConfigurationFailure
from brief2plan.main import build_parser, load_brief, main, parse_frontmatter, resolve_settings


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in ("OPENAI_API_KEY", "GEMINI_API_KEY", "BRIEF2PLAN_PROVIDER", "ORCH_TEMPERATURE", "ORCH_MAX_OUTPUT_TOKENS", "THREAD_ID"):
        monkeypatch.delenv(key, raising=False)
    yield
    structlog.reset_defaults()


class TestLoadBrief:
    def test_joins_words(self):
        assert load_brief(["Build", "a", "todo", "app"]) == ("Build a todo app", {})

    def test_reads_file_with_front_matter(self, tmp_path):
        path = tmp_path / "brief.md"
        path.write_text("---\ntemperature: 0.5\nprovider: gemini\nunrelated: x\n---\nBuild a todo app\n")
        brief, options = load_brief([str(path)])
        assert brief == "Build a todo app"
        assert options == {"temperature": 0.5, "provider": "gemini"}

    def test_empty_brief_is_configuration_failure(self):
        with pytest.raises(ConfigurationFailure):
            load_brief(["   "])

    def test_empty_file_is_configuration_failure(self, tmp_path):
        path = tmp_path / "brief.md"
        path.write_text("---\ntemperature: 0.5\n---\n")
        with pytest.raises(ConfigurationFailure):
            load_brief([str(path)])


class TestParseFrontmatter:
    def test_without_front_matter(self):
        assert parse_frontmatter("plain text") == ({}, "plain text")

    def test_non_mapping_is_rejected(self):
        with pytest.raises(ConfigurationFailure):
            parse_frontmatter("---\n- a\n- b\n---\nbody")


class TestResolveSettings:
    def test_flags_override_front_matter(self):
        args = build_parser().parse_args(["--brief", "x", "--mode", "mock", "--temperature", "0.1"])
        settings = resolve_settings(args, {"temperature": 0.9, "max_output_tokens": "1200"})
        assert settings.temperature == 0.1
        assert settings.max_output_tokens == 1200

    def test_live_mode_requires_api_key(self):
        args = build_parser().parse_args(["--brief", "x", "--mode", "live", "--provider", "gemini"])
        with pytest.raises(ConfigurationFailure, match="GEMINI_API_KEY"):
            resolve_settings(args, {})

    def test_bad_option_value(self):
        args = build_parser().parse_args(["--brief", "x", "--mode", "mock"])
        with pytest.raises(ConfigurationFailure):
            resolve_settings(args, {"temperature": "warm"})


class TestMain:
    def test_mock_run_writes_outputs(self, tmp_path, capsys):
        out_dir = tmp_path / "out"
        code = main(["--mode", "mock", "--output-dir", str(out_dir), "--brief", "Build a personal expense tracker"])
        assert code == 0

        run_dirs = list(out_dir.iterdir())
        assert len(run_dirs) == 1
        run_dir = run_dirs[0]
        assert (run_dir / "inputs" / "brief.md").read_text().strip() == "Build a personal expense tracker"
        assert (run_dir / "artifacts" / "plan.md").read_text().startswith("# Technical Implementation Plan")
        state = json.loads((run_dir / "artifacts" / "state.json").read_text())
        assert state["backend_tasks"]
        assert len(state["notes"]) == 5
        assert json.loads((run_dir / "raw" / "usage.json").read_text())["prompt_tokens"] > 0

        output = capsys.readouterr().out
        assert "TECHNICAL IMPLEMENTATION PLAN" in output
        assert "Full plan saved to:" in output

    def test_missing_key_exits_with_error(self, tmp_path, capsys):
        code = main(["--mode", "live", "--output-dir", str(tmp_path / "out"), "--brief", "Build it"])
        assert code == 1
        assert "OPENAI_API_KEY" in capsys.readouterr().err
        assert not (tmp_path / "out").exists()
