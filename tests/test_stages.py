"""Tests for the individual pipeline stages."""

import json

import pytest

from brief2plan.errors import ValidationFailure
from brief2plan.stages.architecture import ArchitectureStage
from brief2plan.stages.extend_brief import ExtendBriefStage
from brief2plan.stages.plan_tasks import PlanBackendTasksStage, PlanFrontendTasksStage
from brief2plan.stages.user_stories import UserStoriesStage
from brief2plan.state import PlanState


@pytest.fixture
def filled_state(valid_user_stories):
    return PlanState(
        brief="Build a todo app",
        expanded_brief="- Users manage todos",
        user_story_collection=valid_user_stories,
        architecture_design="- We will use Django",
    )


class TestExtendBriefStage:
    def test_returns_expanded_brief_and_note(self, make_service, scripted_responses):
        service, adapter = make_service(scripted_responses)
        diff = ExtendBriefStage(service).run(PlanState(brief="Build a todo app"), "cid")
        assert diff == {
            "expanded_brief": scripted_responses["extend_brief"],
            "notes": ["Extended brief ready."],
        }
        prompt = adapter.requests[0].prompt
        assert "INPUT:" in prompt
        assert "Build a todo app" in prompt
        assert adapter.requests[0].correlation_id == "cid"


class TestUserStoriesStage:
    def test_uses_structured_generation(self, make_service, scripted_responses, filled_state):
        service, adapter = make_service(scripted_responses)
        diff = UserStoriesStage(service).run(filled_state, "cid")
        assert diff["user_story_collection"]["epics"][0]["name"] == "Onboarding"
        assert diff["notes"] == ["User stories defined: 1 epics, 1 stories."]
        request = adapter.requests[0]
        assert request.json_mode is True
        assert request.temperature == 0.4
        assert request.max_tokens == 4000

    def test_invalid_collection_is_fatal(self, make_service, scripted_responses, valid_user_stories, filled_state):
        valid_user_stories["epics"][0]["userStories"][0]["priority"] = "urgent"
        scripted_responses["user_stories"] = json.dumps(valid_user_stories)
        service, _ = make_service(scripted_responses)
        with pytest.raises(ValidationFailure):
            UserStoriesStage(service).run(filled_state, "cid")


class TestArchitectureStage:
    def test_prompt_carries_stories_and_brief(self, make_service, scripted_responses, filled_state):
        service, adapter = make_service(scripted_responses)
        diff = ArchitectureStage(service).run(filled_state, "cid")
        assert diff["architecture_design"] == "- We will use a modular monolith"
        prompt = adapter.requests[0].prompt
        assert "Users manage todos" in prompt
        assert "Onboarding" in prompt


class TestPlanTasksStages:
    def test_backend_plan_is_parsed_out_of_prose(self, make_service, scripted_responses, filled_state):
        service, _ = make_service(scripted_responses)
        diff = PlanBackendTasksStage(service).run(filled_state, "cid")
        assert diff["backend_plan"]["criticalPath"] == ["Users table", "Register endpoint"]
        assert diff["backend_tasks"] == ["Users table", "Register endpoint"]
        assert diff["notes"] == ["Backend task plan ready: 2 tasks."]
        assert set(diff) == {"backend_plan", "backend_tasks", "notes"}

    def test_frontend_writes_frontend_fields(self, make_service, scripted_responses, filled_state):
        service, _ = make_service(scripted_responses)
        diff = PlanFrontendTasksStage(service).run(filled_state, "cid")
        assert set(diff) == {"frontend_plan", "frontend_tasks", "notes"}

    def test_falls_back_to_flat_list(self, make_service, scripted_responses, filled_state):
        scripted_responses["plan_backend_tasks"] = "- Create schema\n- Build endpoints\n* Write tests"
        service, _ = make_service(scripted_responses)
        diff = PlanBackendTasksStage(service).run(filled_state, "cid")
        assert "backend_plan" not in diff
        assert diff["backend_tasks"] == ["Create schema", "Build endpoints", "Write tests"]
        assert diff["notes"] == ["Backend task plan ready: 3 tasks (flat list fallback)."]

    def test_prompt_includes_architecture(self, make_service, scripted_responses, filled_state):
        service, adapter = make_service(scripted_responses)
        PlanFrontendTasksStage(service).run(filled_state, "cid")
        assert "We will use Django" in adapter.requests[0].prompt

    def test_blank_output_gives_empty_task_list(self, make_service, scripted_responses, filled_state):
        scripted_responses["plan_backend_tasks"] = "  \n\t\n"
        service, _ = make_service(scripted_responses)
        diff = PlanBackendTasksStage(service).run(filled_state, "cid")
        assert diff["backend_tasks"] == []
        assert diff["notes"] == ["Backend task plan ready: 0 tasks (flat list fallback)."]
