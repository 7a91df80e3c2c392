import copy
import json
from typing import Dict, List

import pytest

from brief2plan.adapters.llm_base import GenerationRequest, LLMResponse
from brief2plan.config import Settings
from brief2plan.generation import GenerationService

PLAN = {
    "epics": [
        {
            "name": "Accounts",
            "stories": [
                {
                    "name": "Sign up",
                    "tasks": [
                        {
                            "name": "Users table",
                            "goal": "Persist accounts",
                            "deliverable": "users migration",
                            "deps": [],
                            "estimate": "S",
                        },
                        {
                            "name": "Register endpoint",
                            "goal": "Create accounts",
                            "deliverable": "POST /users",
                            "deps": ["Users table"],
                            "estimate": "M",
                        },
                    ],
                }
            ],
        }
    ],
    "criticalPath": ["Users table", "Register endpoint"],
    "risks": ["Password storage"],
}

USER_STORIES = {
    "epics": [
        {
            "name": "Onboarding",
            "description": "Getting started",
            "userStories": [
                {
                    "name": "Register",
                    "description": "As a visitor, I want to register, so that I can save my data.",
                    "acceptanceCriteria": ["Email is verified"],
                    "priority": "high",
                }
            ],
        }
    ],
    "projectGoals": [],
}


class ScriptedAdapter:
    """Answers each prompt by its TASK marker and records every request."""

    def __init__(self, responses: Dict[str, str]) -> None:
        self.responses = responses
        self.requests: List[GenerationRequest] = []

    def complete(self, request: GenerationRequest) -> LLMResponse:
        self.requests.append(request)
        for marker, text in self.responses.items():
            if f"TASK: {marker}" in request.prompt:
                return LLMResponse(raw_text=text, usage={"total_tokens": 10})
        raise AssertionError(f"Unexpected prompt: {request.prompt[:80]}")


@pytest.fixture
def valid_plan():
    return copy.deepcopy(PLAN)


@pytest.fixture
def valid_user_stories():
    return copy.deepcopy(USER_STORIES)


@pytest.fixture
def scripted_responses():
    return {
        "extend_brief": "- Expanded point one\n- Expanded point two",
        "user_stories": json.dumps(USER_STORIES),
        "architecture": "- We will use a modular monolith",
        "plan_backend_tasks": "Plan:\n" + json.dumps(PLAN) + "\nDone.",
        "plan_frontend_tasks": json.dumps(PLAN),
    }


@pytest.fixture
def make_service():
    def _make(responses):
        adapter = ScriptedAdapter(responses)
        return GenerationService(adapter, Settings(mode="mock")), adapter

    return _make
