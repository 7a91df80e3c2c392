from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict

from .llm_base import GenerationRequest, LLMAdapter, LLMResponse


@dataclass
class MockAdapter(LLMAdapter):
    scenario: str = "default"

    def complete(self, request: GenerationRequest) -> LLMResponse:
        prompt = request.prompt
        if "TASK: extend_brief" in prompt:
            text = self._expanded_brief()
        elif "TASK: user_stories" in prompt:
            text = json.dumps(self._user_stories())
        elif "TASK: architecture" in prompt:
            text = self._architecture()
        elif "TASK: plan_backend_tasks" in prompt:
            text = self._wrap_plan(self._backend_plan())
        elif "TASK: plan_frontend_tasks" in prompt:
            text = self._wrap_plan(self._frontend_plan())
        else:
            text = "- Mock response"
        return LLMResponse(raw_text=text, usage={"prompt_tokens": len(prompt.split()), "completion_tokens": len(text.split())})

    def _wrap_plan(self, plan: Dict) -> str:
        if self.scenario == "flat":
            return "\n".join(
                f"- {task['name']}"
                for epic in plan["epics"]
                for story in epic["stories"]
                for task in story["tasks"]
            )
        return f"Here is the plan you asked for:\n```json\n{json.dumps(plan, indent=2)}\n```\nLet me know if anything is missing."

    def _expanded_brief(self) -> str:
        return "\n".join(
            [
                "- Problem: people lose track of small daily spending.",
                "- Users: individuals managing a personal budget on web and mobile.",
                "- Key features: record expenses, categorise them, monthly summaries.",
                "- Experience: adding an expense takes under ten seconds.",
                "- Success metric: weekly active users log at least five expenses.",
                "- Scope: MVP without bank synchronisation.",
            ]
        )

    def _user_stories(self) -> Dict:
        return {
            "epics": [
                {
                    "name": "Expense capture",
                    "description": "Recording and editing individual expenses.",
                    "userStories": [
                        {
                            "name": "Add expense",
                            "description": "As a user, I want to add an expense, so that my spending is recorded.",
                            "acceptanceCriteria": ["Amount, category and date are required", "Saved expense appears in the list"],
                            "priority": "critical",
                        },
                        {
                            "name": "Edit expense",
                            "description": "As a user, I want to edit an expense, so that mistakes can be corrected.",
                            "acceptanceCriteria": ["Changes are persisted"],
                            "priority": "high",
                        },
                    ],
                },
                {
                    "name": "Insights",
                    "description": "Summaries of spending over time.",
                    "userStories": [
                        {
                            "name": "Monthly summary",
                            "description": "As a user, I want a monthly summary, so that I can see where my money goes.",
                            "acceptanceCriteria": ["Totals are grouped by category"],
                            "priority": "medium",
                        }
                    ],
                },
            ],
            "projectGoals": ["Make expense logging effortless"],
        }

    def _architecture(self) -> str:
        return "\n".join(
            [
                "- We will build a modular monolith.",
                "- The backend uses FastAPI with PostgreSQL 15.",
                "- The frontend uses React with Vite.",
                "- Authentication is handled by JWT access and refresh tokens.",
                "- We will deploy Docker containers with GitHub Actions CI.",
            ]
        )

    def _backend_plan(self) -> Dict:
        return {
            "epics": [
                {
                    "name": "Expense API",
                    "stories": [
                        {
                            "name": "Persistence",
                            "tasks": [
                                {
                                    "name": "Create expenses table",
                                    "goal": "Store expenses with category and date",
                                    "deliverable": "Initial migration",
                                    "deps": [],
                                    "estimate": "S",
                                },
                                {
                                    "name": "Expense CRUD endpoints",
                                    "goal": "Expose create, read, update and delete",
                                    "deliverable": "expenses router with tests",
                                    "deps": ["Create expenses table"],
                                    "estimate": "M",
                                },
                            ],
                        }
                    ],
                },
                {
                    "name": "Reporting",
                    "stories": [
                        {
                            "name": "Summaries",
                            "tasks": [
                                {
                                    "name": "Monthly summary query",
                                    "goal": "Aggregate totals per category",
                                    "deliverable": "summary endpoint",
                                    "deps": ["Expense CRUD endpoints"],
                                    "estimate": "M",
                                }
                            ],
                        }
                    ],
                },
            ],
            "criticalPath": ["Create expenses table", "Expense CRUD endpoints", "Monthly summary query"],
            "risks": ["Currency handling"],
        }

    def _frontend_plan(self) -> Dict:
        return {
            "epics": [
                {
                    "name": "Expense UI",
                    "stories": [
                        {
                            "name": "Capture",
                            "tasks": [
                                {
                                    "name": "Expense form",
                                    "goal": "Let users add an expense quickly",
                                    "deliverable": "ExpenseForm component",
                                    "estimate": "S",
                                },
                                {
                                    "name": "Expense list",
                                    "goal": "Show recorded expenses",
                                    "deliverable": "ExpenseList component",
                                    "deps": ["Expense form"],
                                    "estimate": "S",
                                },
                            ],
                        },
                        {
                            "name": "Insights",
                            "tasks": [
                                {
                                    "name": "Summary chart",
                                    "goal": "Visualise monthly totals",
                                    "deliverable": "SummaryChart component",
                                    "deps": [],
                                    "estimate": "M",
                                }
                            ],
                        },
                    ],
                }
            ],
        }
