"""
Pytest configuration and shared fixtures for Taskforce tests.

This file provides:
- A scripted advisory client double
- In-memory store and fixed clock
- Worker and task factories
"""

import json
import pytest
from datetime import datetime, timezone
from typing import List, Optional

from taskforce.clients.store_client import InMemoryStore
from taskforce.config.settings import Settings
from taskforce.errors import AdvisoryUnavailable
from taskforce.models.task import Task
from taskforce.models.worker import PerformanceState, Worker

FIXED_NOW = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


# ============================================================================
# Doubles
# ============================================================================

class FakeAdvisoryClient:
    """
    Advisory client double.

    Replies are consumed in order; an Exception instance in the queue is
    raised instead of returned. Every call is recorded.
    """

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []

    def complete(self, user_content, system_prompt=None, temperature=0.1):
        self.calls.append({
            "user_content": user_content,
            "system_prompt": system_prompt,
            "temperature": temperature,
        })
        if not self.replies:
            raise AdvisoryUnavailable("No scripted reply")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, llm_api_key="test-key")


@pytest.fixture
def clock():
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def fake_advisory():
    return FakeAdvisoryClient()


# ============================================================================
# Test Data Factories
# ============================================================================

def make_worker(
    worker_id: str,
    skills: Optional[List[str]] = None,
    active_tasks: int = 0,
    tasks_completed: int = 0,
    quality: float = 100,
    role: str = "Software Developer",
    manager_id: str = "manager-1",
) -> Worker:
    return Worker(
        id=worker_id,
        name=worker_id.title(),
        manager_id=manager_id,
        skills=skills or [],
        role=role,
        active_tasks=active_tasks,
        performance=PerformanceState(tasks_completed=tasks_completed, on_time_delivery=quality),
    )


def make_task(**overrides) -> Task:
    data = {
        "id": "task-1",
        "title": "Checkout - Implementation",
        "required_skills": ["react"],
        "assigned_to": "alice",
        "estimated_hours": 10,
        "actual_hours": 10,
        "due_date": FIXED_NOW,
        "created_by": "manager-1",
        "created_at": FIXED_NOW,
    }
    data.update(overrides)
    return Task(**data)


def advisory_reply(assignments, difficulty=5, optimal_count=None, inferred=None, wrap=True) -> str:
    """Build an advisory reply, optionally wrapped in prose and a code fence."""
    body = json.dumps({
        "taskComplexity": {
            "difficultyScore": difficulty,
            "reasoning": "two domains",
            "optimalSubtaskCount": optimal_count if optimal_count is not None else len(assignments),
        },
        "inferredSkills": inferred if inferred is not None else ["react", "node"],
        "assignments": assignments,
    })
    if not wrap:
        return body
    return f"Here is the plan:\n```json\n{body}\n```\nLet me know if you need changes."


@pytest.fixture
def team():
    """Three workers with distinct skills and loads."""
    return [
        make_worker("alice", ["React", "CSS"], active_tasks=1, role="Frontend Developer"),
        make_worker("bob", ["Node", "SQL"], active_tasks=0, role="Backend Developer"),
        make_worker("carol", ["Docker", "AWS"], active_tasks=2, role="DevOps Engineer"),
    ]
