"""
Taskforce - Task Assignment & Performance Scoring Engine

Splits manager-authored tasks into subtasks assigned across a worker pool,
using an advisory language model when available and a deterministic local
fallback when it is not, and keeps each worker's performance and skill
proficiency up to date from completed work:

- Complexity-driven decomposition into phase subtasks
- Skill/role/load-aware worker selection
- Bounded per-task scoring (50-100)
- Running per-skill expertise and trend analytics

Architecture:
    - assignment/: Advisory prompts, reply parsing, decomposition, selection, engine
    - performance/: Scoring, expertise tracking, analytics
    - services/: Task lifecycle, performance, workers, roles, voice extraction
    - clients/: Advisory model client and document stores (memory, Redis)
    - models/: Shared data models (Pydantic)
    - config/: Configuration and logging

Usage:
    from taskforce.assignment import AssignmentEngine
    from taskforce.clients import InMemoryStore, create_advisory_client
    from taskforce.services import TaskService

    store = InMemoryStore()
    engine = AssignmentEngine(advisory_client=create_advisory_client())
    tasks = TaskService(store, engine)
"""

__version__ = "0.1.0"

from taskforce.models.task import (
    Priority,
    Task,
    TaskRequest,
    TaskStatus,
)
from taskforce.models.worker import (
    PerformanceState,
    Worker,
)
from taskforce.models.outputs import (
    AssignmentResult,
    PerformanceAnalytics,
    PerformanceUpdate,
)

__all__ = [
    # Tasks
    "Priority",
    "Task",
    "TaskRequest",
    "TaskStatus",
    # Workers
    "PerformanceState",
    "Worker",
    # Outputs
    "AssignmentResult",
    "PerformanceAnalytics",
    "PerformanceUpdate",
]
