"""
Worker models for the Taskforce engine.

A worker carries a skill list, a derived role label, a live active-task
counter and a PerformanceState that the performance engine rewrites after
every completed subtask.

Invariants:
    active_tasks >= 0
    0 <= on_time_delivery <= 100
    0 <= skill_expertise[*].avg_rate <= 100, count >= 1
    len(task_history) <= HISTORY_LIMIT (most recent first)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
import uuid

HISTORY_LIMIT = 20


class SkillExpertise(BaseModel):
    """
    Running proficiency for one skill.

    Attributes:
        avg_rate: Mean score of every completed task that used the skill
        count: Number of scores folded into avg_rate
        last_updated: When the last score was folded in
    """
    avg_rate: float = Field(ge=0, le=100)
    count: int = Field(default=1, ge=1)
    last_updated: Optional[datetime] = None


class TaskHistoryEntry(BaseModel):
    """One completed task as remembered in the worker's history window."""
    task_id: Optional[str] = None
    task_name: str
    task_performance: int = Field(ge=0, le=100)
    skills: List[str] = Field(default_factory=list)
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    completed_at: datetime


class PerformanceState(BaseModel):
    """
    Aggregated performance of a worker.

    Attributes:
        tasks_completed: Total completed tasks (never decreases)
        on_time_delivery: Mean task score over the history window. Despite
            the name this is an overall quality average, see
            overall_quality_score.
        skill_expertise: Lower-cased skill name -> SkillExpertise
        task_history: Most recent completions first, capped at HISTORY_LIMIT
        last_updated: When the state was last rewritten
    """
    tasks_completed: int = Field(default=0, ge=0)
    on_time_delivery: float = Field(default=100, ge=0, le=100)
    skill_expertise: Dict[str, SkillExpertise] = Field(default_factory=dict)
    task_history: List[TaskHistoryEntry] = Field(default_factory=list, max_length=HISTORY_LIMIT)
    last_updated: Optional[datetime] = None

    @property
    def overall_quality_score(self) -> float:
        return self.on_time_delivery

    def recent_scores(self, limit: int = HISTORY_LIMIT) -> List[int]:
        return [entry.task_performance for entry in self.task_history[:limit]]

    def history_entry(self, task_id: str) -> Optional[TaskHistoryEntry]:
        """The remembered completion of task_id, if it is still in the window."""
        for entry in self.task_history:
            if entry.task_id == task_id:
                return entry
        return None


class Worker(BaseModel):
    """
    An employee that can receive subtasks.

    Attributes:
        id: Unique worker identifier
        name: Display name
        email: Contact address
        manager_id: Manager that owns this worker's pool
        skills: Ordered skill tags as entered (original casing)
        role: Derived role label (e.g. "Backend Developer")
        active_tasks: Assigned-but-not-completed subtasks
        performance: Aggregated performance state
        version: Incremented by the store on every write
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    email: Optional[str] = None
    manager_id: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    role: str = "Software Developer"
    active_tasks: int = Field(default=0, ge=0)
    performance: PerformanceState = Field(default_factory=PerformanceState)
    version: int = 0

    def to_advisory_dict(self) -> Dict[str, Any]:
        """Shape sent to the advisory model for this worker."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "skills": list(self.skills),
            "activeTasks": self.active_tasks,
        }
