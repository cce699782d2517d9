"""
Task models for the Taskforce engine.

States:
    ASSIGNED → IN_PROGRESS → COMPLETED
        └──────────────────────↑
COMPLETED is terminal: the engine never mutates a completed task.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator
import uuid

from taskforce.utils import utcnow


class Priority(str, Enum):
    """Manager-assigned urgency of a task."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Sort key for employee task lists: high first.
PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class TaskStatus(str, Enum):
    """Lifecycle status of a subtask."""
    ASSIGNED = "assigned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskRequest(BaseModel):
    """
    A manager-authored task before decomposition.

    Attributes:
        title: Short task title
        description: Full description sent to the advisory model
        required_skills: Skill tags named by the manager
        priority: Task priority
        total_hours: Total estimated effort across all subtasks
    """
    title: str
    description: str = ""
    required_skills: List[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    total_hours: float = Field(default=40, gt=0)

    @field_validator("required_skills", mode="before")
    @classmethod
    def _split_skills(cls, value: Any) -> Any:
        # Managers usually type "react, node, sql".
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        return value

    def to_advisory_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "totalHours": self.total_hours,
        }


class Task(BaseModel):
    """
    A persisted subtask bound to exactly one assignee.

    Attributes:
        id: Store-assigned identifier
        title: "<parent title> - <subtask title>"
        description: Parent task description
        required_skills: Skills exercised by this subtask
        priority: Parent task priority
        status: Lifecycle status
        assigned_to: Assignee worker id
        assigned_employee_name: Assignee display name at assignment time
        ai_reason: Free-text assignment rationale
        estimated_hours: Hours after clamping and learning adjustment
        actual_hours: Hours reported on completion
        days_needed: ceil(estimated_hours / work day)
        due_date: Creation time + days_needed days
        is_learning_task: Assignee lacked the required skills
        complexity: Difficulty score 1-10
        created_by: Manager id
        completed_at: Completion timestamp
        completed_on_time: Whether completion met the due date
        task_performance_rate: Score given on completion (50-100)
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    description: str = ""
    required_skills: List[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.ASSIGNED
    assigned_to: str
    assigned_employee_name: Optional[str] = None
    ai_reason: Optional[str] = None
    estimated_hours: float = 8
    actual_hours: Optional[float] = None
    days_needed: int = 1
    due_date: Optional[datetime] = None
    is_learning_task: bool = False
    complexity: int = Field(default=5, ge=1, le=10)
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    completed_on_time: Optional[bool] = None
    task_performance_rate: Optional[int] = Field(default=None, ge=50, le=100)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


class PerformanceMetric(BaseModel):
    """One scored completion, kept as an append-only log per worker."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    task_id: str
    employee_id: str
    score: int = Field(ge=50, le=100)
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utcnow)
