"""
Output models for the Taskforce engine.

Results that can legitimately fail without raising (advisory validation,
performance updates surfaced to callers) carry an explicit status and an
optional ErrorInfo, so callers branch on a closed set of outcomes:

    {"status": "success" | "failed", "<payload>": {...} | null, "error": {...} | null}
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from taskforce.models.advisory import AdvisoryPlan, TaskComplexity
from taskforce.models.task import Priority, Task, TaskRequest
from taskforce.models.worker import SkillExpertise
from taskforce.utils import utcnow


class ResultStatus(str, Enum):
    """Status of a validation or service result."""
    SUCCESS = "success"
    FAILED = "failed"


class ErrorInfo(BaseModel):
    """
    Error information for failed operations.

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable error message
        recoverable: Whether the caller can recover locally
        details: Additional error details
        timestamp: When the error occurred
    """
    code: str
    message: str
    recoverable: bool = True
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_exception(cls, e: Exception, code: str = "UNKNOWN_ERROR") -> "ErrorInfo":
        """Create ErrorInfo from an exception."""
        return cls(
            code=code,
            message=str(e),
            recoverable=True,
            details={"exception_type": type(e).__name__},
        )


class ValidationResult(BaseModel):
    """
    Outcome of consulting and validating the advisory model.

    Exactly one of plan / error is set.
    """
    status: ResultStatus
    plan: Optional[AdvisoryPlan] = None
    error: Optional[ErrorInfo] = None

    @property
    def success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @classmethod
    def create_success(cls, plan: AdvisoryPlan) -> "ValidationResult":
        return cls(status=ResultStatus.SUCCESS, plan=plan)

    @classmethod
    def create_failure(cls, error: ErrorInfo) -> "ValidationResult":
        return cls(status=ResultStatus.FAILED, error=error)


class Selection(BaseModel):
    """Worker chosen by the AssignmentSelector and the tier that chose it."""
    worker_id: str
    worker_name: str = ""
    tier: str
    is_learning: bool = False


class SubtaskPlan(BaseModel):
    """
    A fully materialized subtask, ready to be persisted.

    Attributes:
        title: Subtask title (without the parent title prefix)
        employee_id: Assignee id
        employee_name: Assignee name
        reason: Assignment rationale
        estimated_hours: Hours after clamping and learning adjustment
        days_needed: ceil(estimated_hours / work day)
        due_date: Planning time + days_needed days
        skills: Skills the subtask exercises
        is_learning_task: Assignee lacks the skills
        skill_updates: Skills the advisory model expects the assignee to gain
        complexity: Difficulty score 1-10
        primary_skill: Main skill or role label of the subtask
    """
    title: str
    employee_id: str
    employee_name: str = ""
    reason: str = ""
    estimated_hours: float
    days_needed: int
    due_date: datetime
    skills: List[str] = Field(default_factory=list)
    is_learning_task: bool = False
    skill_updates: List[str] = Field(default_factory=list)
    complexity: int = 5
    primary_skill: Optional[str] = None


class AssignmentResult(BaseModel):
    """Output of AssignmentEngine.assign."""
    subtasks: List[SubtaskPlan]
    inferred_skills: List[str] = Field(default_factory=list)
    task_complexity: Optional[TaskComplexity] = None
    used_fallback: bool = False
    fallback_reason: Optional[str] = None


class PerformanceUpdate(BaseModel):
    """What changed for a worker after one completion."""
    worker_id: str
    task_score: int
    overall_performance: int
    tasks_completed: int
    updated_skills: List[str] = Field(default_factory=list)
    learned_skills: List[str] = Field(default_factory=list)


class Trend(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class ImprovementArea(BaseModel):
    area: str
    score: int
    suggestion: str


class PerformanceAnalytics(BaseModel):
    """Read-only summary derived from a worker's performance state."""
    overall_score: float = 75
    tasks_completed: int = 0
    skill_expertise: Dict[str, SkillExpertise] = Field(default_factory=dict)
    recent_trend: Trend = Trend.STABLE
    strengths: List[str] = Field(default_factory=list)
    improvement_areas: List[ImprovementArea] = Field(default_factory=list)


class ExtractedTaskFields(BaseModel):
    """Structured task fields recovered from a voice transcript."""
    title: str = "New Task"
    description: str = ""
    skills: List[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    total_hours: float = 40

    def to_task_request(self) -> TaskRequest:
        return TaskRequest(
            title=self.title,
            description=self.description,
            required_skills=list(self.skills),
            priority=self.priority,
            total_hours=self.total_hours,
        )


class WorkerPerformanceSummary(BaseModel):
    """Per-worker row of a performance report."""
    employee_id: str
    name: str = ""
    overall_score: float
    active_tasks: int
    completed_tasks: int
    total_tasks: int
    recent_score: Optional[int] = None
    recent_metrics: List[Dict[str, Any]] = Field(default_factory=list)


class ManagerStats(BaseModel):
    """Headline numbers for one manager's pool."""
    total_employees: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    assigned_tasks: int = 0
    in_progress_tasks: int = 0
    avg_performance: float = 0


class TaskCreationResult(BaseModel):
    """Subtasks persisted for one manager request."""
    tasks: List[Task]
    inferred_skills: List[str] = Field(default_factory=list)
    used_fallback: bool = False
    fallback_reason: Optional[str] = None


class CompletionResult(BaseModel):
    """A completed subtask and the performance change it caused."""
    task: Task
    performance: PerformanceUpdate
