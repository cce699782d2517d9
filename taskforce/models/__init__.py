"""
Models package for the Taskforce engine.

Contains Pydantic models for:
- worker: Workers and their performance state
- task: Task requests, persisted subtasks and performance metrics
- advisory: Schema of the advisory model's assignment reply
- outputs: Engine and service results
"""

from taskforce.models.worker import (
    HISTORY_LIMIT,
    PerformanceState,
    SkillExpertise,
    TaskHistoryEntry,
    Worker,
)
from taskforce.models.task import (
    PRIORITY_ORDER,
    PerformanceMetric,
    Priority,
    Task,
    TaskRequest,
    TaskStatus,
)
from taskforce.models.advisory import (
    AdvisoryAssignment,
    AdvisoryPlan,
    AssignedEmployee,
    TaskComplexity,
)
from taskforce.models.outputs import (
    AssignmentResult,
    CompletionResult,
    ErrorInfo,
    ExtractedTaskFields,
    ImprovementArea,
    ManagerStats,
    PerformanceAnalytics,
    PerformanceUpdate,
    ResultStatus,
    Selection,
    SubtaskPlan,
    TaskCreationResult,
    Trend,
    ValidationResult,
    WorkerPerformanceSummary,
)

__all__ = [
    # Workers
    "HISTORY_LIMIT",
    "PerformanceState",
    "SkillExpertise",
    "TaskHistoryEntry",
    "Worker",
    # Tasks
    "PRIORITY_ORDER",
    "PerformanceMetric",
    "Priority",
    "Task",
    "TaskRequest",
    "TaskStatus",
    # Advisory
    "AdvisoryAssignment",
    "AdvisoryPlan",
    "AssignedEmployee",
    "TaskComplexity",
    # Outputs
    "AssignmentResult",
    "CompletionResult",
    "ErrorInfo",
    "ExtractedTaskFields",
    "ImprovementArea",
    "ManagerStats",
    "PerformanceAnalytics",
    "PerformanceUpdate",
    "ResultStatus",
    "Selection",
    "SubtaskPlan",
    "TaskCreationResult",
    "Trend",
    "ValidationResult",
    "WorkerPerformanceSummary",
]
