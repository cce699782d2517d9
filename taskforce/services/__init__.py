"""
Services package for the Taskforce engine.

Orchestrates engines and the store:
- task_service: Task lifecycle
- performance_service: Completion scoring, analytics and reports
- worker_service: Registration and role maintenance
- role_service: Role labels from skills
- voice_service: Voice-to-task extraction
"""

from taskforce.services.performance_service import PerformanceService
from taskforce.services.role_service import RoleService
from taskforce.services.task_service import TaskService
from taskforce.services.voice_service import VoiceExtractionService
from taskforce.services.worker_service import WorkerService

__all__ = [
    "PerformanceService",
    "RoleService",
    "TaskService",
    "VoiceExtractionService",
    "WorkerService",
]
