"""
Task Service for the Taskforce engine.

Task lifecycle on top of the store:
- create_tasks: assign one manager request and persist its subtasks
- start_task / update_status: move a subtask along ASSIGNED -> IN_PROGRESS
- complete_task: score, fold performance, close the subtask
- delete_task: remove a subtask and release its assignee's slot
- list_employee_tasks / list_manager_tasks

active_tasks only ever changes through store.increment_worker_field.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from taskforce.assignment.engine import AssignmentEngine
from taskforce.clients.store_client import TaskforceStore
from taskforce.errors import InvalidTaskTransition, NoWorkersAvailable
from taskforce.models.outputs import CompletionResult, SubtaskPlan, TaskCreationResult
from taskforce.models.task import PRIORITY_ORDER, Task, TaskRequest, TaskStatus
from taskforce.services.performance_service import PerformanceService
from taskforce.utils import utcnow

logger = logging.getLogger(__name__)

ACTIVE_TASKS = "active_tasks"
_NO_DUE_DATE = datetime.max.replace(tzinfo=timezone.utc)


class TaskService:
    """
    Creates, advances and completes subtasks.

    Usage:
        service = TaskService(store, engine, performance_service)
        created = service.create_tasks("manager-1", TaskRequest(title="Checkout"))
        service.start_task(created.tasks[0].id)
        result = service.complete_task(created.tasks[0].id, actual_hours=6)
    """

    def __init__(
        self,
        store: TaskforceStore,
        engine: AssignmentEngine,
        performance_service: Optional[PerformanceService] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.engine = engine
        self.performance_service = performance_service or PerformanceService(store, clock=clock)
        self._clock = clock

    def _build_task(self, manager_id: str, request: TaskRequest, subtask: SubtaskPlan) -> Task:
        return Task(
            title=f"{request.title} - {subtask.title}",
            description=request.description,
            required_skills=subtask.skills or list(request.required_skills),
            priority=request.priority,
            status=TaskStatus.ASSIGNED,
            assigned_to=subtask.employee_id,
            assigned_employee_name=subtask.employee_name,
            ai_reason=subtask.reason,
            estimated_hours=subtask.estimated_hours,
            days_needed=subtask.days_needed,
            due_date=subtask.due_date,
            is_learning_task=subtask.is_learning_task,
            complexity=subtask.complexity,
            created_by=manager_id,
            created_at=self._clock(),
        )

    def create_tasks(self, manager_id: str, request: TaskRequest) -> TaskCreationResult:
        """
        Assign a manager request across the manager's pool and persist it.

        Raises:
            NoWorkersAvailable: if the manager has no workers
        """
        workers = self.store.list_workers_by_manager(manager_id)
        if not workers:
            raise NoWorkersAvailable(f"Manager {manager_id} has no workers")

        result = self.engine.assign(request, workers)

        created = []
        for subtask in result.subtasks:
            task = self.store.create_task(self._build_task(manager_id, request, subtask))
            self.store.increment_worker_field(subtask.employee_id, ACTIVE_TASKS, 1)
            created.append(task)

        logger.info(
            f"Created {len(created)} subtask(s) for '{request.title}'",
            extra={"manager_id": manager_id, "used_fallback": result.used_fallback},
        )
        return TaskCreationResult(
            tasks=created,
            inferred_skills=result.inferred_skills,
            used_fallback=result.used_fallback,
            fallback_reason=result.fallback_reason,
        )

    def _get_open_task(self, task_id: str) -> Task:
        task = self.store.get_task(task_id)
        if task.is_completed:
            raise InvalidTaskTransition(f"Task {task_id} is already completed")
        return task

    def update_status(self, task_id: str, status: TaskStatus) -> Task:
        """Change the status of an open task; completion goes through complete_task."""
        status = TaskStatus(status)
        if status == TaskStatus.COMPLETED:
            raise InvalidTaskTransition("Use complete_task to complete a task")
        self._get_open_task(task_id)
        return self.store.update_task(task_id, {"status": status})

    def start_task(self, task_id: str) -> Task:
        return self.update_status(task_id, TaskStatus.IN_PROGRESS)

    def complete_task(self, task_id: str, actual_hours: Optional[float] = None) -> CompletionResult:
        """
        Complete a subtask and update its assignee's performance.

        The performance write happens first; if it fails the task stays open
        and the error propagates. Completions for one assignee run under its
        worker lock and re-read the task there, so a task completes once.

        Args:
            task_id: Subtask to complete
            actual_hours: Hours spent; defaults to the estimate

        Returns:
            CompletionResult with the closed task and the performance change

        Raises:
            InvalidTaskTransition: if the task is already completed
        """
        assignee = self._get_open_task(task_id).assigned_to
        with self.performance_service.worker_lock(assignee):
            return self._complete_open_task(task_id, actual_hours)

    def _complete_open_task(self, task_id: str, actual_hours: Optional[float]) -> CompletionResult:
        task = self._get_open_task(task_id)
        completed_at = self._clock()
        hours = actual_hours if actual_hours and actual_hours > 0 else task.estimated_hours
        on_time = task.due_date is None or completed_at <= task.due_date

        finished = task.model_copy(update={
            "actual_hours": hours,
            "completed_at": completed_at,
            "completed_on_time": on_time,
        })
        update = self.performance_service.record_completion(finished, completed_at)

        closed = self.store.update_task(task_id, {
            "status": TaskStatus.COMPLETED,
            "actual_hours": hours,
            "task_performance_rate": update.task_score,
            "completed_at": completed_at,
            "completed_on_time": on_time,
        })
        self.store.increment_worker_field(task.assigned_to, ACTIVE_TASKS, -1)

        logger.info(
            f"Task {task_id} completed by {task.assigned_to} with score {update.task_score}",
            extra={"on_time": on_time, "actual_hours": hours},
        )
        return CompletionResult(task=closed, performance=update)

    def delete_task(self, task_id: str) -> None:
        """Delete a subtask, releasing the assignee's slot unless it was completed."""
        task = self.store.get_task(task_id)
        if task.assigned_to and not task.is_completed:
            self.store.increment_worker_field(task.assigned_to, ACTIVE_TASKS, -1)
        self.store.delete_task(task_id)
        logger.info(f"Deleted task {task_id}")

    def list_employee_tasks(self, employee_id: str) -> List[Task]:
        """Tasks for one worker, high priority first, then earliest due date."""
        tasks = self.store.list_tasks_by_employee(employee_id)
        return sorted(tasks, key=lambda t: (PRIORITY_ORDER[t.priority], t.due_date or _NO_DUE_DATE))

    def list_manager_tasks(self, manager_id: str) -> List[Task]:
        return self.store.list_tasks_by_manager(manager_id)
