"""
Document store interface for the Taskforce engine.

The engine never talks to a database directly. Services receive a
TaskforceStore and use only the operations below:

- workers: get / create / versioned update / list by manager / atomic counter
- tasks: get / create / update / delete / list by manager or employee
- performance metrics: append / list recent

InMemoryStore is the reference implementation used by tests and by
single-process deployments; RedisStore (redis_store.py) is the shared one.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from taskforce.errors import ConcurrentUpdateError, StoreError, TaskNotFound, WorkerNotFound
from taskforce.models.task import PerformanceMetric, Task
from taskforce.models.worker import Worker
from taskforce.utils import utcnow

logger = logging.getLogger(__name__)

# Fields that may only change through increment_worker_field.
COUNTER_FIELDS = ("active_tasks",)

# Newest metrics kept per worker.
METRICS_RETAINED = 50


class TaskforceStore(ABC):
    """Operations the engine requires from its persistence collaborator."""

    # Workers

    @abstractmethod
    def get_worker(self, worker_id: str) -> Worker:
        """Return the worker or raise WorkerNotFound."""

    @abstractmethod
    def create_worker(self, worker: Worker) -> Worker:
        pass

    @abstractmethod
    def update_worker(
        self,
        worker_id: str,
        updates: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Worker:
        """
        Apply a partial update and bump the worker's version.

        When expected_version is given and the stored version differs, no
        write happens and ConcurrentUpdateError is raised.
        """

    @abstractmethod
    def list_workers_by_manager(self, manager_id: str) -> List[Worker]:
        pass

    @abstractmethod
    def increment_worker_field(self, worker_id: str, field: str, delta: int) -> int:
        """Atomically add delta to a counter field (never below zero); return the new value."""

    # Tasks

    @abstractmethod
    def create_task(self, task: Task) -> Task:
        pass

    @abstractmethod
    def get_task(self, task_id: str) -> Task:
        """Return the task or raise TaskNotFound."""

    @abstractmethod
    def update_task(self, task_id: str, updates: Dict[str, Any]) -> Task:
        pass

    @abstractmethod
    def delete_task(self, task_id: str) -> None:
        pass

    @abstractmethod
    def list_tasks_by_manager(self, manager_id: str) -> List[Task]:
        """Tasks created by the manager, newest first."""

    @abstractmethod
    def list_tasks_by_employee(self, employee_id: str) -> List[Task]:
        pass

    # Performance metrics

    @abstractmethod
    def create_performance_metric(self, metric: PerformanceMetric) -> PerformanceMetric:
        pass

    @abstractmethod
    def list_performance_metrics(self, worker_id: str, limit: int = 50) -> List[PerformanceMetric]:
        """Most recent metrics for the worker, newest first."""


def _check_counter_updates(updates: Dict[str, Any]) -> None:
    blocked = [f for f in COUNTER_FIELDS if f in updates]
    if blocked:
        raise StoreError(f"Counter fields must be changed with increment_worker_field: {blocked}")


def apply_worker_updates(worker: Worker, updates: Dict[str, Any]) -> Worker:
    """Return a validated copy of worker with updates applied and version bumped."""
    merged = worker.model_copy(update=updates)
    data = merged.model_dump()
    data["version"] = worker.version + 1
    return Worker.model_validate(data)


def apply_task_updates(task: Task, updates: Dict[str, Any]) -> Task:
    merged = task.model_copy(update={**updates, "updated_at": utcnow()})
    return Task.model_validate(merged.model_dump())


class InMemoryStore(TaskforceStore):
    """
    Thread-safe, process-local store.

    Every operation holds one re-entrant lock, so versioned updates and
    counter increments are atomic within the process.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._workers: Dict[str, Worker] = {}
        self._tasks: Dict[str, Task] = {}
        self._metrics: Dict[str, List[PerformanceMetric]] = {}

    def get_worker(self, worker_id: str) -> Worker:
        with self._lock:
            worker = self._workers.get(worker_id)
            if worker is None:
                raise WorkerNotFound(worker_id)
            return worker.model_copy(deep=True)

    def create_worker(self, worker: Worker) -> Worker:
        with self._lock:
            self._workers[worker.id] = worker.model_copy(deep=True)
            logger.debug(f"Created worker {worker.id}")
            return worker.model_copy(deep=True)

    def update_worker(
        self,
        worker_id: str,
        updates: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Worker:
        _check_counter_updates(updates)
        with self._lock:
            current = self._workers.get(worker_id)
            if current is None:
                raise WorkerNotFound(worker_id)
            if expected_version is not None and current.version != expected_version:
                raise ConcurrentUpdateError(worker_id, expected_version, current.version)
            updated = apply_worker_updates(current, updates)
            self._workers[worker_id] = updated
            return updated.model_copy(deep=True)

    def list_workers_by_manager(self, manager_id: str) -> List[Worker]:
        with self._lock:
            return [
                w.model_copy(deep=True)
                for w in self._workers.values()
                if w.manager_id == manager_id
            ]

    def increment_worker_field(self, worker_id: str, field: str, delta: int) -> int:
        if field not in COUNTER_FIELDS:
            raise StoreError(f"Not a counter field: {field}")
        with self._lock:
            current = self._workers.get(worker_id)
            if current is None:
                raise WorkerNotFound(worker_id)
            value = max(0, getattr(current, field) + delta)
            # Counter changes do not bump the version: they never race with
            # the performance read-modify-write.
            self._workers[worker_id] = current.model_copy(update={field: value})
            return value

    def create_task(self, task: Task) -> Task:
        with self._lock:
            self._tasks[task.id] = task.model_copy(deep=True)
            return task.model_copy(deep=True)

    def get_task(self, task_id: str) -> Task:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                raise TaskNotFound(task_id)
            return task.model_copy(deep=True)

    def update_task(self, task_id: str, updates: Dict[str, Any]) -> Task:
        with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                raise TaskNotFound(task_id)
            updated = apply_task_updates(current, updates)
            self._tasks[task_id] = updated
            return updated.model_copy(deep=True)

    def delete_task(self, task_id: str) -> None:
        with self._lock:
            if self._tasks.pop(task_id, None) is None:
                raise TaskNotFound(task_id)

    def list_tasks_by_manager(self, manager_id: str) -> List[Task]:
        with self._lock:
            tasks = [t.model_copy(deep=True) for t in self._tasks.values() if t.created_by == manager_id]
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    def list_tasks_by_employee(self, employee_id: str) -> List[Task]:
        with self._lock:
            return [t.model_copy(deep=True) for t in self._tasks.values() if t.assigned_to == employee_id]

    def create_performance_metric(self, metric: PerformanceMetric) -> PerformanceMetric:
        with self._lock:
            metrics = self._metrics.setdefault(metric.employee_id, [])
            metrics.insert(0, metric.model_copy(deep=True))
            del metrics[METRICS_RETAINED:]
            return metric

    def list_performance_metrics(self, worker_id: str, limit: int = 50) -> List[PerformanceMetric]:
        with self._lock:
            return [m.model_copy(deep=True) for m in self._metrics.get(worker_id, [])[:limit]]
