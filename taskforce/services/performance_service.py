"""
Performance Service for the Taskforce engine.

Owns the read-modify-write of a worker's performance document:

    read worker -> score task -> fold into PerformanceState -> versioned write

Updates for the same worker are serialized with an in-process lock, and the
write itself is optimistic (expected_version). A ConcurrentUpdateError from
the store means another process got there first: re-read, recompute and try
again, up to performance_update_max_attempts. Any other store error is
raised unchanged; a lost performance update must fail loudly.

Each history entry carries its task id. A task already in the worker's
history window is not folded again, so retrying a completion is a no-op.
"""

import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List, Optional

from taskforce.clients.store_client import TaskforceStore
from taskforce.config.settings import Settings, get_settings
from taskforce.errors import ConcurrentUpdateError, TaskforceError
from taskforce.models.outputs import (
    ManagerStats,
    PerformanceAnalytics,
    PerformanceUpdate,
    WorkerPerformanceSummary,
)
from taskforce.models.task import PerformanceMetric, Task, TaskStatus
from taskforce.models.worker import Worker
from taskforce.performance.analytics import AnalyticsEngine
from taskforce.performance.expertise import SkillExpertiseTracker, overall_performance
from taskforce.performance.scorer import PerformanceScorer
from taskforce.utils import round_half_up, utcnow

logger = logging.getLogger(__name__)

RECENT_METRICS_LIMIT = 10
DEFAULT_TEAM_PERFORMANCE = 80


class PerformanceService:
    """
    Scores completions and maintains worker performance state.

    Usage:
        service = PerformanceService(store)
        update = service.record_completion(task, completed_at=now)
        analytics = service.get_analytics(task.assigned_to)
    """

    def __init__(
        self,
        store: TaskforceStore,
        scorer: Optional[PerformanceScorer] = None,
        tracker: Optional[SkillExpertiseTracker] = None,
        analytics: Optional[AnalyticsEngine] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        settings = settings or get_settings()
        self.store = store
        self.scorer = scorer or PerformanceScorer()
        self.tracker = tracker or SkillExpertiseTracker()
        self.analytics = analytics or AnalyticsEngine()
        self.max_attempts = max(1, settings.performance_update_max_attempts)
        self._clock = clock
        self._locks: Dict[str, threading.RLock] = defaultdict(threading.RLock)
        self._locks_guard = threading.Lock()

    def worker_lock(self, worker_id: str) -> threading.RLock:
        """Reentrant lock serializing performance updates for one worker."""
        with self._locks_guard:
            return self._locks[worker_id]

    def record_completion(self, task: Task, completed_at: Optional[datetime] = None) -> PerformanceUpdate:
        """
        Score a completed subtask and fold it into its assignee's performance.

        For learning tasks the required skills the worker did not list yet
        are appended to the worker's skills in the same write.

        Args:
            task: Subtask with actual hours already set
            completed_at: Completion time; defaults to now

        Returns:
            PerformanceUpdate describing the change

        Raises:
            WorkerNotFound: if the assignee does not exist
            ConcurrentUpdateError: if every attempt lost a write race
            StoreError: on any other store failure
        """
        completed_at = completed_at or task.completed_at or self._clock()
        worker_id = task.assigned_to

        with self.worker_lock(worker_id):
            for attempt in range(1, self.max_attempts + 1):
                worker = self.store.get_worker(worker_id)
                previous = worker.performance.history_entry(task.id)
                if previous is not None:
                    logger.warning(f"Task {task.id} already recorded for worker {worker_id}")
                    return self._recorded(worker, previous.task_performance)

                score = self.scorer.score(task, worker, completed_at)
                performance = self.tracker.fold(worker.performance, score, task, completed_at)

                updates = {"performance": performance}
                learned = []
                if task.is_learning_task:
                    learned = self.tracker.learned_skills(worker.skills, task.required_skills)
                    if learned:
                        updates["skills"] = list(worker.skills) + learned

                try:
                    self.store.update_worker(worker_id, updates, expected_version=worker.version)
                    break
                except ConcurrentUpdateError:
                    logger.warning(
                        f"Performance update for {worker_id} lost a write race "
                        f"(attempt {attempt}/{self.max_attempts})"
                    )
                    if attempt == self.max_attempts:
                        raise

        self.store.create_performance_metric(PerformanceMetric(
            task_id=task.id,
            employee_id=worker_id,
            score=score,
            details={
                "estimated_hours": task.estimated_hours,
                "actual_hours": task.actual_hours,
                "skills": list(task.required_skills),
                "complexity": task.complexity,
                "is_learning_task": task.is_learning_task,
            },
            timestamp=completed_at,
        ))

        logger.info(
            f"Recorded score {score} for worker {worker_id}",
            extra={"task_id": task.id, "tasks_completed": performance.tasks_completed},
        )
        if learned:
            logger.info(f"Worker {worker_id} learned: {', '.join(learned)}")

        return PerformanceUpdate(
            worker_id=worker_id,
            task_score=score,
            overall_performance=overall_performance(performance),
            tasks_completed=performance.tasks_completed,
            updated_skills=list(performance.skill_expertise.keys()),
            learned_skills=learned,
        )

    @staticmethod
    def _recorded(worker: Worker, score: int) -> PerformanceUpdate:
        performance = worker.performance
        return PerformanceUpdate(
            worker_id=worker.id,
            task_score=score,
            overall_performance=overall_performance(performance),
            tasks_completed=performance.tasks_completed,
            updated_skills=list(performance.skill_expertise.keys()),
        )

    def get_analytics(self, worker_id: str) -> PerformanceAnalytics:
        """Analytics for one worker; a neutral snapshot if the worker cannot be read."""
        try:
            worker = self.store.get_worker(worker_id)
        except TaskforceError as e:
            logger.error(f"Analytics unavailable for {worker_id}: {e}")
            return PerformanceAnalytics()
        return self.analytics.analyze(worker)

    def _summarize(self, worker: Worker) -> WorkerPerformanceSummary:
        metrics = self.store.list_performance_metrics(worker.id, limit=RECENT_METRICS_LIMIT)
        tasks = self.store.list_tasks_by_employee(worker.id)
        return WorkerPerformanceSummary(
            employee_id=worker.id,
            name=worker.name,
            overall_score=worker.performance.overall_quality_score,
            active_tasks=worker.active_tasks,
            completed_tasks=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
            total_tasks=len(tasks),
            recent_score=metrics[0].score if metrics else None,
            recent_metrics=[m.model_dump(mode="json") for m in metrics],
        )

    def get_worker_performance(self, worker_id: str) -> WorkerPerformanceSummary:
        return self._summarize(self.store.get_worker(worker_id))

    def get_team_performance(self, manager_id: str) -> List[WorkerPerformanceSummary]:
        return [self._summarize(w) for w in self.store.list_workers_by_manager(manager_id)]

    def get_manager_stats(self, manager_id: str) -> ManagerStats:
        """Pool size, task status counts and the mean quality score of the pool."""
        workers = self.store.list_workers_by_manager(manager_id)
        tasks = self.store.list_tasks_by_manager(manager_id)

        if workers:
            avg = sum(w.performance.overall_quality_score for w in workers) / len(workers)
        else:
            avg = DEFAULT_TEAM_PERFORMANCE

        return ManagerStats(
            total_employees=len(workers),
            total_tasks=len(tasks),
            completed_tasks=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
            assigned_tasks=sum(1 for t in tasks if t.status == TaskStatus.ASSIGNED),
            in_progress_tasks=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
            avg_performance=round_half_up(avg),
        )
