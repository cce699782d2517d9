"""
Rule-based worker selection for one subtask.

Tiers, first match wins:
    1. Drop workers at capacity (unless that drops everyone)
    2. High priority: experienced workers
    3. Workers whose skills overlap the subtask's skills
    4. Workers whose role label contains the primary skill
    5. Anyone left

Within a tier the least-loaded worker wins; equal loads keep input order.
"""

import logging
from typing import List, Optional, Sequence

from taskforce.errors import NoWorkersAvailable
from taskforce.models.outputs import Selection
from taskforce.models.task import Priority
from taskforce.models.worker import Worker
from taskforce.skills import contains_label, has_skill_overlap

logger = logging.getLogger(__name__)

EXPERIENCED_MIN_TASKS = 5
EXPERIENCED_MIN_QUALITY = 80


def least_loaded(workers: Sequence[Worker]) -> List[Worker]:
    """Workers ordered by active_tasks; sorted() is stable so ties keep input order."""
    return sorted(workers, key=lambda w: w.active_tasks)


def is_learning_assignment(worker: Worker, skills: Sequence[str]) -> bool:
    """True when the worker has none of the subtask's skills."""
    return bool(skills) and not has_skill_overlap(worker.skills, skills)


class AssignmentSelector:
    """Picks exactly one worker for a subtask."""

    def __init__(self, max_active_tasks: int = 3):
        self.max_active_tasks = max_active_tasks

    def _available(self, workers: Sequence[Worker]) -> List[Worker]:
        available = [w for w in workers if w.active_tasks < self.max_active_tasks]
        if not available:
            logger.info("Every worker is at capacity; ignoring the cap")
            return list(workers)
        return available

    @staticmethod
    def _is_experienced(worker: Worker) -> bool:
        perf = worker.performance
        return (
            perf.tasks_completed >= EXPERIENCED_MIN_TASKS
            and perf.on_time_delivery >= EXPERIENCED_MIN_QUALITY
        )

    def select(
        self,
        required_skills: Sequence[str],
        primary_skill: Optional[str],
        priority: Priority,
        workers: Sequence[Worker],
    ) -> Selection:
        """
        Select a worker for a subtask.

        Args:
            required_skills: Skills the subtask exercises
            primary_skill: Primary skill or role label of the subtask
            priority: Parent task priority
            workers: Candidate pool

        Returns:
            Selection naming the worker, the deciding tier and the learning flag

        Raises:
            NoWorkersAvailable: if the pool is empty
        """
        if not workers:
            raise NoWorkersAvailable("Cannot select from an empty worker pool")

        pool = self._available(workers)
        chosen, tier = None, None

        if priority == Priority.HIGH:
            experienced = [w for w in pool if self._is_experienced(w)]
            if experienced:
                chosen, tier = least_loaded(experienced)[0], "experienced"

        if chosen is None:
            skilled = [w for w in pool if has_skill_overlap(w.skills, required_skills)]
            if skilled:
                chosen, tier = least_loaded(skilled)[0], "skill_match"

        if chosen is None:
            by_role = [w for w in pool if contains_label(w.role, primary_skill)]
            if by_role:
                chosen, tier = least_loaded(by_role)[0], "role_match"

        if chosen is None:
            chosen, tier = least_loaded(pool)[0], "least_loaded"

        selection = Selection(
            worker_id=chosen.id,
            worker_name=chosen.name,
            tier=tier,
            is_learning=is_learning_assignment(chosen, required_skills),
        )
        logger.debug(
            f"Selected {chosen.id} via {tier}",
            extra={"tier": tier, "learning": selection.is_learning},
        )
        return selection
