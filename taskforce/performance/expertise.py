"""
Running skill proficiency per worker.

fold() is pure: it takes the current PerformanceState and returns a new
one with the completion folded in. Persisting the result (and serializing
updates for one worker) is PerformanceService's job.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from taskforce.models.task import Task
from taskforce.models.worker import (
    HISTORY_LIMIT,
    PerformanceState,
    SkillExpertise,
    TaskHistoryEntry,
)
from taskforce.skills import missing_skills, normalize_skill
from taskforce.utils import clamp, round_half_up

logger = logging.getLogger(__name__)

OVERALL_WINDOW = 10


def fold_skill_score(current: Optional[SkillExpertise], score: int, now: datetime) -> SkillExpertise:
    if current is None:
        return SkillExpertise(avg_rate=clamp(score, 0, 100), count=1, last_updated=now)

    new_rate = round_half_up((current.avg_rate * current.count + score) / (current.count + 1))
    return SkillExpertise(
        avg_rate=clamp(new_rate, 0, 100),
        count=current.count + 1,
        last_updated=now,
    )


def overall_performance(performance: PerformanceState, window: int = OVERALL_WINDOW) -> int:
    """Rounded mean of the most recent scores; 0 with no history."""
    scores = performance.recent_scores(window)
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


class SkillExpertiseTracker:
    """
    Folds scored completions into a worker's PerformanceState.

    Usage:
        tracker = SkillExpertiseTracker()
        new_state = tracker.fold(worker.performance, 88, task, completed_at=now)
    """

    def fold(
        self,
        performance: PerformanceState,
        score: int,
        task: Task,
        completed_at: datetime,
    ) -> PerformanceState:
        """
        Return a new PerformanceState with one completion folded in.

        Args:
            performance: Current state (not modified)
            score: Task score in [50, 100]
            task: Completed subtask; its required skills are the ones rated
            completed_at: Completion time, stamped on history and skills

        Returns:
            New PerformanceState
        """
        entry = TaskHistoryEntry(
            task_id=task.id,
            task_name=task.title,
            task_performance=score,
            skills=list(task.required_skills),
            estimated_hours=task.estimated_hours,
            actual_hours=task.actual_hours,
            completed_at=completed_at,
        )
        history = [entry] + list(performance.task_history)
        history = history[:HISTORY_LIMIT]

        expertise = dict(performance.skill_expertise)
        for skill in task.required_skills:
            key = normalize_skill(skill)
            if not key:
                continue
            expertise[key] = fold_skill_score(expertise.get(key), score, completed_at)

        quality = round_half_up(sum(h.task_performance for h in history) / len(history))

        logger.debug(
            f"Folded score {score} for '{task.title}' into {len(task.required_skills)} skill(s)"
        )
        return PerformanceState(
            tasks_completed=performance.tasks_completed + 1,
            on_time_delivery=clamp(quality, 0, 100),
            skill_expertise=expertise,
            task_history=history,
            last_updated=completed_at,
        )

    @staticmethod
    def learned_skills(current: Iterable[str], required: Iterable[str]) -> List[str]:
        """Required skills a learning task adds to the worker's skill list."""
        return missing_skills(current, required)
