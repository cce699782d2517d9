"""
Per-task performance scoring.

A completed subtask is scored from four factors:

    time efficiency   40%   min(100, estimated / actual * 100)
    skill level       30%   assignee's running avg_rate for the task's skills
    deadline          20%   late: max(50, 100 - 10/day), early: min(100, 100 + 2/day)
    difficulty        10%   100 - min(100, skill count * 10)

The weighted sum is rounded and clamped to [50, 100]. Scores never drop
below 50 so a bad week cannot drag a worker's averages into a spiral.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence

from taskforce.models.task import Task
from taskforce.models.worker import SkillExpertise, Worker
from taskforce.skills import normalize_skill
from taskforce.utils import clamp, round_half_up, utcnow

logger = logging.getLogger(__name__)

MIN_SCORE = 50
MAX_SCORE = 100

DEFAULT_ESTIMATED_HOURS = 8
DEFAULT_DUE_DAYS = 7

NO_SKILL_DATA_LEVEL = 75
NO_MATCHING_SKILL_LEVEL = 60

TIME_WEIGHT = 0.4
SKILL_WEIGHT = 0.3
DEADLINE_WEIGHT = 0.2
DIFFICULTY_WEIGHT = 0.1

SECONDS_PER_DAY = 86400


def time_efficiency(estimated_hours: Optional[float], actual_hours: Optional[float]) -> float:
    estimated = estimated_hours or DEFAULT_ESTIMATED_HOURS
    actual = actual_hours if actual_hours and actual_hours > 0 else estimated
    return min(100.0, estimated / actual * 100)


def difficulty(skill_count: int) -> int:
    return min(100, (skill_count or 1) * 10)


def deadline_score(completed_at: datetime, due_date: datetime) -> float:
    """Fractional days late or early against the due date."""
    delta_days = (completed_at - due_date).total_seconds() / SECONDS_PER_DAY
    if delta_days > 0:
        return max(50.0, 100 - delta_days * 10)
    return min(100.0, 100 + (-delta_days) * 2)


def skill_level(expertise: Dict[str, SkillExpertise], skills: Sequence[str]) -> int:
    """
    Mean avg_rate of the task skills the worker already has ratings for.

    75 when there is no rating data or the task names no skills; 60 when
    none of the task's skills have a rating yet.
    """
    if not expertise or not skills:
        return NO_SKILL_DATA_LEVEL

    rates = [
        expertise[normalize_skill(s)].avg_rate
        for s in skills
        if normalize_skill(s) in expertise
    ]
    if not rates:
        return NO_MATCHING_SKILL_LEVEL
    return round_half_up(sum(rates) / len(rates))


class PerformanceScorer:
    """
    Scores one completed subtask against its assignee's current state.

    Usage:
        scorer = PerformanceScorer()
        score = scorer.score(task, worker, completed_at=now)   # 50..100
    """

    def score(self, task: Task, worker: Worker, completed_at: Optional[datetime] = None) -> int:
        """
        Compute the bounded score for a completed subtask.

        Args:
            task: Subtask with estimated/actual hours, due date and skills
            worker: Assignee, read for skill expertise only
            completed_at: Completion time; defaults to task.completed_at, then now

        Returns:
            Integer score in [50, 100]
        """
        completed_at = completed_at or task.completed_at or utcnow()
        due_date = task.due_date or completed_at + timedelta(days=DEFAULT_DUE_DAYS)

        efficiency = time_efficiency(task.estimated_hours, task.actual_hours)
        level = skill_level(worker.performance.skill_expertise, task.required_skills)
        on_time = deadline_score(completed_at, due_date)
        hardness = difficulty(len(task.required_skills))

        raw = (
            efficiency * TIME_WEIGHT
            + level * SKILL_WEIGHT
            + on_time * DEADLINE_WEIGHT
            + (100 - hardness) * DIFFICULTY_WEIGHT
        )
        result = clamp(round_half_up(raw), MIN_SCORE, MAX_SCORE)

        logger.debug(
            f"Scored task {task.id} for {worker.id}: {result}",
            extra={
                "time_efficiency": efficiency,
                "skill_level": level,
                "deadline_score": on_time,
                "difficulty": hardness,
            },
        )
        return result
