"""
Phase-template decomposition.

Maps a difficulty score to a fixed list of work phases:

    1-3   Implementation
    4-6   Core Development -> UI & Testing
    7-10  Research & Planning -> Backend Implementation -> Frontend Development
          -> Integration & Testing -> Deployment

Used when an advisory plan's assignment count disagrees with its own
optimalSubtaskCount, and directly when a task is split without advice.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from taskforce.models.advisory import AdvisoryAssignment
from taskforce.utils import clamp

logger = logging.getLogger(__name__)

MIN_PHASE_HOURS = 4
MAX_PHASE_HOURS = 40


@dataclass(frozen=True)
class PhaseTemplate:
    """A work phase: display name, primary skill label and skill tags."""
    name: str
    primary_skill: str
    skills: List[str] = field(default_factory=list)


SIMPLE_PHASES = [
    PhaseTemplate("Implementation", "Full-Stack"),
]

MODERATE_PHASES = [
    PhaseTemplate("Core Development", "Backend", ["api", "database"]),
    PhaseTemplate("UI & Testing", "Frontend", ["react", "testing"]),
]

COMPLEX_PHASES = [
    PhaseTemplate("Research & Planning", "Architecture", ["design"]),
    PhaseTemplate("Backend Implementation", "Backend", ["node", "api"]),
    PhaseTemplate("Frontend Development", "Frontend", ["react", "css"]),
    PhaseTemplate("Integration & Testing", "QA", ["testing"]),
    PhaseTemplate("Deployment", "DevOps", ["docker"]),
]


def get_phase_templates(difficulty: float) -> List[PhaseTemplate]:
    if difficulty <= 3:
        return SIMPLE_PHASES
    if difficulty <= 6:
        return MODERATE_PHASES
    return COMPLEX_PHASES


class TaskDecomposer:
    """
    Splits a task into phase-template subtasks.

    Usage:
        decomposer = TaskDecomposer()
        assignments = decomposer.decompose(difficulty=5, total_hours=40)
        # two unassigned AdvisoryAssignment objects of 20 hours each
    """

    def decompose(
        self,
        difficulty: float,
        total_hours: float,
        count: Optional[int] = None,
    ) -> List[AdvisoryAssignment]:
        """
        Build unassigned subtasks from the templates for difficulty.

        Args:
            difficulty: Complexity score 1-10
            total_hours: Hours to spread across the generated subtasks
            count: Maximum number of subtasks; defaults to every template

        Returns:
            One AdvisoryAssignment per template used, with no assignee
        """
        templates = get_phase_templates(difficulty)
        if count is not None and count > 0:
            templates = templates[:count]

        hours = clamp(total_hours / len(templates), MIN_PHASE_HOURS, MAX_PHASE_HOURS)
        logger.info(
            f"Decomposed difficulty {difficulty} into {len(templates)} phase(s) of {hours:.1f}h"
        )
        return [
            AdvisoryAssignment(
                subtask=t.name,
                primary_skill=t.primary_skill,
                skills_used=list(t.skills),
                estimated_hours=hours,
            )
            for t in templates
        ]
