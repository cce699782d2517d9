"""
Assignment engine.

Turns one manager task into scored, assigned subtasks:

    1. Ask the advisory model for complexity, subtask count and assignments
    2. Parse and validate the reply (ValidationResult, never an exception)
    3. Re-derive subtasks from phase templates when the plan's assignment
       count disagrees with its own optimalSubtaskCount
    4. Fill unassigned subtasks with the AssignmentSelector
    5. Materialize hours, day estimates, due dates and rationale

Any failure on the advisory path (unavailable, malformed, invalid, or zero
usable subtasks) takes the local fallback: a 70/30 "Implementation" /
"Testing & Review" split across the two least-loaded workers. The only error
a caller can see is NoWorkersAvailable.
"""

import json
import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from taskforce.assignment.decomposer import TaskDecomposer
from taskforce.assignment.prompts import ASSIGNMENT_PROMPT
from taskforce.assignment.response_parser import parse_assignment_reply
from taskforce.assignment.selector import AssignmentSelector, is_learning_assignment, least_loaded
from taskforce.clients.llm_client import AdvisoryClient
from taskforce.config.settings import Settings, get_settings
from taskforce.errors import AdvisoryUnavailable, NoWorkersAvailable, WorkerNotFound
from taskforce.models.advisory import AdvisoryAssignment, AdvisoryPlan, AssignedEmployee
from taskforce.models.outputs import AssignmentResult, ErrorInfo, SubtaskPlan, ValidationResult
from taskforce.models.task import TaskRequest
from taskforce.models.worker import Worker
from taskforce.utils import clamp, round_half_up, utcnow

logger = logging.getLogger(__name__)

MIN_SUBTASK_HOURS = 4
MAX_SUBTASK_HOURS = 80
MAX_REVIEW_HOURS = 20
LEARNING_HOURS_FACTOR = 1.4
IMPLEMENTATION_SHARE = 0.7
REVIEW_SHARE = 0.3
DEFAULT_COMPLEXITY = 5


class AssignmentEngine:
    """
    Orchestrates advisory planning with a deterministic local fallback.

    Usage:
        engine = AssignmentEngine(advisory_client=AdvisoryClient())
        result = engine.assign(TaskRequest(title="Checkout"), workers)
        for subtask in result.subtasks:
            ...
    """

    def __init__(
        self,
        advisory_client: Optional[AdvisoryClient] = None,
        selector: Optional[AssignmentSelector] = None,
        decomposer: Optional[TaskDecomposer] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the engine.

        Args:
            advisory_client: Advisory model client; None means always fall back
            selector: Worker selector for unassigned subtasks
            decomposer: Phase-template decomposer
            settings: Settings for work-day length and capacity
            clock: Source of "now" for due dates
        """
        settings = settings or get_settings()
        self.advisory_client = advisory_client
        self.selector = selector or AssignmentSelector(max_active_tasks=settings.max_active_tasks)
        self.decomposer = decomposer or TaskDecomposer()
        self.work_hours_per_day = settings.work_hours_per_day
        self.temperature = settings.llm_assignment_temperature
        self._clock = clock

    def assign(self, task: TaskRequest, workers: Sequence[Worker]) -> AssignmentResult:
        """
        Plan and assign subtasks for one task.

        Args:
            task: Manager task request
            workers: Current worker pool, in the caller's preferred order

        Returns:
            AssignmentResult with at least one subtask

        Raises:
            NoWorkersAvailable: if workers is empty
        """
        if not workers:
            raise NoWorkersAvailable("No workers available for assignment")

        logger.info(
            f"Assigning task '{task.title}' across {len(workers)} worker(s)",
            extra={"priority": task.priority.value, "total_hours": task.total_hours},
        )
        now = self._clock()

        outcome = self.consult_advisory(task, workers)
        if not outcome.success:
            return self.fallback(task, workers, now, reason=outcome.error.message)

        plan = outcome.plan
        assignments = self._reconcile_count(plan, task)
        subtasks = self._materialize(plan, assignments, task, workers, now)
        if not subtasks:
            return self.fallback(task, workers, now, reason="No usable subtasks in advisory plan")

        logger.info(f"Created {len(subtasks)} subtask(s) from advisory plan")
        return AssignmentResult(
            subtasks=subtasks,
            inferred_skills=plan.inferred_skills,
            task_complexity=plan.task_complexity,
        )

    def consult_advisory(self, task: TaskRequest, workers: Sequence[Worker]) -> ValidationResult:
        """Ask the advisory model for a plan; every failure becomes a failed result."""
        if self.advisory_client is None:
            return ValidationResult.create_failure(
                ErrorInfo(code="ADVISORY_DISABLED", message="No advisory client configured")
            )

        payload = json.dumps({
            "task": task.to_advisory_dict(),
            "employees": [w.to_advisory_dict() for w in workers],
        })
        try:
            raw = self.advisory_client.complete(
                payload,
                system_prompt=ASSIGNMENT_PROMPT,
                temperature=self.temperature,
            )
        except AdvisoryUnavailable as e:
            return ValidationResult.create_failure(ErrorInfo.from_exception(e, code="ADVISORY_UNAVAILABLE"))
        except Exception as e:
            logger.exception("Unexpected advisory client failure")
            return ValidationResult.create_failure(ErrorInfo.from_exception(e, code="ADVISORY_ERROR"))

        result = parse_assignment_reply(raw)
        if not result.success:
            logger.warning(f"Advisory plan rejected ({result.error.code}): {result.error.message}")
        return result

    def _reconcile_count(self, plan: AdvisoryPlan, task: TaskRequest) -> List[AdvisoryAssignment]:
        declared = plan.task_complexity.optimal_subtask_count
        if not declared or declared == len(plan.assignments):
            return plan.assignments

        logger.info(
            f"Advisory plan declared {declared} subtask(s) but proposed "
            f"{len(plan.assignments)}; using phase templates"
        )
        return self.decomposer.decompose(plan.difficulty, task.total_hours, count=declared)

    @staticmethod
    def _resolve_worker(by_id: Dict[str, Worker], worker_id: str) -> Worker:
        worker = by_id.get(worker_id)
        if worker is None:
            raise WorkerNotFound(worker_id)
        return worker

    def _materialize(
        self,
        plan: AdvisoryPlan,
        assignments: List[AdvisoryAssignment],
        task: TaskRequest,
        workers: Sequence[Worker],
        now: datetime,
    ) -> List[SubtaskPlan]:
        by_id = {w.id: w for w in workers}
        subtasks = []

        for assignment in assignments:
            entries = assignment.assigned_employees
            if not entries:
                selection = self.selector.select(
                    assignment.skills_used, assignment.primary_skill, task.priority, workers
                )
                entries = [AssignedEmployee(
                    employee_id=selection.worker_id,
                    is_learning_skill=selection.is_learning,
                    updated_skills=list(by_id[selection.worker_id].skills),
                )]

            for entry in entries:
                try:
                    worker = self._resolve_worker(by_id, entry.employee_id)
                except WorkerNotFound as e:
                    logger.warning(f"Skipping subtask '{assignment.subtask}': {e}")
                    continue

                learning = entry.is_learning_skill or is_learning_assignment(worker, assignment.skills_used)
                subtasks.append(self._build_subtask(
                    title=assignment.subtask,
                    worker=worker,
                    hours=assignment.estimated_hours,
                    is_learning=learning,
                    skills=assignment.skills_used,
                    primary_skill=assignment.primary_skill,
                    complexity=plan.difficulty,
                    skill_updates=entry.updated_skills,
                    now=now,
                ))
        return subtasks

    def _build_subtask(
        self,
        title: str,
        worker: Worker,
        hours: float,
        is_learning: bool,
        skills: List[str],
        primary_skill: Optional[str],
        complexity: int,
        now: datetime,
        skill_updates: Optional[List[str]] = None,
        reason: Optional[str] = None,
        max_hours: float = MAX_SUBTASK_HOURS,
    ) -> SubtaskPlan:
        hours = clamp(hours, MIN_SUBTASK_HOURS, max_hours)
        if is_learning:
            hours = round_half_up(hours * LEARNING_HOURS_FACTOR)
        days_needed = math.ceil(hours / self.work_hours_per_day)

        if reason is None:
            reason = f"{primary_skill or 'General'} - {', '.join(skills)}"
            if is_learning:
                reason += " (Learning)"

        return SubtaskPlan(
            title=title,
            employee_id=worker.id,
            employee_name=worker.name,
            reason=reason,
            estimated_hours=hours,
            days_needed=days_needed,
            due_date=now + timedelta(days=days_needed),
            skills=list(skills),
            is_learning_task=is_learning,
            skill_updates=list(skill_updates or []),
            complexity=complexity,
            primary_skill=primary_skill,
        )

    def fallback(
        self,
        task: TaskRequest,
        workers: Sequence[Worker],
        now: Optional[datetime] = None,
        reason: str = "",
    ) -> AssignmentResult:
        """
        Deterministic two-way split used whenever advisory planning fails.

        Implementation (70%, 4-80h) goes to the least-loaded worker and
        Testing & Review (30%, 4-20h) to the next; a single worker gets both.
        """
        if not workers:
            raise NoWorkersAvailable("No workers available for assignment")

        now = now or self._clock()
        logger.warning(f"Using fallback assignment for '{task.title}': {reason}")

        ordered = least_loaded(workers)
        implementer = ordered[0]
        reviewer = ordered[1] if len(ordered) > 1 else ordered[0]

        main_hours = round_half_up(task.total_hours * IMPLEMENTATION_SHARE)
        review_hours = round_half_up(task.total_hours * REVIEW_SHARE)

        subtasks = [
            self._build_subtask(
                title="Implementation",
                worker=implementer,
                hours=main_hours,
                is_learning=False,
                skills=list(task.required_skills),
                primary_skill=None,
                complexity=DEFAULT_COMPLEXITY,
                now=now,
                reason="Fallback: least loaded employee",
            ),
            self._build_subtask(
                title="Testing & Review",
                worker=reviewer,
                hours=review_hours,
                is_learning=False,
                skills=["testing"],
                primary_skill=None,
                complexity=DEFAULT_COMPLEXITY,
                now=now,
                reason="Fallback: testing & review",
                max_hours=MAX_REVIEW_HOURS,
            ),
        ]
        return AssignmentResult(
            subtasks=subtasks,
            inferred_skills=list(task.required_skills),
            used_fallback=True,
            fallback_reason=reason or None,
        )
