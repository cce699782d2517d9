"""Worker registration and role maintenance."""

import logging
from typing import Dict, List, Optional, Union

from taskforce.clients.store_client import TaskforceStore
from taskforce.models.worker import PerformanceState, Worker
from taskforce.services.role_service import RoleService
from taskforce.skills import normalize_skill

logger = logging.getLogger(__name__)


def parse_skills(skills: Union[str, List[str], None]) -> List[str]:
    """Accept "react, node" or a list; strip blanks, keep order."""
    if isinstance(skills, str):
        skills = skills.split(",")
    return [s.strip() for s in skills or [] if s and s.strip()]


class WorkerService:
    """
    Creates workers and keeps their role label in step with their skills.

    Usage:
        service = WorkerService(store, RoleService(advisory_client))
        worker = service.register_worker("Ada", skills="react, node", manager_id="m-1")
    """

    def __init__(self, store: TaskforceStore, role_service: Optional[RoleService] = None):
        self.store = store
        self.role_service = role_service or RoleService()

    def register_worker(
        self,
        name: str,
        email: Optional[str] = None,
        manager_id: Optional[str] = None,
        skills: Union[str, List[str], None] = None,
        skill_ratings: Optional[Dict[str, float]] = None,
    ) -> Worker:
        """Create a worker with empty performance and a derived role."""
        skill_list = parse_skills(skills)
        role = self.role_service.assign_role_from_skills(skill_list, skill_ratings)

        worker = Worker(
            name=name,
            email=email,
            manager_id=manager_id,
            skills=skill_list,
            role=role,
            active_tasks=0,
            performance=PerformanceState(),
        )
        created = self.store.create_worker(worker)
        logger.info(f"Registered worker {created.id} as {role}", extra={"manager_id": manager_id})
        return created

    def _ratings(self, worker: Worker) -> Dict[str, float]:
        expertise = worker.performance.skill_expertise
        return {
            skill: expertise[normalize_skill(skill)].avg_rate
            for skill in worker.skills
            if normalize_skill(skill) in expertise
        }

    def refresh_role(self, worker_id: str) -> Worker:
        """Re-derive the role from current skills, rated by skill expertise."""
        worker = self.store.get_worker(worker_id)
        role = self.role_service.assign_role_from_skills(worker.skills, self._ratings(worker))
        if role == worker.role:
            return worker
        logger.info(f"Worker {worker_id} role changed: {worker.role} -> {role}")
        return self.store.update_worker(worker_id, {"role": role})

    def update_skills(self, worker_id: str, skills: Union[str, List[str]]) -> Worker:
        """Replace a worker's skill list and re-derive the role."""
        self.store.update_worker(worker_id, {"skills": parse_skills(skills)})
        return self.refresh_role(worker_id)
