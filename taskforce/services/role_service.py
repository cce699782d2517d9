"""Role labels for workers, from the advisory model or the keyword heuristic."""

import logging
from typing import Dict, List, Optional

from taskforce.assignment.prompts import ROLE_PROMPT
from taskforce.clients.llm_client import AdvisoryClient
from taskforce.config.settings import Settings, get_settings
from taskforce.errors import AdvisoryUnavailable
from taskforce.skills import detect_developer_role, strongest_skill

logger = logging.getLogger(__name__)

UNRATED = 100


class RoleService:
    """
    Picks a role label from a worker's strongest skill.

    The advisory model gets the rated skill list and the strongest skill;
    when it is unavailable or answers with nothing, detect_developer_role
    decides instead.
    """

    def __init__(
        self,
        advisory_client: Optional[AdvisoryClient] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.advisory_client = advisory_client
        self.temperature = settings.llm_assignment_temperature

    def build_prompt(self, skills: List[str], ratings: Dict[str, float]) -> str:
        top = strongest_skill(skills, ratings)
        skill_lines = "\n".join(f"{s}: {ratings.get(s, UNRATED):g}%" for s in skills)
        return ROLE_PROMPT.format(
            skill_lines=skill_lines,
            top_skill=top,
            top_rating=f"{ratings.get(top, UNRATED):g}",
        )

    def assign_role_from_skills(
        self,
        skills: List[str],
        ratings: Optional[Dict[str, float]] = None,
    ) -> str:
        """
        Role label for a skill list.

        Args:
            skills: Worker skills in their original order
            ratings: Optional skill -> proficiency (0-100); unrated counts as 100

        Returns:
            Role label, never empty
        """
        ratings = ratings or {}
        fallback = detect_developer_role(skills)
        if not skills or self.advisory_client is None:
            return fallback

        try:
            reply = self.advisory_client.complete(
                self.build_prompt(skills, ratings),
                temperature=self.temperature,
            )
        except AdvisoryUnavailable as e:
            logger.error(f"Role assignment failed, using keyword heuristic: {e}")
            return fallback

        role = reply.strip().strip('"').strip()
        return role or fallback
