"""
Schema of the advisory model's assignment reply.

Expected shape (camelCase keys as produced by the model):
    {
        "taskComplexity": {"difficultyScore": 7, "reasoning": "...", "optimalSubtaskCount": 4},
        "inferredSkills": ["node", "react"],
        "assignments": [{
            "subtask": "Backend API Development",
            "primarySkill": "Node.js",
            "skillsUsed": ["node", "api"],
            "estimatedHours": 20,
            "assignedEmployees": [{"employeeId": "...", "isLearningSkill": false, "updatedSkills": [...]}]
        }]
    }

Fields the model commonly omits get the same defaults the local path uses;
fields that carry the decision (difficulty, inferred skills, assignments) are
required and checked in response_parser.validate_assignment_plan.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskforce.utils import clamp, round_half_up

DEFAULT_ESTIMATED_HOURS = 8


class _AdvisoryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TaskComplexity(_AdvisoryModel):
    difficulty_score: float = Field(alias="difficultyScore", allow_inf_nan=False)
    reasoning: Optional[str] = None
    optimal_subtask_count: Optional[int] = Field(default=None, alias="optimalSubtaskCount")


class AssignedEmployee(_AdvisoryModel):
    employee_id: str = Field(alias="employeeId")
    is_learning_skill: bool = Field(default=False, alias="isLearningSkill")
    updated_skills: List[str] = Field(default_factory=list, alias="updatedSkills")

    @field_validator("is_learning_skill", mode="before")
    @classmethod
    def null_is_not_learning(cls, v):
        return False if v is None else v

    @field_validator("updated_skills", mode="before")
    @classmethod
    def null_skills(cls, v):
        return [] if v is None else v


class AdvisoryAssignment(_AdvisoryModel):
    """
    One proposed subtask.

    Also produced locally by the TaskDecomposer, in which case
    assigned_employees is empty and the AssignmentSelector picks a worker.
    """
    subtask: str
    primary_skill: Optional[str] = Field(default=None, alias="primarySkill")
    skills_used: List[str] = Field(default_factory=list, alias="skillsUsed")
    estimated_hours: float = Field(
        default=DEFAULT_ESTIMATED_HOURS, alias="estimatedHours", allow_inf_nan=False
    )
    assigned_employees: List[AssignedEmployee] = Field(default_factory=list, alias="assignedEmployees")

    @field_validator("estimated_hours", mode="before")
    @classmethod
    def missing_hours(cls, v):
        # null and 0 both mean "no estimate"
        return v or DEFAULT_ESTIMATED_HOURS

    @field_validator("skills_used", "assigned_employees", mode="before")
    @classmethod
    def null_list(cls, v):
        return [] if v is None else v


class AdvisoryPlan(_AdvisoryModel):
    task_complexity: TaskComplexity = Field(alias="taskComplexity")
    inferred_skills: List[str] = Field(alias="inferredSkills")
    assignments: List[AdvisoryAssignment] = Field(alias="assignments")

    @property
    def difficulty(self) -> int:
        """Difficulty as an integer in [1, 10]."""
        return clamp(round_half_up(self.task_complexity.difficulty_score), 1, 10)
