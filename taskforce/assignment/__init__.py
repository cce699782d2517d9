"""Task decomposition and worker assignment."""

from taskforce.assignment.decomposer import TaskDecomposer, get_phase_templates
from taskforce.assignment.engine import AssignmentEngine
from taskforce.assignment.response_parser import (
    parse_assignment_reply,
    parse_json_object,
    validate_assignment_plan,
)
from taskforce.assignment.selector import AssignmentSelector

__all__ = [
    "AssignmentEngine",
    "AssignmentSelector",
    "TaskDecomposer",
    "get_phase_templates",
    "parse_assignment_reply",
    "parse_json_object",
    "validate_assignment_plan",
]
