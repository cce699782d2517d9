"""
Advisory reply parsing and validation tests.

Run with:
    pytest tests/test_response_parser.py -v
"""

import pytest

from taskforce.assignment.response_parser import (
    parse_assignment_reply,
    parse_json_object,
    validate_assignment_plan,
)
from taskforce.errors import MalformedResponse
from taskforce.models.outputs import ResultStatus
from tests.conftest import advisory_reply


# ============================================================================
# parse_json_object Tests
# ============================================================================

class TestParseJsonObject:
    """Tests for extracting the JSON object from free text."""

    def test_code_fence(self):
        """Test a fenced JSON block is unwrapped."""
        assert parse_json_object('```json\n{"a":1}\n```') == {"a": 1}

    def test_surrounding_prose(self):
        """Test prose before and after the object is ignored."""
        raw = 'Sure! Here you go: {"a": {"b": [1, 2]}} Hope that helps.'
        assert parse_json_object(raw) == {"a": {"b": [1, 2]}}

    def test_no_braces_raises(self):
        """Test text without any brace pair is malformed."""
        with pytest.raises(MalformedResponse):
            parse_json_object("I cannot help with that.")

    def test_invalid_json_raises(self):
        """Test a brace span that is not JSON is malformed."""
        with pytest.raises(MalformedResponse):
            parse_json_object("{not: json,}")

    def test_reversed_braces_raise(self):
        """Test a closing brace before the opening one is malformed."""
        with pytest.raises(MalformedResponse):
            parse_json_object("} oops {")

    def test_excerpt_is_first_200_chars(self):
        """Test the error carries the first 200 characters of the input."""
        raw = "x" * 500
        with pytest.raises(MalformedResponse) as exc_info:
            parse_json_object(raw)
        assert exc_info.value.excerpt == "x" * 200

    def test_empty_input(self):
        """Test None and empty strings are malformed, not a crash."""
        with pytest.raises(MalformedResponse):
            parse_json_object("")
        with pytest.raises(MalformedResponse):
            parse_json_object(None)


# ============================================================================
# Validation Tests
# ============================================================================

class TestValidateAssignmentPlan:
    """Tests for structural validation of assignment plans."""

    def _assignment(self, **overrides):
        data = {
            "subtask": "Backend API",
            "primarySkill": "Node.js",
            "skillsUsed": ["node"],
            "estimatedHours": 20,
            "assignedEmployees": [{"employeeId": "bob", "isLearningSkill": False, "updatedSkills": []}],
        }
        data.update(overrides)
        return data

    def test_valid_plan(self):
        """Test a complete plan validates into an AdvisoryPlan."""
        data = {
            "taskComplexity": {"difficultyScore": 6, "reasoning": "x", "optimalSubtaskCount": 1},
            "inferredSkills": ["node"],
            "assignments": [self._assignment()],
        }

        result = validate_assignment_plan(data)

        assert result.success
        assert result.plan.difficulty == 6
        assert result.plan.assignments[0].assigned_employees[0].employee_id == "bob"

    def test_missing_difficulty(self):
        """Test a plan without difficulty score fails as incomplete."""
        data = {"taskComplexity": {}, "inferredSkills": [], "assignments": [self._assignment()]}

        result = validate_assignment_plan(data)

        assert result.status == ResultStatus.FAILED
        assert result.error.code == "INCOMPLETE_PLAN"
        assert result.plan is None

    def test_inferred_skills_must_be_array(self):
        """Test inferredSkills of the wrong type fails."""
        data = {
            "taskComplexity": {"difficultyScore": 3},
            "inferredSkills": "node",
            "assignments": [self._assignment()],
        }
        assert validate_assignment_plan(data).error.code == "INCOMPLETE_PLAN"

    def test_empty_assignments(self):
        """Test an empty assignments array fails."""
        data = {"taskComplexity": {"difficultyScore": 3}, "inferredSkills": [], "assignments": []}
        assert not validate_assignment_plan(data).success

    def test_schema_error(self):
        """Test an assignment missing its title fails schema validation."""
        bad = self._assignment()
        del bad["subtask"]
        data = {"taskComplexity": {"difficultyScore": 3}, "inferredSkills": [], "assignments": [bad]}

        result = validate_assignment_plan(data)

        assert result.error.code == "SCHEMA_INVALID"
        assert result.error.details["errors"]

    def test_difficulty_clamped(self):
        """Test out-of-range difficulty is clamped to 1-10."""
        data = {
            "taskComplexity": {"difficultyScore": 14},
            "inferredSkills": [],
            "assignments": [self._assignment()],
        }
        assert validate_assignment_plan(data).plan.difficulty == 10

    def test_nan_difficulty_is_schema_error(self):
        data = {
            "taskComplexity": {"difficultyScore": float("nan")},
            "inferredSkills": [],
            "assignments": [self._assignment()],
        }

        result = validate_assignment_plan(data)

        assert result.error.code == "SCHEMA_INVALID"

    def test_null_fields_take_defaults(self):
        """Test null hours, assignees and learning flag read as 8, [] and false."""
        data = {
            "taskComplexity": {"difficultyScore": 4},
            "inferredSkills": [],
            "assignments": [
                self._assignment(estimatedHours=None, skillsUsed=None),
                self._assignment(assignedEmployees=None),
                self._assignment(assignedEmployees=[
                    {"employeeId": "bob", "isLearningSkill": None, "updatedSkills": None},
                ]),
            ],
        }

        result = validate_assignment_plan(data)

        assert result.success
        first, second, third = result.plan.assignments
        assert first.estimated_hours == 8
        assert first.skills_used == []
        assert second.assigned_employees == []
        assert third.assigned_employees[0].is_learning_skill is False
        assert third.assigned_employees[0].updated_skills == []

    def test_zero_hours_means_default(self):
        data = {
            "taskComplexity": {"difficultyScore": 4},
            "inferredSkills": [],
            "assignments": [self._assignment(estimatedHours=0)],
        }
        assert validate_assignment_plan(data).plan.assignments[0].estimated_hours == 8


class TestParseAssignmentReply:
    """Tests for the combined parse-and-validate step."""

    def test_wrapped_reply(self):
        """Test a fenced reply with prose parses into a plan."""
        raw = advisory_reply([{"subtask": "Build", "skillsUsed": ["react"], "assignedEmployees": []}])

        result = parse_assignment_reply(raw)

        assert result.success
        assert result.plan.inferred_skills == ["react", "node"]

    def test_malformed_reply(self):
        """Test prose without JSON becomes a MALFORMED_RESPONSE failure."""
        result = parse_assignment_reply("Sorry, the model is overloaded.")

        assert not result.success
        assert result.error.code == "MALFORMED_RESPONSE"
        assert result.error.details["excerpt"].startswith("Sorry")
