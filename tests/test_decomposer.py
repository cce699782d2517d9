"""
TaskDecomposer tests.

Run with:
    pytest tests/test_decomposer.py -v
"""

import pytest

from taskforce.assignment.decomposer import TaskDecomposer, get_phase_templates


class TestPhaseTemplates:
    """Tests for the difficulty -> template policy."""

    @pytest.mark.parametrize("difficulty,expected", [
        (1, ["Implementation"]),
        (3, ["Implementation"]),
        (4, ["Core Development", "UI & Testing"]),
        (6, ["Core Development", "UI & Testing"]),
        (7, [
            "Research & Planning",
            "Backend Implementation",
            "Frontend Development",
            "Integration & Testing",
            "Deployment",
        ]),
        (10, [
            "Research & Planning",
            "Backend Implementation",
            "Frontend Development",
            "Integration & Testing",
            "Deployment",
        ]),
    ])
    def test_template_names(self, difficulty, expected):
        assert [t.name for t in get_phase_templates(difficulty)] == expected

    def test_moderate_skill_tags(self):
        """Test moderate phases carry backend and frontend skills."""
        core, ui = get_phase_templates(5)
        assert "api" in core.skills and "database" in core.skills
        assert "react" in ui.skills and "testing" in ui.skills


class TestDecompose:
    """Tests for TaskDecomposer.decompose."""

    def test_difficulty_five_splits_hours(self):
        """Test a difficulty-5 task yields 2 subtasks summing to total hours."""
        assignments = TaskDecomposer().decompose(difficulty=5, total_hours=40)

        assert len(assignments) == 2
        assert sum(a.estimated_hours for a in assignments) == pytest.approx(40)
        assert all(4 <= a.estimated_hours <= 40 for a in assignments)

    def test_no_assignees(self):
        """Test generated subtasks are left for the selector."""
        assignments = TaskDecomposer().decompose(difficulty=8, total_hours=100)

        assert len(assignments) == 5
        assert all(a.assigned_employees == [] for a in assignments)
        assert assignments[0].primary_skill == "Architecture"

    def test_hours_clamped_low(self):
        """Test tiny totals are raised to the 4 hour floor."""
        assignments = TaskDecomposer().decompose(difficulty=9, total_hours=5)
        assert all(a.estimated_hours == 4 for a in assignments)

    def test_hours_clamped_high(self):
        """Test large totals are capped at 40 hours per subtask."""
        assignments = TaskDecomposer().decompose(difficulty=2, total_hours=120)
        assert assignments[0].estimated_hours == 40

    def test_count_truncates(self):
        """Test count limits the templates used and the hour divisor."""
        assignments = TaskDecomposer().decompose(difficulty=8, total_hours=60, count=3)

        assert [a.subtask for a in assignments] == [
            "Research & Planning",
            "Backend Implementation",
            "Frontend Development",
        ]
        assert all(a.estimated_hours == 20 for a in assignments)
