"""
AssignmentSelector tests.

Run with:
    pytest tests/test_selector.py -v
"""

import pytest

from taskforce.assignment.selector import AssignmentSelector, is_learning_assignment, least_loaded
from taskforce.errors import NoWorkersAvailable
from taskforce.models.task import Priority
from tests.conftest import make_worker


@pytest.fixture
def selector():
    return AssignmentSelector(max_active_tasks=3)


class TestLeastLoaded:
    """Tests for load ordering."""

    def test_stable_on_ties(self):
        """Test equal loads keep input order."""
        workers = [make_worker("a", active_tasks=1), make_worker("b", active_tasks=0), make_worker("c", active_tasks=0)]
        assert [w.id for w in least_loaded(workers)] == ["b", "c", "a"]


class TestSelectTiers:
    """Tests for the tiered selection policy."""

    def test_empty_pool_raises(self, selector):
        with pytest.raises(NoWorkersAvailable):
            selector.select(["react"], None, Priority.MEDIUM, [])

    def test_skill_match_is_case_insensitive_substring(self, selector):
        """Test "React Native" matches a "react" subtask."""
        workers = [make_worker("a", ["Python"]), make_worker("b", ["React Native"], active_tasks=2)]

        selection = selector.select(["react"], None, Priority.LOW, workers)

        assert selection.worker_id == "b"
        assert selection.tier == "skill_match"
        assert selection.is_learning is False

    def test_least_loaded_within_tier(self, selector):
        workers = [make_worker("a", ["react"], active_tasks=2), make_worker("b", ["react"], active_tasks=1)]
        assert selector.select(["react"], None, Priority.LOW, workers).worker_id == "b"

    def test_role_match(self, selector):
        """Test the role label is used when nobody has the skill."""
        workers = [
            make_worker("a", ["Python"], role="Backend Developer"),
            make_worker("b", ["Figma"], role="Frontend Developer", active_tasks=2),
        ]

        selection = selector.select(["vue"], "Frontend", Priority.MEDIUM, workers)

        assert selection.worker_id == "b"
        assert selection.tier == "role_match"
        assert selection.is_learning is True

    def test_least_loaded_last_resort(self, selector):
        workers = [make_worker("a", ["Python"], active_tasks=2), make_worker("b", ["Go"], active_tasks=1)]

        selection = selector.select(["rust"], "Systems", Priority.MEDIUM, workers)

        assert selection.worker_id == "b"
        assert selection.tier == "least_loaded"
        assert selection.is_learning is True

    def test_capacity_cap(self, selector):
        """Test workers at capacity are skipped while others are free."""
        workers = [make_worker("a", ["react"], active_tasks=3), make_worker("b", ["python"], active_tasks=2)]

        selection = selector.select(["react"], None, Priority.MEDIUM, workers)

        assert selection.worker_id == "b"

    def test_cap_ignored_when_everyone_is_full(self, selector):
        """Test the cap never blocks assignment entirely."""
        workers = [make_worker("a", ["react"], active_tasks=5), make_worker("b", ["python"], active_tasks=3)]

        selection = selector.select(["react"], None, Priority.MEDIUM, workers)

        assert selection.worker_id == "a"


class TestHighPriority:
    """Tests for the experience tier."""

    def test_prefers_experienced(self, selector):
        workers = [
            make_worker("junior", ["react"], active_tasks=0),
            make_worker("senior", ["python"], active_tasks=1, tasks_completed=6, quality=85),
        ]

        selection = selector.select(["react"], None, Priority.HIGH, workers)

        assert selection.worker_id == "senior"
        assert selection.tier == "experienced"

    def test_falls_through_without_experienced(self, selector):
        """Test high priority still selects someone when nobody qualifies."""
        workers = [
            make_worker("a", ["react"], tasks_completed=10, quality=70),
            make_worker("b", ["python"], tasks_completed=2, quality=95),
        ]

        selection = selector.select(["react"], None, Priority.HIGH, workers)

        assert selection.worker_id == "a"
        assert selection.tier == "skill_match"

    def test_experience_ignored_for_medium(self, selector):
        workers = [
            make_worker("senior", ["python"], tasks_completed=9, quality=99),
            make_worker("b", ["react"], active_tasks=1),
        ]
        assert selector.select(["react"], None, Priority.MEDIUM, workers).worker_id == "b"


class TestLearningFlag:
    """Tests for is_learning_assignment."""

    def test_no_required_skills_is_not_learning(self):
        assert is_learning_assignment(make_worker("a", ["react"]), []) is False

    def test_missing_skill_is_learning(self):
        assert is_learning_assignment(make_worker("a", ["react"]), ["kubernetes"]) is True
