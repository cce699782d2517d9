"""Performance scoring, skill expertise tracking and analytics."""

from taskforce.performance.analytics import AnalyticsEngine
from taskforce.performance.expertise import SkillExpertiseTracker, overall_performance
from taskforce.performance.scorer import PerformanceScorer

__all__ = [
    "AnalyticsEngine",
    "PerformanceScorer",
    "SkillExpertiseTracker",
    "overall_performance",
]
