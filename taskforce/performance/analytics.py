"""Read-only analytics over a worker's performance snapshot."""

import logging
from typing import Dict, List, Sequence

from taskforce.models.outputs import ImprovementArea, PerformanceAnalytics, Trend
from taskforce.models.worker import SkillExpertise, TaskHistoryEntry, Worker

logger = logging.getLogger(__name__)

TREND_WINDOW = 3
TREND_THRESHOLD = 5
STRENGTH_MIN_RATE = 85
LOW_SCORE_THRESHOLD = 70
MAX_ITEMS = 3
IMPROVEMENT_SUGGESTION = "Consider additional training or mentoring"


class AnalyticsEngine:
    """Derives trend, strengths and improvement areas; never writes."""

    def trend(self, history: Sequence[TaskHistoryEntry]) -> Trend:
        """
        Compare the mean of the 3 newest scores with the 3 before them.

        More than 5 points apart in either direction is a trend; fewer than
        3 entries, or nothing older to compare with, is stable.
        """
        if len(history) < TREND_WINDOW:
            return Trend.STABLE

        recent = [h.task_performance for h in history[:TREND_WINDOW]]
        older = [h.task_performance for h in history[TREND_WINDOW:TREND_WINDOW * 2]]
        if not older:
            return Trend.STABLE

        recent_avg = sum(recent) / len(recent)
        older_avg = sum(older) / len(older)
        if recent_avg > older_avg + TREND_THRESHOLD:
            return Trend.IMPROVING
        if recent_avg < older_avg - TREND_THRESHOLD:
            return Trend.DECLINING
        return Trend.STABLE

    def strengths(self, skill_expertise: Dict[str, SkillExpertise]) -> List[str]:
        return [
            skill for skill, data in skill_expertise.items()
            if data.avg_rate >= STRENGTH_MIN_RATE
        ][:MAX_ITEMS]

    def improvement_areas(self, history: Sequence[TaskHistoryEntry]) -> List[ImprovementArea]:
        low = [h for h in history if h.task_performance < LOW_SCORE_THRESHOLD][:MAX_ITEMS]
        return [
            ImprovementArea(
                area=h.skills[0] if h.skills else "General",
                score=h.task_performance,
                suggestion=IMPROVEMENT_SUGGESTION,
            )
            for h in low
        ]

    def analyze(self, worker: Worker) -> PerformanceAnalytics:
        perf = worker.performance
        return PerformanceAnalytics(
            overall_score=perf.overall_quality_score,
            tasks_completed=perf.tasks_completed,
            skill_expertise=dict(perf.skill_expertise),
            recent_trend=self.trend(perf.task_history),
            strengths=self.strengths(perf.skill_expertise),
            improvement_areas=self.improvement_areas(perf.task_history),
        )
