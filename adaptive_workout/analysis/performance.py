"""Session performance analysis and trend detection.

Provides:
1. Post-session report (score, strengths, improvements, next-session advice)
2. Trend direction for completion, exertion and volume over a history window
3. Optimal intensity prediction from fatigue, trend, sleep and stress
"""

import math
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

import numpy as np

from .models import PerformanceMetrics, clamp
from .progression import history_frame


class TrendDirection(Enum):
    IMPROVING = "improving"
    PLATEAUING = "plateauing"
    DECLINING = "declining"


@dataclass
class PerformanceReport:
    """Summary of one finalized session."""
    overall_score: int  # 0-100
    strengths: List[str]
    improvements: List[str]
    next_workout_recommendations: List[str]

    def to_dict(self) -> dict:
        return {
            'overall_score': self.overall_score,
            'strengths': self.strengths,
            'improvements': self.improvements,
            'next_workout_recommendations': self.next_workout_recommendations,
        }


@dataclass
class PerformanceTrend:
    metric: str        # completion, exertion, volume
    direction: TrendDirection
    change_rate: float  # relative change per session
    confidence: float


@dataclass
class IntensityTarget:
    target: float              # 1-10
    heart_rate_zone: int       # 1-5
    perceived_exertion: float  # 1-10 RPE
    work_to_rest_ratio: float
    expected_duration: float   # minutes


class PerformanceAnalyzer:
    """Analyzes completed sessions for feedback and trends."""

    def __init__(self, trend_threshold: float = 0.02, min_sessions: int = 3):
        self.trend_threshold = trend_threshold
        self.min_sessions = min_sessions
        self.logger = logging.getLogger(__name__)

    def analyze(self, session: PerformanceMetrics) -> PerformanceReport:
        """Build the post-session report."""
        completion = clamp(session.completion_rate, 0, 1)
        rpe = clamp(session.perceived_exertion, 1, 10)
        minutes = session.duration / 60

        score = completion * 40 + (10 - rpe) * 4 + min(20, minutes * 2)

        strengths = []
        if completion > 0.9:
            strengths.append("Excellent workout completion rate")
        if rpe < 7 and completion > 0.8:
            strengths.append("Good strength endurance")
        if 45 < minutes < 90:
            strengths.append("Optimal workout duration")

        improvements = []
        if completion < 0.8:
            improvements.append("Focus on completing all sets and reps")
        if rpe > 8.5:
            improvements.append("Consider reducing intensity or adding more rest")
        if minutes < 30:
            improvements.append("Try to extend workout duration for better results")

        recommendations = []
        if completion > 0.9 and rpe < 7:
            recommendations.append("Consider increasing intensity for your next workout")
        if session.fatigue.overall > 7:
            recommendations.append("Focus on recovery and lighter intensity next session")
        if rpe > 8.5:
            recommendations.append("Allow extra rest day before next workout")

        return PerformanceReport(
            overall_score=int(clamp(score, 0, 100) + 0.5),
            strengths=strengths,
            improvements=improvements,
            next_workout_recommendations=recommendations,
        )

    def trends(self, history: Sequence[PerformanceMetrics]) -> List[PerformanceTrend]:
        """Trend direction per metric over a window (most recent first).

        Fewer than ``min_sessions`` sessions yields no trends.
        """
        if len(history) < self.min_sessions:
            return []

        # Chronological order for the fit
        frame = history_frame(history).iloc[::-1].reset_index(drop=True)
        confidence = min(1.0, len(frame) / 10)

        trends = []
        for metric, column, inverted in (
            ("completion", "completion", False),
            ("exertion", "rpe", True),
            ("volume", "volume", False),
        ):
            change_rate = self._relative_slope(frame[column].to_numpy(dtype=float))
            signed = -change_rate if inverted else change_rate
            if signed > self.trend_threshold:
                direction = TrendDirection.IMPROVING
            elif signed < -self.trend_threshold:
                direction = TrendDirection.DECLINING
            else:
                direction = TrendDirection.PLATEAUING

            trends.append(PerformanceTrend(
                metric=metric,
                direction=direction,
                change_rate=change_rate,
                confidence=confidence,
            ))

        self.logger.debug(f"Trends over {len(frame)} sessions: {[(t.metric, t.direction.value) for t in trends]}")
        return trends

    @staticmethod
    def _relative_slope(values: np.ndarray) -> float:
        """Least-squares slope per session relative to the window mean."""
        mean = float(np.mean(values))
        if mean == 0:
            return 0.0
        slope = np.polyfit(np.arange(len(values)), values, 1)[0]
        return float(slope / mean)


def predict_optimal_intensity(
    fatigue_score: float,
    trend: TrendDirection = TrendDirection.PLATEAUING,
    sleep_quality: float = 5,
    stress_level: float = 5,
) -> IntensityTarget:
    """Predict a session intensity target.

    Args:
        fatigue_score: Composite fatigue, 1-10
        trend: Completion trend direction
        sleep_quality: 1-10
        stress_level: 1-10
    """
    target = 7 - (fatigue_score - 5) * 0.3

    if trend == TrendDirection.IMPROVING:
        target += 0.5
    elif trend == TrendDirection.DECLINING:
        target -= 1

    target += (sleep_quality - 5) * 0.2
    target -= (stress_level - 5) * 0.15
    target = clamp(target, 1, 10)

    if target > 8:
        work_to_rest = 1.0
    elif target > 6:
        work_to_rest = 1.5
    else:
        work_to_rest = 2.0

    return IntensityTarget(
        target=target,
        heart_rate_zone=math.ceil(target / 2),
        perceived_exertion=target,
        work_to_rest_ratio=work_to_rest,
        expected_duration=45 + (10 - target) * 5,
    )
