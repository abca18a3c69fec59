"""Smart rest timer.

Computes an adaptive rest interval after each completed set from:
1. Exercise type and prescribed rep range (base rest table)
2. Previous set intensity (RPE, completion)
3. Heart-rate recovery, muscle-group fatigue and sleep quality
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..config import config
from .models import (
    Exercise,
    ExerciseType,
    Priority,
    RecommendationType,
    RestingFactors,
    RestRecommendation,
    SetPerformance,
    SmartRestTimer,
    TimeOfDay,
    clamp,
)

logger = logging.getLogger(__name__)

SLOW_HR_RECOVERY = 20  # bpm
FAST_HR_RECOVERY = 40  # bpm
HIGH_MUSCLE_FATIGUE = 0.7


def classify_exercise(exercise: Exercise) -> ExerciseType:
    """Classify an exercise as compound, isolation or cardio."""
    if exercise.category == ExerciseType.CARDIO.value:
        return ExerciseType.CARDIO
    if len(exercise.muscle_groups) > 2:
        return ExerciseType.COMPOUND
    return ExerciseType.ISOLATION


def classify_rep_range(reps: int) -> str:
    """Map prescribed reps to a rest intensity band: high, medium or low."""
    if reps < 6:
        return "high"
    if reps < 12:
        return "medium"
    return "low"


def time_of_day(now: datetime) -> TimeOfDay:
    if now.hour < 12:
        return TimeOfDay.MORNING
    if now.hour < 18:
        return TimeOfDay.AFTERNOON
    return TimeOfDay.EVENING


def _bounded(name: str, value: float, low: float, high: float) -> float:
    bounded = clamp(value, low, high)
    if bounded != value:
        logger.warning(f"Clamped {name}={value} to {bounded}")
    return bounded


class RestTimeCalculator:
    """Calculates adaptive rest between sets. Holds no per-call state."""

    def __init__(
        self,
        min_rest: int = config.MIN_REST_SECONDS,
        max_rest: int = config.MAX_REST_SECONDS,
        default_muscle_fatigue: float = config.DEFAULT_MUSCLE_FATIGUE,
    ):
        self.min_rest = min_rest
        self.max_rest = max_rest
        self.default_muscle_fatigue = default_muscle_fatigue

    def base_rest_time(self, exercise: Exercise) -> int:
        exercise_type = classify_exercise(exercise)
        return config.get_base_rest_time(exercise_type.value, classify_rep_range(exercise.reps))

    @staticmethod
    def set_intensity(set_performance: SetPerformance) -> float:
        """Set intensity in [0.1, 1.0]; failed sets count for 70%."""
        rpe = _bounded("rpe", set_performance.rpe, 1, 10)
        return rpe / 10 * (1.0 if set_performance.completed else 0.7)

    def calculate(
        self,
        exercise: Exercise,
        previous_set: SetPerformance,
        overrides: Optional[Dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> SmartRestTimer:
        """Compute the rest recommendation following a set.

        Args:
            exercise: Exercise being rested from
            previous_set: The set just completed
            overrides: Partial RestingFactors from wearables or calendar
                (heart_rate_recovery, sleep_quality, muscle_group_fatigue,
                time_of_day, previous_set_intensity)
            now: Clock used to derive time of day when not overridden

        Returns:
            SmartRestTimer with rest clamped to [min_rest, max_rest]
        """
        overrides = dict(overrides or {})
        base_rest = self.base_rest_time(exercise)

        tod = overrides.get('time_of_day')
        if tod is None:
            tod = time_of_day(now or datetime.now())
        elif not isinstance(tod, TimeOfDay):
            tod = TimeOfDay(tod)

        hr_recovery = overrides.get('heart_rate_recovery')
        sleep_quality = overrides.get('sleep_quality')
        if sleep_quality is not None:
            sleep_quality = _bounded("sleep_quality", sleep_quality, 0, 1)

        intensity = overrides.get('previous_set_intensity')
        intensity = self.set_intensity(previous_set) if intensity is None else _bounded(
            "previous_set_intensity", intensity, 0, 1
        )

        factors = RestingFactors(
            previous_set_intensity=intensity,
            muscle_group_fatigue=_bounded(
                "muscle_group_fatigue",
                overrides.get('muscle_group_fatigue', self.default_muscle_fatigue),
                0,
                1,
            ),
            exercise_type=classify_exercise(exercise),
            time_of_day=tod,
            heart_rate_recovery=hr_recovery,
            sleep_quality=sleep_quality,
        )

        current_rest = self.adaptive_rest_time(base_rest, factors)
        logger.debug(f"Rest for {exercise.id}: base {base_rest}s -> {current_rest}s")

        return SmartRestTimer(
            base_rest_time=base_rest,
            factors=factors,
            current_rest=current_rest,
            recommendations=tuple(self.recommendations(factors)),
        )

    def adaptive_rest_time(self, base_rest: float, factors: RestingFactors) -> int:
        rest = float(base_rest)

        if factors.heart_rate_recovery is not None:
            if factors.heart_rate_recovery < SLOW_HR_RECOVERY:
                rest *= 1.3
            elif factors.heart_rate_recovery > FAST_HR_RECOVERY:
                rest *= 0.8

        rest *= 0.7 + factors.previous_set_intensity * 0.6
        rest *= 0.8 + factors.muscle_group_fatigue * 0.4

        if factors.sleep_quality is not None:
            rest *= 1.3 - factors.sleep_quality * 0.3

        # half-up rounding; rest is always positive here
        return int(clamp(rest, self.min_rest, self.max_rest) + 0.5)

    @staticmethod
    def recommendations(factors: RestingFactors) -> List[RestRecommendation]:
        recommendations = []

        if factors.heart_rate_recovery is not None and factors.heart_rate_recovery < SLOW_HR_RECOVERY:
            recommendations.append(RestRecommendation(
                type=RecommendationType.EXTEND_REST,
                reason="Heart rate not fully recovered",
                adjustment=30,
                priority=Priority.HIGH,
            ))

        if factors.muscle_group_fatigue > HIGH_MUSCLE_FATIGUE:
            recommendations.append(RestRecommendation(
                type=RecommendationType.ACTIVE_RECOVERY,
                reason="High muscle fatigue detected",
                adjustment=0,
                priority=Priority.MEDIUM,
            ))

        return recommendations
