"""Live in-session adaptation rules."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Tuple

from ..config import config
from .models import (
    AdaptationAction,
    AdaptationTrigger,
    AdaptiveWorkoutConfig,
    PerformanceUpdate,
    Severity,
    WorkoutAdaptation,
)


class AdaptationMonitor:
    """Evaluates live signals against thresholds.

    Rules are independent; any subset may fire on a single update. The
    monitor only records intent: difficulty and progression plan are left
    to their own components.
    """

    def __init__(
        self,
        fatigue_trigger: float = config.FATIGUE_TRIGGER,
        heart_rate_trigger: float = config.HEART_RATE_TRIGGER,
        completion_trigger: float = config.COMPLETION_TRIGGER,
    ):
        self.fatigue_trigger = fatigue_trigger
        self.heart_rate_trigger = heart_rate_trigger
        self.completion_trigger = completion_trigger
        self.logger = logging.getLogger(__name__)

    def evaluate(self, update: PerformanceUpdate, now: Optional[datetime] = None) -> List[WorkoutAdaptation]:
        """Return the adaptations fired by a live update."""
        timestamp = now or datetime.utcnow()
        adaptations = []

        if update.fatigue is not None and update.fatigue.overall > self.fatigue_trigger:
            adaptations.append(WorkoutAdaptation(
                trigger=AdaptationTrigger.FATIGUE,
                modification=AdaptationAction.REDUCE_INTENSITY,
                severity=Severity.MODERATE,
                parameters={'intensityReduction': 0.15},
                confidence=0.85,
                timestamp=timestamp,
            ))

        if update.avg_heart_rate is not None and update.avg_heart_rate > self.heart_rate_trigger:
            adaptations.append(WorkoutAdaptation(
                trigger=AdaptationTrigger.HEART_RATE_HIGH,
                modification=AdaptationAction.INCREASE_REST,
                severity=Severity.MINOR,
                parameters={'restIncrease': 30},
                confidence=0.9,
                timestamp=timestamp,
            ))

        if update.completion_rate is not None and update.completion_rate < self.completion_trigger:
            adaptations.append(WorkoutAdaptation(
                trigger=AdaptationTrigger.PERFORMANCE_DROP,
                modification=AdaptationAction.SUBSTITUTE_EXERCISE,
                severity=Severity.MAJOR,
                parameters={'targetMuscleGroup': 'maintain', 'difficultyReduction': 0.3},
                confidence=0.75,
                timestamp=timestamp,
            ))

        for adaptation in adaptations:
            self.logger.info(
                f"Adaptation fired: {adaptation.trigger.value} -> {adaptation.modification.value}"
            )

        return adaptations

    def apply(
        self,
        workout_config: AdaptiveWorkoutConfig,
        update: PerformanceUpdate,
        now: Optional[datetime] = None,
    ) -> Tuple[AdaptiveWorkoutConfig, List[WorkoutAdaptation]]:
        """Evaluate an update and return the config with fired adaptations appended."""
        adaptations = self.evaluate(update, now=now)
        if not adaptations:
            return workout_config, adaptations
        updated = replace(workout_config, adaptations=workout_config.adaptations + tuple(adaptations))
        return updated, adaptations
