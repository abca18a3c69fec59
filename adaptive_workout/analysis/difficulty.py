"""Difficulty model: base fitness-level table adjusted by recent performance."""

import logging
from typing import Optional, Sequence

import numpy as np

from ..config import config
from .models import DifficultyLevel, FitnessLevel, PerformanceMetrics, clamp

logger = logging.getLogger(__name__)

INTENSITY_RANGE = (0.1, 1.0)
VOLUME_RANGE = (0.5, 2.0)
COMPLEXITY_RANGE = (0.1, 1.0)


class DifficultyModel:
    """Derives a DifficultyLevel from fitness level and performance trend.

    Pure: the same inputs always produce the same level.
    """

    def __init__(
        self,
        increase: float = config.DIFFICULTY_INCREASE,
        decrease: float = config.DIFFICULTY_DECREASE,
        coasting_completion: float = config.COASTING_COMPLETION,
        coasting_rpe: float = config.COASTING_RPE,
        overreaching_completion: float = config.OVERREACHING_COMPLETION,
        overreaching_rpe: float = config.OVERREACHING_RPE,
    ):
        self.increase = increase
        self.decrease = decrease
        self.coasting_completion = coasting_completion
        self.coasting_rpe = coasting_rpe
        self.overreaching_completion = overreaching_completion
        self.overreaching_rpe = overreaching_rpe

    def performance_modifier(self, history: Sequence[PerformanceMetrics]) -> float:
        """Difficulty delta for a window of recent sessions.

        Returns +increase when the user is coasting, -decrease when
        overreaching, otherwise 0. An empty window yields 0.
        """
        if not history:
            return 0.0

        avg_completion = float(np.mean([clamp(p.completion_rate, 0, 1) for p in history]))
        avg_rpe = float(np.mean([clamp(p.perceived_exertion, 1, 10) for p in history]))

        if avg_completion > self.coasting_completion and avg_rpe < self.coasting_rpe:
            return self.increase
        if avg_completion < self.overreaching_completion or avg_rpe > self.overreaching_rpe:
            return -self.decrease
        return 0.0

    def calculate(
        self,
        fitness_level: FitnessLevel,
        history: Optional[Sequence[PerformanceMetrics]] = None,
    ) -> DifficultyLevel:
        """Compute the difficulty level for a user.

        Args:
            fitness_level: User fitness level
            history: Recent sessions, most recent first

        Returns:
            DifficultyLevel with every factor inside its clamped range
        """
        base = config.get_base_difficulty(fitness_level.value)
        modifier = self.performance_modifier(history or [])

        if modifier:
            logger.debug(f"Difficulty modifier {modifier:+.2f} for {fitness_level.value}")

        return DifficultyLevel(
            level=fitness_level,
            intensity=clamp(base['intensity'] + modifier, *INTENSITY_RANGE),
            volume=clamp(base['volume'] + modifier, *VOLUME_RANGE),
            complexity=clamp(base['complexity'] + modifier, *COMPLEXITY_RANGE),
            auto_adjust=True,
        )
