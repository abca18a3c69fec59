"""Pure scoring components for adaptive workouts."""

from .adaptation_monitor import AdaptationMonitor
from .difficulty import DifficultyModel
from .performance import PerformanceAnalyzer, TrendDirection, predict_optimal_intensity
from .progression import ProgressionScheduler, ProgressionState
from .rest_timer import RestTimeCalculator
from .substitution import SubstitutionRanker

__all__ = [
    "AdaptationMonitor",
    "DifficultyModel",
    "PerformanceAnalyzer",
    "predict_optimal_intensity",
    "TrendDirection",
    "ProgressionScheduler",
    "ProgressionState",
    "RestTimeCalculator",
    "SubstitutionRanker",
]
