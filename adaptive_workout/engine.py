"""Adaptive workout engine.

Composes the pure scoring components with the performance store:

- ``build``: difficulty, personalization and a seeded progression plan for
  a new adaptive workout
- ``apply_live_update``: live adaptation during a session
- ``close_session``: history append and progression/deload scheduling
- ``suggest_substitutions``: stateless substitution ranking

Every mutation is a load -> compute -> persist step on an immutable
snapshot, serialized per workout key by an in-process lock and guarded
across processes by the store's version check.
"""

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .analysis.adaptation_monitor import AdaptationMonitor
from .analysis.difficulty import DifficultyModel
from .analysis.models import (
    AdaptiveWorkoutConfig,
    BaseWorkout,
    Exercise,
    PerformanceMetrics,
    PerformanceUpdate,
    ProgressionPlan,
    SetPerformance,
    SmartRestTimer,
    SubstitutionReason,
    UserProfile,
    WorkoutAdaptation,
)
from .analysis.performance import (
    IntensityTarget,
    PerformanceAnalyzer,
    PerformanceReport,
    PerformanceTrend,
    TrendDirection,
    predict_optimal_intensity,
)
from .analysis.personalization import personalize, seed_progression_plan
from .analysis.progression import ProgressionScheduler
from .analysis.rest_timer import RestTimeCalculator
from .analysis.substitution import SubstitutionRanker
from .db.store import PerformanceStore
from .errors import ConfigurationError, NotFoundError


class AdaptiveWorkoutEngine:
    """Public entry point for the session tracker and workout planner."""

    def __init__(
        self,
        store: Optional[PerformanceStore] = None,
        difficulty_model: Optional[DifficultyModel] = None,
        monitor: Optional[AdaptationMonitor] = None,
        scheduler: Optional[ProgressionScheduler] = None,
        ranker: Optional[SubstitutionRanker] = None,
        rest_calculator: Optional[RestTimeCalculator] = None,
        analyzer: Optional[PerformanceAnalyzer] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.store = store or PerformanceStore()
        self.difficulty_model = difficulty_model or DifficultyModel()
        self.monitor = monitor or AdaptationMonitor()
        self.scheduler = scheduler or ProgressionScheduler()
        self.ranker = ranker or SubstitutionRanker()
        self.rest_calculator = rest_calculator or RestTimeCalculator()
        self.analyzer = analyzer or PerformanceAnalyzer()
        self.clock = clock
        self.logger = logging.getLogger(__name__)

        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, workout_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(workout_id)
            if lock is None:
                lock = self._locks[workout_id] = threading.Lock()
            return lock

    def _load(self, workout_id: str) -> Tuple[AdaptiveWorkoutConfig, int]:
        loaded = self.store.get(workout_id)
        if loaded is None:
            raise NotFoundError(workout_id)
        return loaded

    def build(
        self,
        base_workout: BaseWorkout,
        profile: UserProfile,
        history: Optional[Sequence[PerformanceMetrics]] = None,
    ) -> AdaptiveWorkoutConfig:
        """Create and persist the adaptive config for a workout.

        Args:
            base_workout: Workout the user is starting
            profile: User fitness level, limitations and equipment
            history: Recent sessions, most recent first. Defaults to the
                stored history for this workout.

        Raises:
            ConfigurationError: If the workout has no exercises
        """
        if not base_workout.exercises:
            raise ConfigurationError(f"Workout '{base_workout.id}' has no exercises")

        with self._lock_for(base_workout.id):
            if history is None:
                history = self.store.get_history(base_workout.id)

            now = self.clock()
            difficulty = self.difficulty_model.calculate(profile.fitness_level, history)
            modifications = personalize(base_workout, profile)

            workout_config = AdaptiveWorkoutConfig(
                id=uuid.uuid4().hex[:12],
                base_workout=base_workout,
                difficulty=difficulty,
                personalized_modifications=tuple(modifications),
                progression_plan=seed_progression_plan(profile, now=now),
                adaptations=(),
                last_performance=history[0] if history else PerformanceMetrics.default(base_workout.id, now),
            )

            existing = self.store.get(base_workout.id)
            if existing is None:
                self.store.put(base_workout.id, workout_config)
            else:
                # Rebuilding keeps the adaptation log and the scheduler-owned plan
                previous, version = existing
                workout_config = replace(
                    workout_config,
                    id=previous.id,
                    adaptations=previous.adaptations,
                    progression_plan=previous.progression_plan,
                )
                self.store.put(base_workout.id, workout_config, expected_version=version)

        self.logger.info(
            f"Built adaptive workout {base_workout.id}: {difficulty.level.value}, "
            f"{len(modifications)} pending modifications"
        )
        return workout_config

    def apply_live_update(self, workout_id: str, update: PerformanceUpdate) -> List[WorkoutAdaptation]:
        """Evaluate live metrics and persist any adaptations they fire.

        Raises:
            NotFoundError: If no config exists for the workout
        """
        with self._lock_for(workout_id):
            workout_config, version = self._load(workout_id)
            updated, adaptations = self.monitor.apply(workout_config, update, now=self.clock())
            if adaptations:
                self.store.put(workout_id, updated, expected_version=version)
        return adaptations

    def close_session(self, workout_id: str, final_metrics: PerformanceMetrics) -> ProgressionPlan:
        """Record a finished session and roll the progression plan forward.

        Raises:
            NotFoundError: If no config exists for the workout
            ConcurrencyError: If the config changed since it was loaded. Nothing
                is recorded, so the call can be retried as is.
        """
        with self._lock_for(workout_id):
            workout_config, version = self._load(workout_id)
            # Window as it will stand once this session is recorded
            previous = self.store.get_history(workout_id, limit=self.store.history_limit - 1)
            history = [final_metrics] + previous

            decision = self.scheduler.update(
                workout_config.progression_plan, final_metrics, history, now=self.clock()
            )
            updated = replace(
                workout_config,
                progression_plan=decision.plan,
                last_performance=final_metrics,
            )
            self.store.record_session(workout_id, final_metrics, updated, expected_version=version)

        self.logger.info(f"Closed session for {workout_id}: {decision.state.value}")
        return decision.plan

    def apply_modification(self, workout_id: str, exercise_id: str) -> AdaptiveWorkoutConfig:
        """Mark pending modifications for an exercise as applied."""
        with self._lock_for(workout_id):
            workout_config, version = self._load(workout_id)
            modifications = tuple(
                replace(m, applied=True) if m.exercise_id == exercise_id else m
                for m in workout_config.personalized_modifications
            )
            updated = replace(workout_config, personalized_modifications=modifications)
            self.store.put(workout_id, updated, expected_version=version)
        return updated

    def get_config(self, workout_id: str) -> AdaptiveWorkoutConfig:
        return self._load(workout_id)[0]

    def suggest_substitutions(
        self,
        exercise: Exercise,
        reason: SubstitutionReason,
        profile: UserProfile,
        catalog: Iterable[Exercise],
    ) -> List[Exercise]:
        return self.ranker.rank(exercise, reason, profile, catalog)

    def calculate_rest(
        self,
        exercise: Exercise,
        previous_set: SetPerformance,
        overrides: Optional[dict] = None,
    ) -> SmartRestTimer:
        return self.rest_calculator.calculate(exercise, previous_set, overrides, now=self.clock())

    def analyze_session(self, metrics: PerformanceMetrics) -> PerformanceReport:
        return self.analyzer.analyze(metrics)

    def performance_trends(self, workout_id: str) -> List[PerformanceTrend]:
        return self.analyzer.trends(self.store.get_history(workout_id))

    def recommend_intensity(
        self,
        workout_id: str,
        sleep_quality: float = 5,
        stress_level: float = 5,
    ) -> IntensityTarget:
        """Intensity target for the next session of a workout.

        Uses the composite fatigue of the last recorded session and the
        completion trend over the stored history.
        """
        workout_config = self.get_config(workout_id)
        trends = {t.metric: t.direction for t in self.performance_trends(workout_id)}
        return predict_optimal_intensity(
            workout_config.last_performance.fatigue.composite(),
            trends.get("completion", TrendDirection.PLATEAUING),
            sleep_quality,
            stress_level,
        )
