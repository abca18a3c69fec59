"""Tests for live adaptation rules."""

import pytest
from datetime import datetime, timedelta
from adaptive_workout.analysis.adaptation_monitor import AdaptationMonitor
from adaptive_workout.analysis.models import (
    AdaptationAction,
    AdaptationTrigger,
    AdaptiveWorkoutConfig,
    BaseWorkout,
    DifficultyLevel,
    Exercise,
    FatigueLevel,
    FitnessLevel,
    PerformanceMetrics,
    PerformanceUpdate,
    ProgressionParameters,
    ProgressionPlan,
    ProgressionType,
    Severity,
)

NOW = datetime(2026, 3, 1, 10, 0)


def make_config():
    workout = BaseWorkout(
        id="push_day",
        name="Push Day",
        exercises=(Exercise(id="bench", name="Bench Press", muscle_groups=frozenset({"chest"})),),
    )
    return AdaptiveWorkoutConfig(
        id="cfg1",
        base_workout=workout,
        difficulty=DifficultyLevel(FitnessLevel.INTERMEDIATE, 0.75, 1.0, 0.6),
        personalized_modifications=(),
        progression_plan=ProgressionPlan(
            type=ProgressionType.DOUBLE_PROGRESSION,
            parameters=ProgressionParameters(weight_increase=5.0),
            next_progression=NOW + timedelta(days=7),
        ),
        adaptations=(),
        last_performance=PerformanceMetrics.default("push_day", NOW),
    )


class TestAdaptationMonitor:
    """Test adaptation rule evaluation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.monitor = AdaptationMonitor()

    def test_high_fatigue_reduces_intensity(self):
        """Test fatigue above 7 reduces intensity."""
        adaptations = self.monitor.evaluate(PerformanceUpdate(fatigue=FatigueLevel(overall=8)), now=NOW)

        assert len(adaptations) == 1
        adaptation = adaptations[0]
        assert adaptation.trigger == AdaptationTrigger.FATIGUE
        assert adaptation.modification == AdaptationAction.REDUCE_INTENSITY
        assert adaptation.severity == Severity.MODERATE
        assert adaptation.confidence == pytest.approx(0.85)
        assert adaptation.parameters == {'intensityReduction': 0.15}
        assert adaptation.timestamp == NOW

    def test_high_heart_rate_increases_rest(self):
        """Test heart rate above 180 lengthens rest."""
        adaptations = self.monitor.evaluate(PerformanceUpdate(avg_heart_rate=185), now=NOW)

        assert len(adaptations) == 1
        assert adaptations[0].trigger == AdaptationTrigger.HEART_RATE_HIGH
        assert adaptations[0].modification == AdaptationAction.INCREASE_REST
        assert adaptations[0].severity == Severity.MINOR
        assert adaptations[0].confidence == pytest.approx(0.9)
        assert adaptations[0].parameters == {'restIncrease': 30}

    def test_low_completion_substitutes_exercise(self):
        """Test completion below 0.6 suggests a substitution."""
        adaptations = self.monitor.evaluate(PerformanceUpdate(completion_rate=0.5), now=NOW)

        assert len(adaptations) == 1
        assert adaptations[0].trigger == AdaptationTrigger.PERFORMANCE_DROP
        assert adaptations[0].modification == AdaptationAction.SUBSTITUTE_EXERCISE
        assert adaptations[0].severity == Severity.MAJOR
        assert adaptations[0].confidence == pytest.approx(0.75)
        assert adaptations[0].parameters == {'targetMuscleGroup': 'maintain', 'difficultyReduction': 0.3}

    def test_thresholds_are_strict(self):
        """Values exactly at a threshold do not fire."""
        update = PerformanceUpdate(
            fatigue=FatigueLevel(overall=7), avg_heart_rate=180, completion_rate=0.6
        )
        assert self.monitor.evaluate(update, now=NOW) == []

    def test_rules_fire_independently(self):
        """Test all rules can fire on one update."""
        update = PerformanceUpdate(
            fatigue=FatigueLevel(overall=9), avg_heart_rate=190, completion_rate=0.4
        )
        triggers = [a.trigger for a in self.monitor.evaluate(update, now=NOW)]
        assert triggers == [
            AdaptationTrigger.FATIGUE,
            AdaptationTrigger.HEART_RATE_HIGH,
            AdaptationTrigger.PERFORMANCE_DROP,
        ]

    def test_empty_update_fires_nothing(self):
        """Test an empty update produces no adaptations."""
        assert self.monitor.evaluate(PerformanceUpdate(), now=NOW) == []

    def test_apply_appends_without_touching_plan(self):
        """Test applied adaptations are appended and the plan is kept."""
        workout_config = make_config()
        updated, adaptations = self.monitor.apply(
            workout_config, PerformanceUpdate(avg_heart_rate=200), now=NOW
        )

        assert len(adaptations) == 1
        assert updated.adaptations == tuple(adaptations)
        assert updated.difficulty == workout_config.difficulty
        assert updated.progression_plan == workout_config.progression_plan
        # Original snapshot is untouched
        assert workout_config.adaptations == ()

    def test_apply_without_adaptations_returns_same_config(self):
        """Test applying nothing returns the same config."""
        workout_config = make_config()
        updated, adaptations = self.monitor.apply(workout_config, PerformanceUpdate(completion_rate=0.9))
        assert adaptations == []
        assert updated is workout_config
