"""Tests for the versioned performance store."""

import pytest
from datetime import datetime, timedelta
from dataclasses import replace
from sqlalchemy.pool import StaticPool
from adaptive_workout.analysis.models import (
    AdaptiveWorkoutConfig,
    BaseWorkout,
    DifficultyLevel,
    Exercise,
    FatigueLevel,
    FitnessLevel,
    PerformanceMetrics,
    ProgressionParameters,
    ProgressionPlan,
    ProgressionType,
)
from adaptive_workout.db import Database, PerformanceRecord, PerformanceStore
from adaptive_workout.errors import ConcurrencyError

NOW = datetime(2026, 3, 1, 9, 30)


def make_config(config_id="cfg1", workout_id="leg_day"):
    workout = BaseWorkout(
        id=workout_id,
        name="Leg Day",
        exercises=(Exercise(id="squat", name="Squat", muscle_groups=frozenset({"quads", "glutes"})),),
    )
    return AdaptiveWorkoutConfig(
        id=config_id,
        base_workout=workout,
        difficulty=DifficultyLevel(FitnessLevel.BEGINNER, 0.6, 0.8, 0.4),
        personalized_modifications=(),
        progression_plan=ProgressionPlan(
            type=ProgressionType.LINEAR,
            parameters=ProgressionParameters(),
            next_progression=NOW + timedelta(days=7),
        ),
        adaptations=(),
        last_performance=PerformanceMetrics.default(workout_id, NOW),
    )


def make_session(completion, day):
    return PerformanceMetrics(
        workout_id="leg_day",
        date=NOW + timedelta(days=day),
        duration=3000,
        fatigue=FatigueLevel(),
        completion_rate=completion,
        perceived_exertion=7,
    )


class TestPerformanceStore:
    """Test config versioning and history retention."""

    def setup_method(self):
        """Set up test fixtures."""
        self.db = Database("sqlite:///:memory:")
        self.db.create_tables()
        self.store = PerformanceStore(self.db, history_limit=10)

    def teardown_method(self):
        self.db.close()

    def test_get_missing(self):
        """Test loading a missing config."""
        assert self.store.get("leg_day") is None

    def test_insert_and_load(self):
        """Test inserting and loading a config."""
        workout_config = make_config()
        assert self.store.put("leg_day", workout_config) == 1

        loaded, version = self.store.get("leg_day")
        assert version == 1
        assert loaded == workout_config

    def test_double_insert_conflicts(self):
        """Test a second insert conflicts."""
        self.store.put("leg_day", make_config())
        with pytest.raises(ConcurrencyError) as exc_info:
            self.store.put("leg_day", make_config("cfg2"))
        assert exc_info.value.actual_version == 1

    def test_versioned_update(self):
        """Test an update bumps the version."""
        self.store.put("leg_day", make_config())
        updated = replace(make_config(), difficulty=DifficultyLevel(FitnessLevel.BEGINNER, 0.7, 0.9, 0.5))
        assert self.store.put("leg_day", updated, expected_version=1) == 2
        loaded, version = self.store.get("leg_day")
        assert version == 2
        assert loaded.difficulty.intensity == 0.7

    def test_stale_version_conflicts(self):
        """Test a stale version conflicts."""
        self.store.put("leg_day", make_config())
        self.store.put("leg_day", make_config(), expected_version=1)

        with pytest.raises(ConcurrencyError) as exc_info:
            self.store.put("leg_day", make_config("stale"), expected_version=1)

        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2
        # The losing write left nothing behind
        assert self.store.get("leg_day")[0].id == "cfg1"

    def test_update_of_missing_config_conflicts(self):
        """Test updating a missing config conflicts."""
        with pytest.raises(ConcurrencyError) as exc_info:
            self.store.put("leg_day", make_config(), expected_version=1)
        assert exc_info.value.actual_version is None

    def test_history_is_most_recent_first(self):
        """Test history order."""
        for day, completion in enumerate([0.7, 0.8, 0.9]):
            self.store.append_history("leg_day", make_session(completion, day))

        history = self.store.get_history("leg_day")
        assert [s.completion_rate for s in history] == [0.9, 0.8, 0.7]

    def test_history_is_pruned(self):
        """Test history is pruned to the limit."""
        for day in range(12):
            self.store.append_history("leg_day", make_session(0.5 + day * 0.01, day))

        history = self.store.get_history("leg_day")
        assert len(history) == 10
        assert history[0].date == NOW + timedelta(days=11)
        assert history[-1].date == NOW + timedelta(days=2)

        with self.db.get_session() as session:
            assert session.query(PerformanceRecord).count() == 10

    def test_history_limit_argument(self):
        """Test the limit argument."""
        for day in range(5):
            self.store.append_history("leg_day", make_session(0.8, day))
        assert len(self.store.get_history("leg_day", limit=3)) == 3

    def test_history_is_per_workout(self):
        """Test history is kept per workout."""
        self.store.append_history("leg_day", make_session(0.8, 0))
        assert self.store.get_history("push_day") == []

    def test_history_limit_zero(self):
        """An explicit zero limit returns no sessions."""
        self.store.append_history("leg_day", make_session(0.8, 0))
        assert self.store.get_history("leg_day", limit=0) == []

    def test_record_session(self):
        """Recording a session appends history and bumps the config version."""
        self.store.put("leg_day", make_config())
        session = make_session(0.9, 1)
        updated = replace(make_config(), last_performance=session)

        assert self.store.record_session("leg_day", session, updated, expected_version=1) == 2
        assert self.store.get_history("leg_day") == [session]
        assert self.store.get("leg_day")[0].last_performance == session

    def test_record_session_conflict_rolls_back_history(self):
        """A stale version writes neither the history row nor the config."""
        self.store.put("leg_day", make_config())
        self.store.put("leg_day", make_config("other"), expected_version=1)
        session = make_session(0.9, 1)

        with pytest.raises(ConcurrencyError) as exc_info:
            self.store.record_session("leg_day", session, make_config(), expected_version=1)

        assert exc_info.value.actual_version == 2
        assert self.store.get_history("leg_day") == []
        assert self.store.get("leg_day")[0].id == "other"


class TestDatabase:
    """Test connection pooling per database URL."""

    def test_memory_database_shares_one_connection(self):
        """In-memory SQLite keeps a single connection so every session sees the tables."""
        db = Database("sqlite:///:memory:")
        try:
            assert isinstance(db.engine.pool, StaticPool)
        finally:
            db.close()

    def test_file_database_pools_connections(self, tmp_path):
        """File-backed SQLite gives each thread its own connection."""
        db = Database(f"sqlite:///{tmp_path / 'store.db'}")
        try:
            assert not isinstance(db.engine.pool, StaticPool)
            db.create_tables()
            store = PerformanceStore(db)
            store.put("leg_day", make_config())
            assert store.get("leg_day")[1] == 1
        finally:
            db.close()
