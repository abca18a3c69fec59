"""Tests for the command-line interface."""

import json
import pytest
from click.testing import CliRunner
from adaptive_workout.cli import cli
from adaptive_workout.db import Database

WORKOUT = {
    'id': "leg_day",
    'name': "Leg Day",
    'exercises': [
        {'id': "back_squat", 'name': "Back Squat",
         'muscle_groups': ["quads", "glutes", "hamstrings"], 'equipment': ["barbell"], 'reps': 5},
        {'id': "knee_extension", 'name': "Knee Extension", 'muscle_groups': ["quads"]},
    ],
}
PROFILE = {
    'fitness_level': "intermediate",
    'physical_limitations': ["knee pain"],
    'available_equipment': ["barbell"],
}
CATALOG = [
    {'id': "walking_lunge", 'name': "Walking Lunge", 'muscle_groups': ["quads", "glutes"]},
    {'id': "curl", 'name': "Biceps Curl", 'muscle_groups': ["biceps"]},
]
SESSION = {
    'workout_id': "leg_day",
    'date': "2026-03-02T18:00:00",
    'duration': 3600,
    'completion_rate': 0.95,
    'perceived_exertion': 6,
}


@pytest.fixture
def db(monkeypatch):
    database = Database("sqlite:///:memory:")
    database.create_tables()
    monkeypatch.setattr("adaptive_workout.cli.get_db", lambda: database)
    yield database
    database.close()


@pytest.fixture
def files(tmp_path):
    paths = {}
    for name, data in [
        ("workout", WORKOUT),
        ("profile", PROFILE),
        ("exercise", WORKOUT['exercises'][0]),
        ("catalog", CATALOG),
        ("session", SESSION),
    ]:
        path = tmp_path / f"{name}.json"
        path.write_text(json.dumps(data))
        paths[name] = str(path)
    return paths


class TestCli:
    """Test CLI commands against an in-memory database."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_init_db(self, db):
        """Test database initialization."""
        result = self.runner.invoke(cli, ["init-db"])
        assert result.exit_code == 0
        assert "Database initialized" in result.output

    def test_build(self, db, files):
        """Test building a config from JSON files."""
        result = self.runner.invoke(cli, ["build", "--workout", files["workout"], "--profile", files["profile"]])

        assert result.exit_code == 0, result.output
        assert "Leg Day" in result.output
        assert "knee_extension" in result.output
        assert "double_progression" in result.output

    def test_update_unknown_workout(self, db):
        """Test updating a missing workout fails cleanly."""
        result = self.runner.invoke(cli, ["update", "missing", "--heart-rate", "190"])
        assert result.exit_code == 1
        assert "No adaptive config" in result.output

    def test_update_fires_adaptation(self, db, files):
        """Test a live update that triggers an adaptation."""
        self.runner.invoke(cli, ["build", "--workout", files["workout"], "--profile", files["profile"]])
        result = self.runner.invoke(cli, ["update", "leg_day", "--heart-rate", "190"])

        assert result.exit_code == 0, result.output
        assert "increase_rest" in result.output

    def test_update_without_adaptation(self, db, files):
        """Test a quiet live update."""
        self.runner.invoke(cli, ["build", "--workout", files["workout"], "--profile", files["profile"]])
        result = self.runner.invoke(cli, ["update", "leg_day", "--completion", "0.9"])
        assert "No adaptation needed" in result.output

    def test_close_prints_report(self, db, files):
        """Test closing a session prints its report."""
        self.runner.invoke(cli, ["build", "--workout", files["workout"], "--profile", files["profile"]])
        result = self.runner.invoke(cli, ["close", "leg_day", "--metrics", files["session"]])

        assert result.exit_code == 0, result.output
        assert "Session score" in result.output
        assert "74/100" in result.output

    def test_rest(self, files):
        """Test rest calculation output."""
        result = self.runner.invoke(cli, ["rest", "--exercise", files["exercise"], "--reps", "5", "--rpe", "10"])

        assert result.exit_code == 0, result.output
        assert "234s" in result.output
        assert "compound" in result.output

    def test_rest_recommendations(self, files):
        """Test rest recommendations are listed."""
        result = self.runner.invoke(cli, [
            "rest", "--exercise", files["exercise"], "--reps", "5", "--rpe", "7",
            "--hr-recovery", "10", "--muscle-fatigue", "0.9",
        ])
        assert "extend_rest" in result.output
        assert "active_recovery" in result.output

    def test_substitute(self, files):
        """Test substitution ranking output."""
        result = self.runner.invoke(cli, [
            "substitute", "--exercise", files["exercise"],
            "--catalog", files["catalog"], "--profile", files["profile"],
        ])

        assert result.exit_code == 0, result.output
        assert "Walking Lunge" in result.output
        assert "Biceps Curl" not in result.output

    def test_trends_without_history(self, db):
        """Test trends with no recorded sessions."""
        result = self.runner.invoke(cli, ["trends", "leg_day"])
        assert "Not enough sessions" in result.output

    def test_intensity(self, db, files):
        """Test intensity recommendation output."""
        self.runner.invoke(cli, ["build", "--workout", files["workout"], "--profile", files["profile"]])
        result = self.runner.invoke(cli, ["intensity", "leg_day"])

        assert result.exit_code == 0, result.output
        assert "7.0/10" in result.output
        assert "Z4" in result.output

    def test_intensity_unknown_workout(self, db):
        """Test intensity for a missing workout fails cleanly."""
        result = self.runner.invoke(cli, ["intensity", "missing"])
        assert result.exit_code == 1
