"""Configuration management for the adaptive workout engine."""

import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./adaptive_workout.db")

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HISTORY_LIMIT: int = int(os.getenv("HISTORY_LIMIT", "10"))  # sessions kept for trend analysis
    SQLITE_BUSY_TIMEOUT: float = float(os.getenv("SQLITE_BUSY_TIMEOUT", "30"))  # seconds a writer waits for a lock

    # Difficulty model (current reference heuristics)
    DIFFICULTY_INCREASE: float = float(os.getenv("DIFFICULTY_INCREASE", "0.1"))
    DIFFICULTY_DECREASE: float = float(os.getenv("DIFFICULTY_DECREASE", "0.15"))
    COASTING_COMPLETION: float = float(os.getenv("COASTING_COMPLETION", "0.9"))
    COASTING_RPE: float = float(os.getenv("COASTING_RPE", "7"))
    OVERREACHING_COMPLETION: float = float(os.getenv("OVERREACHING_COMPLETION", "0.7"))
    OVERREACHING_RPE: float = float(os.getenv("OVERREACHING_RPE", "8.5"))

    DIFFICULTY_BASE_TABLE = {
        "beginner": {"intensity": 0.6, "volume": 0.8, "complexity": 0.4},
        "intermediate": {"intensity": 0.75, "volume": 1.0, "complexity": 0.6},
        "advanced": {"intensity": 0.85, "volume": 1.2, "complexity": 0.8},
    }

    # Rest timer
    MIN_REST_SECONDS: int = int(os.getenv("MIN_REST_SECONDS", "30"))
    MAX_REST_SECONDS: int = int(os.getenv("MAX_REST_SECONDS", "300"))
    DEFAULT_MUSCLE_FATIGUE: float = float(os.getenv("DEFAULT_MUSCLE_FATIGUE", "0.5"))

    # Seconds, keyed by exercise type then rep-range intensity
    BASE_REST_TIMES = {
        "compound": {"high": 180, "medium": 120, "low": 90},
        "isolation": {"high": 120, "medium": 90, "low": 60},
        "cardio": {"high": 60, "medium": 45, "low": 30},
    }

    # Live adaptation triggers
    FATIGUE_TRIGGER: float = float(os.getenv("FATIGUE_TRIGGER", "7"))
    HEART_RATE_TRIGGER: float = float(os.getenv("HEART_RATE_TRIGGER", "180"))
    COMPLETION_TRIGGER: float = float(os.getenv("COMPLETION_TRIGGER", "0.6"))

    # Progression scheduling
    DELOAD_FACTOR: float = float(os.getenv("DELOAD_FACTOR", "0.85"))
    DELOAD_INCREMENT_SCALE: float = float(os.getenv("DELOAD_INCREMENT_SCALE", "0.7"))
    READINESS_COMPLETION: float = float(os.getenv("READINESS_COMPLETION", "0.85"))
    READINESS_RPE: float = float(os.getenv("READINESS_RPE", "8"))
    PROGRESSION_INTERVAL_DAYS: int = int(os.getenv("PROGRESSION_INTERVAL_DAYS", "7"))
    PERCENTAGE_INCREMENT: float = float(os.getenv("PERCENTAGE_INCREMENT", "0.025"))

    # Substitution ranking
    SUBSTITUTION_LIMIT: int = int(os.getenv("SUBSTITUTION_LIMIT", "5"))

    @classmethod
    def get_base_difficulty(cls, fitness_level: str) -> dict:
        """Get the base difficulty triplet for a fitness level."""
        return cls.DIFFICULTY_BASE_TABLE.get(fitness_level, cls.DIFFICULTY_BASE_TABLE["intermediate"])

    @classmethod
    def get_base_rest_time(cls, exercise_type: str, intensity: str) -> int:
        """Get base rest time in seconds for an exercise type and rep range."""
        return cls.BASE_REST_TIMES[exercise_type][intensity]

    @classmethod
    def validate(cls) -> bool:
        """Validate threshold configuration."""
        if cls.MIN_REST_SECONDS > cls.MAX_REST_SECONDS:
            raise ValueError("MIN_REST_SECONDS must not exceed MAX_REST_SECONDS")
        if not 0 < cls.DELOAD_FACTOR <= 1:
            raise ValueError("DELOAD_FACTOR must be in (0, 1]")
        if cls.HISTORY_LIMIT < 4:
            raise ValueError("HISTORY_LIMIT must be at least 4 for deload detection")
        return True


config = Config()
