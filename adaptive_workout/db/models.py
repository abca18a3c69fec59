"""Database models for adaptive workout configs and performance history."""

from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class AdaptiveConfigRecord(Base):
    """Persisted adaptive config, one row per workout."""

    __tablename__ = "adaptive_configs"

    workout_id = Column(String(100), primary_key=True)
    config_id = Column(String(50), nullable=False)
    version = Column(Integer, nullable=False, default=1)  # optimistic-concurrency token
    payload = Column(Text, nullable=False)  # JSON serialized AdaptiveWorkoutConfig
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<AdaptiveConfigRecord(workout_id={self.workout_id}, version={self.version})>"


class PerformanceRecord(Base):
    """One session of performance metrics."""

    __tablename__ = "performance_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workout_id = Column(String(100), nullable=False, index=True)
    recorded_at = Column(DateTime, nullable=False)  # session date
    payload = Column(Text, nullable=False)  # JSON serialized PerformanceMetrics
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<PerformanceRecord(workout_id={self.workout_id}, recorded_at={self.recorded_at})>"
