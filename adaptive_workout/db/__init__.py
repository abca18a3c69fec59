"""Database module for the adaptive workout engine."""

from .database import Database, get_db
from .models import AdaptiveConfigRecord, PerformanceRecord
from .store import PerformanceStore

__all__ = ["Database", "get_db", "AdaptiveConfigRecord", "PerformanceRecord", "PerformanceStore"]
