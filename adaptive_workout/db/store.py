"""Keyed storage of adaptive configs and performance history."""

import json
import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..analysis.models import AdaptiveWorkoutConfig, PerformanceMetrics
from ..config import config
from ..errors import ConcurrencyError
from .database import Database, get_db
from .models import AdaptiveConfigRecord, PerformanceRecord

logger = logging.getLogger(__name__)


class PerformanceStore:
    """Durable store for per-workout configs and rolling session history.

    Configs carry a version number. ``put`` only succeeds when the caller's
    expected version matches the stored one, so a lost update surfaces as
    ConcurrencyError instead of silently overwriting another writer.
    """

    def __init__(self, db: Optional[Database] = None, history_limit: int = config.HISTORY_LIMIT):
        self.db = db or get_db()
        self.history_limit = history_limit

    def get(self, workout_id: str) -> Optional[Tuple[AdaptiveWorkoutConfig, int]]:
        """Load a config and its version, or None if absent."""
        with self.db.get_session() as session:
            record = session.get(AdaptiveConfigRecord, workout_id)
            if record is None:
                return None
            return AdaptiveWorkoutConfig.from_dict(json.loads(record.payload)), record.version

    def put(
        self,
        workout_id: str,
        workout_config: AdaptiveWorkoutConfig,
        expected_version: Optional[int] = None,
    ) -> int:
        """Insert or update a config.

        Args:
            workout_id: Storage key
            workout_config: Config snapshot to persist
            expected_version: Version read by the caller; None to insert

        Returns:
            The new version number

        Raises:
            ConcurrencyError: If the stored version differs from expected_version
        """
        if expected_version is None:
            payload = json.dumps(workout_config.to_dict())
            try:
                with self.db.get_session() as session:
                    existing = session.get(AdaptiveConfigRecord, workout_id)
                    if existing is not None:
                        raise ConcurrencyError(workout_id, None, existing.version)
                    session.add(AdaptiveConfigRecord(
                        workout_id=workout_id,
                        config_id=workout_config.id,
                        version=1,
                        payload=payload,
                    ))
            except IntegrityError as e:
                raise ConcurrencyError(workout_id, None, self._current_version(workout_id)) from e
            return 1

        with self.db.get_session() as session:
            new_version = self._update_config(session, workout_id, workout_config, expected_version)
        return new_version

    def append_history(self, workout_id: str, metrics: PerformanceMetrics) -> None:
        """Append a session and prune history beyond the retention limit."""
        with self.db.get_session() as session:
            self._add_history(session, workout_id, metrics)

    def record_session(
        self,
        workout_id: str,
        metrics: PerformanceMetrics,
        workout_config: AdaptiveWorkoutConfig,
        expected_version: int,
    ) -> int:
        """Append a finished session and update its config in one transaction.

        On a version mismatch nothing is written, so the caller can reload
        and retry without duplicating the session in history.

        Raises:
            ConcurrencyError: If the stored version differs from expected_version
        """
        with self.db.get_session() as session:
            # History first: the insert takes the write lock before the version check
            self._add_history(session, workout_id, metrics)
            new_version = self._update_config(session, workout_id, workout_config, expected_version)
        return new_version

    def _update_config(
        self,
        session: Session,
        workout_id: str,
        workout_config: AdaptiveWorkoutConfig,
        expected_version: int,
    ) -> int:
        new_version = expected_version + 1
        result = session.execute(
            update(AdaptiveConfigRecord)
            .where(AdaptiveConfigRecord.workout_id == workout_id)
            .where(AdaptiveConfigRecord.version == expected_version)
            .values(
                payload=json.dumps(workout_config.to_dict()),
                config_id=workout_config.id,
                version=new_version,
            )
        )
        if result.rowcount != 1:
            actual = session.scalar(
                select(AdaptiveConfigRecord.version).where(AdaptiveConfigRecord.workout_id == workout_id)
            )
            # Raising inside get_session rolls the whole transaction back
            raise ConcurrencyError(workout_id, expected_version, actual)

        logger.debug(f"Stored config for {workout_id} at version {new_version}")
        return new_version

    def _add_history(self, session: Session, workout_id: str, metrics: PerformanceMetrics) -> None:
        session.add(PerformanceRecord(
            workout_id=workout_id,
            recorded_at=metrics.date,
            payload=json.dumps(metrics.to_dict()),
        ))
        session.flush()

        stale_ids = session.scalars(
            select(PerformanceRecord.id)
            .where(PerformanceRecord.workout_id == workout_id)
            .order_by(PerformanceRecord.id.desc())
            .offset(self.history_limit)
        ).all()
        for record_id in stale_ids:
            session.delete(session.get(PerformanceRecord, record_id))

    def get_history(self, workout_id: str, limit: Optional[int] = None) -> List[PerformanceMetrics]:
        """Most recent sessions first, at most ``limit`` of them."""
        with self.db.get_session() as session:
            rows = session.scalars(
                select(PerformanceRecord)
                .where(PerformanceRecord.workout_id == workout_id)
                .order_by(PerformanceRecord.id.desc())
                .limit(self.history_limit if limit is None else limit)
            ).all()
            return [PerformanceMetrics.from_dict(json.loads(row.payload)) for row in rows]

    def _current_version(self, workout_id: str) -> Optional[int]:
        with self.db.get_session() as session:
            record = session.get(AdaptiveConfigRecord, workout_id)
            return record.version if record is not None else None
