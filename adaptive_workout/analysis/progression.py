"""Progressive overload scheduling.

Each closed session moves the progression plan through one of three states:

- DELOADED: completion over the two most recent sessions fell by more
  than the plan's ``deload_threshold`` relative to the two sessions
  before them. Increments are scaled down and ``last_deload`` is stamped.
- PROGRESSING: the last three sessions were completed comfortably. The
  next progression is scheduled one interval from now.
- HOLD: anything else, including too little history. The plan is
  returned unchanged.

There is no terminal state; the cycle repeats every session.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Sequence

import pandas as pd

from ..config import config
from .models import PerformanceMetrics, ProgressionPlan, ProgressionType, clamp


class ProgressionState(Enum):
    HOLD = "hold"
    PROGRESSING = "progressing"
    DELOADED = "deloaded"


@dataclass(frozen=True)
class ProgressionDecision:
    state: ProgressionState
    plan: ProgressionPlan


def history_frame(history: Sequence[PerformanceMetrics]) -> pd.DataFrame:
    """Tabulate a history window (most recent first) with clamped telemetry."""
    return pd.DataFrame({
        'date': [p.date for p in history],
        'completion': [clamp(p.completion_rate, 0, 1) for p in history],
        'rpe': [clamp(p.perceived_exertion, 1, 10) for p in history],
        'volume': [p.total_volume() for p in history],
    })


class ProgressionScheduler:
    """Decides progression, hold or deload from a session history window."""

    def __init__(
        self,
        deload_factor: float = config.DELOAD_FACTOR,
        deload_scale: float = config.DELOAD_INCREMENT_SCALE,
        readiness_completion: float = config.READINESS_COMPLETION,
        readiness_rpe: float = config.READINESS_RPE,
        max_session_rpe: float = config.OVERREACHING_RPE,
        interval_days: int = config.PROGRESSION_INTERVAL_DAYS,
        percentage_increment: float = config.PERCENTAGE_INCREMENT,
    ):
        self.deload_factor = deload_factor
        self.deload_scale = deload_scale
        self.readiness_completion = readiness_completion
        self.readiness_rpe = readiness_rpe
        self.max_session_rpe = max_session_rpe
        self.interval_days = interval_days
        self.percentage_increment = percentage_increment
        self.logger = logging.getLogger(__name__)

    def deload_needed(
        self,
        history: Sequence[PerformanceMetrics],
        deload_threshold: Optional[float] = None,
    ) -> bool:
        """True when recent completion dropped below the deload factor.

        Needs at least four sessions: the two most recent are compared
        against the two before them.

        Args:
            history: Sessions, most recent first
            deload_threshold: Tolerated relative drop, usually the plan's
                ``deload_threshold``. Defaults to ``1 - deload_factor``.
        """
        factor = self.deload_factor if deload_threshold is None else 1 - deload_threshold
        if len(history) < 4:
            return False

        frame = history_frame(history[:4])
        recent = frame['completion'].iloc[:2].mean()
        earlier = frame['completion'].iloc[2:4].mean()
        return bool(recent < earlier * factor)

    def progression_ready(self, history: Sequence[PerformanceMetrics]) -> bool:
        """True when the last three sessions were completed comfortably.

        Any single session above ``max_session_rpe`` blocks progression
        even if the window average is low enough.
        """
        if len(history) < 3:
            return False

        window = history_frame(history[:3])
        return bool(
            window['completion'].mean() > self.readiness_completion
            and window['rpe'].mean() < self.readiness_rpe
            and window['rpe'].max() <= self.max_session_rpe
        )

    def deload(self, plan: ProgressionPlan, now: datetime) -> ProgressionPlan:
        params = plan.parameters
        return replace(
            plan,
            parameters=replace(
                params,
                weight_increase=params.weight_increase * self.deload_scale,
                rep_increase=params.rep_increase * self.deload_scale,
            ),
            last_deload=now,
        )

    def progress(self, plan: ProgressionPlan, session: PerformanceMetrics, now: datetime) -> ProgressionPlan:
        params = plan.parameters
        if plan.type == ProgressionType.PERCENTAGE_BASED:
            heaviest = session.heaviest_weight()
            if heaviest:
                params = replace(params, weight_increase=round(heaviest * self.percentage_increment, 2))

        return replace(
            plan,
            parameters=params,
            next_progression=now + timedelta(days=self.interval_days),
        )

    def update(
        self,
        plan: ProgressionPlan,
        session: PerformanceMetrics,
        history: Sequence[PerformanceMetrics],
        now: Optional[datetime] = None,
    ) -> ProgressionDecision:
        """Roll the plan forward after a session.

        Args:
            plan: Current progression plan
            session: The just-finalized session
            history: Retained window, most recent first, including ``session``
            now: Clock for deload and scheduling timestamps

        Returns:
            ProgressionDecision holding the resulting state and plan
        """
        now = now or datetime.utcnow()

        if self.deload_needed(history, plan.parameters.deload_threshold):
            self.logger.info(f"Deload triggered for workout {session.workout_id}")
            return ProgressionDecision(ProgressionState.DELOADED, self.deload(plan, now))

        if self.progression_ready(history):
            self.logger.info(f"Progression scheduled for workout {session.workout_id}")
            return ProgressionDecision(ProgressionState.PROGRESSING, self.progress(plan, session, now))

        return ProgressionDecision(ProgressionState.HOLD, plan)
