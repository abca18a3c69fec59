"""Build-time personalization: injury and equipment conflict scans."""

from datetime import datetime, timedelta
from typing import List, Optional

from ..config import config
from .models import (
    BaseWorkout,
    Exercise,
    FitnessLevel,
    ModificationReason,
    ModificationType,
    PersonalizedModification,
    ProgressionParameters,
    ProgressionPlan,
    ProgressionType,
    UserProfile,
)


def conflicts_with_limitation(exercise: Exercise, limitation: str) -> bool:
    """Match the first word of a limitation against the exercise id or name."""
    words = limitation.lower().split()
    if not words:
        return False
    keyword = words[0]
    return keyword in exercise.id.lower() or keyword in exercise.name.lower()


def personalize(workout: BaseWorkout, profile: UserProfile) -> List[PersonalizedModification]:
    """Scan a workout for injury and equipment conflicts.

    Every modification is returned pending (``applied=False``).
    """
    modifications = []

    for exercise in workout.exercises:
        for limitation in profile.physical_limitations:
            if conflicts_with_limitation(exercise, limitation):
                modifications.append(PersonalizedModification(
                    exercise_id=exercise.id,
                    modification=ModificationType.SUBSTITUTE_EXERCISE,
                    reason=ModificationReason.INJURY_HISTORY,
                    parameters={'limitation': limitation, 'safetyLevel': 'high'},
                ))

        missing = exercise.equipment - profile.available_equipment
        if missing:
            modifications.append(PersonalizedModification(
                exercise_id=exercise.id,
                modification=ModificationType.SUBSTITUTE_EXERCISE,
                reason=ModificationReason.EQUIPMENT_UNAVAILABLE,
                parameters={'missingEquipment': sorted(missing)},
            ))

    return modifications


def seed_progression_plan(profile: UserProfile, now: Optional[datetime] = None) -> ProgressionPlan:
    """Fresh progression plan for a user's fitness level."""
    now = now or datetime.utcnow()
    beginner = profile.fitness_level == FitnessLevel.BEGINNER

    return ProgressionPlan(
        type=ProgressionType.LINEAR if beginner else ProgressionType.DOUBLE_PROGRESSION,
        parameters=ProgressionParameters(
            weight_increase=2.5 if beginner else 5.0,
            rep_increase=1,
            frequency_adjustment=0,
            deload_threshold=1 - config.DELOAD_FACTOR,
        ),
        next_progression=now + timedelta(days=config.PROGRESSION_INTERVAL_DAYS),
    )
