"""Data model for adaptive workouts.

Every record is an immutable snapshot. Components return new snapshots via
``dataclasses.replace`` instead of mutating loaded state, and every record
round-trips through ``to_dict``/``from_dict`` for persistence.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class FitnessLevel(Enum):
    """User fitness level."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ExerciseType(Enum):
    """Rest-timer classification of an exercise."""
    COMPOUND = "compound"
    ISOLATION = "isolation"
    CARDIO = "cardio"


class TimeOfDay(Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class ModificationType(Enum):
    """Exercise-level changes a personalization can request."""
    WEIGHT_REDUCTION = "weight_reduction"
    REP_REDUCTION = "rep_reduction"
    SUBSTITUTE_EXERCISE = "substitute_exercise"
    ADD_REST = "add_rest"
    REMOVE_EXERCISE = "remove_exercise"


class ModificationReason(Enum):
    INJURY_HISTORY = "injury_history"
    EQUIPMENT_UNAVAILABLE = "equipment_unavailable"
    USER_PREFERENCE = "user_preference"
    FATIGUE_LEVEL = "fatigue_level"


class ProgressionType(Enum):
    """Progressive overload strategies."""
    LINEAR = "linear"
    DOUBLE_PROGRESSION = "double_progression"
    PERCENTAGE_BASED = "percentage_based"
    AUTOREGULATION = "autoregulation"


class AdaptationTrigger(Enum):
    """Live signals that can fire an adaptation."""
    FATIGUE = "fatigue"
    PERFORMANCE_DROP = "performance_drop"
    HEART_RATE_HIGH = "heart_rate_high"
    USER_FEEDBACK = "user_feedback"
    INJURY_RISK = "injury_risk"


class AdaptationAction(Enum):
    REDUCE_INTENSITY = "reduce_intensity"
    INCREASE_REST = "increase_rest"
    SUBSTITUTE_EXERCISE = "substitute_exercise"
    ADD_WARMUP = "add_warmup"
    END_WORKOUT = "end_workout"


class Severity(Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"


class SubstitutionReason(Enum):
    """Why a substitute exercise is being requested."""
    EQUIPMENT_UNAVAILABLE = "equipment_unavailable"
    INJURY_AVOIDANCE = "injury_avoidance"
    DIFFICULTY_ADJUSTMENT = "difficulty_adjustment"
    VARIETY = "variety"


class RecommendationType(Enum):
    EXTEND_REST = "extend_rest"
    REDUCE_REST = "reduce_rest"
    ACTIVE_RECOVERY = "active_recovery"
    HYDRATE = "hydrate"
    ADJUST_WEIGHT = "adjust_weight"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value to the closed range [low, high]."""
    return max(low, min(high, value))


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class UserProfile:
    """Read-only view of the user supplied by the user-management service."""
    fitness_level: FitnessLevel
    physical_limitations: Tuple[str, ...] = ()
    available_equipment: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict:
        return {
            'fitness_level': self.fitness_level.value,
            'physical_limitations': list(self.physical_limitations),
            'available_equipment': sorted(self.available_equipment),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "UserProfile":
        return cls(
            fitness_level=FitnessLevel(data.get('fitness_level', 'intermediate')),
            physical_limitations=tuple(data.get('physical_limitations', ())),
            available_equipment=frozenset(data.get('available_equipment', ())),
        )


@dataclass(frozen=True)
class Exercise:
    """Catalog exercise with its prescribed scheme."""
    id: str
    name: str
    muscle_groups: FrozenSet[str]
    equipment: FrozenSet[str] = frozenset()
    category: str = "strength"
    sets: int = 3
    reps: int = 10
    rest_seconds: int = 90
    difficulty: str = "intermediate"

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'muscle_groups': sorted(self.muscle_groups),
            'equipment': sorted(self.equipment),
            'category': self.category,
            'sets': self.sets,
            'reps': self.reps,
            'rest_seconds': self.rest_seconds,
            'difficulty': self.difficulty,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Exercise":
        return cls(
            id=data['id'],
            name=data.get('name', data['id']),
            muscle_groups=frozenset(data.get('muscle_groups', ())),
            equipment=frozenset(data.get('equipment', ())),
            category=data.get('category', 'strength'),
            sets=int(data.get('sets', 3)),
            reps=int(data.get('reps', 10)),
            rest_seconds=int(data.get('rest_seconds', 90)),
            difficulty=data.get('difficulty', 'intermediate'),
        )


@dataclass(frozen=True)
class BaseWorkout:
    """Ordered list of exercises a user starts from."""
    id: str
    name: str
    exercises: Tuple[Exercise, ...]

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'exercises': [ex.to_dict() for ex in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "BaseWorkout":
        return cls(
            id=data['id'],
            name=data.get('name', data['id']),
            exercises=tuple(Exercise.from_dict(ex) for ex in data.get('exercises', ())),
        )


@dataclass(frozen=True)
class DifficultyLevel:
    """Continuous difficulty factors for a workout."""
    level: FitnessLevel
    intensity: float   # 0.1 - 1.0
    volume: float      # 0.5 - 2.0
    complexity: float  # 0.1 - 1.0
    auto_adjust: bool = True

    def to_dict(self) -> Dict:
        return {
            'level': self.level.value,
            'intensity': self.intensity,
            'volume': self.volume,
            'complexity': self.complexity,
            'auto_adjust': self.auto_adjust,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "DifficultyLevel":
        return cls(
            level=FitnessLevel(data['level']),
            intensity=data['intensity'],
            volume=data['volume'],
            complexity=data['complexity'],
            auto_adjust=data.get('auto_adjust', True),
        )


@dataclass(frozen=True)
class PersonalizedModification:
    """Pending or applied exercise-level change."""
    exercise_id: str
    modification: ModificationType
    reason: ModificationReason
    parameters: Dict[str, Any] = field(default_factory=dict)
    applied: bool = False

    def to_dict(self) -> Dict:
        return {
            'exercise_id': self.exercise_id,
            'modification': self.modification.value,
            'reason': self.reason.value,
            'parameters': dict(self.parameters),
            'applied': self.applied,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "PersonalizedModification":
        return cls(
            exercise_id=data['exercise_id'],
            modification=ModificationType(data['modification']),
            reason=ModificationReason(data['reason']),
            parameters=dict(data.get('parameters', {})),
            applied=data.get('applied', False),
        )


@dataclass(frozen=True)
class ProgressionParameters:
    weight_increase: float = 2.5
    rep_increase: float = 1
    frequency_adjustment: float = 0
    deload_threshold: float = 0.15

    def to_dict(self) -> Dict:
        return {
            'weight_increase': self.weight_increase,
            'rep_increase': self.rep_increase,
            'frequency_adjustment': self.frequency_adjustment,
            'deload_threshold': self.deload_threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ProgressionParameters":
        return cls(
            weight_increase=data.get('weight_increase', 2.5),
            rep_increase=data.get('rep_increase', 1),
            frequency_adjustment=data.get('frequency_adjustment', 0),
            deload_threshold=data.get('deload_threshold', 0.15),
        )


@dataclass(frozen=True)
class ProgressionPlan:
    """Progressive overload schedule owned by the progression scheduler."""
    type: ProgressionType
    parameters: ProgressionParameters
    next_progression: datetime
    last_deload: Optional[datetime] = None

    def to_dict(self) -> Dict:
        return {
            'type': self.type.value,
            'parameters': self.parameters.to_dict(),
            'next_progression': _format_datetime(self.next_progression),
            'last_deload': _format_datetime(self.last_deload),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ProgressionPlan":
        return cls(
            type=ProgressionType(data['type']),
            parameters=ProgressionParameters.from_dict(data['parameters']),
            next_progression=_parse_datetime(data['next_progression']),
            last_deload=_parse_datetime(data.get('last_deload')),
        )


@dataclass(frozen=True)
class WorkoutAdaptation:
    """Immutable record of a live adaptation."""
    trigger: AdaptationTrigger
    modification: AdaptationAction
    severity: Severity
    parameters: Dict[str, Any]
    confidence: float  # 0-1
    timestamp: datetime

    def to_dict(self) -> Dict:
        return {
            'trigger': self.trigger.value,
            'modification': self.modification.value,
            'severity': self.severity.value,
            'parameters': dict(self.parameters),
            'confidence': self.confidence,
            'timestamp': _format_datetime(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "WorkoutAdaptation":
        return cls(
            trigger=AdaptationTrigger(data['trigger']),
            modification=AdaptationAction(data['modification']),
            severity=Severity(data['severity']),
            parameters=dict(data.get('parameters', {})),
            confidence=data['confidence'],
            timestamp=_parse_datetime(data['timestamp']),
        )


@dataclass(frozen=True)
class FatigueLevel:
    """Five fatigue sub-scores on a 1-10 scale."""
    overall: float = 5
    muscular: float = 5
    cardiovascular: float = 5
    mental: float = 5
    recovery: float = 5

    def composite(self) -> float:
        """Weighted fatigue score, 1-10. High recovery lowers the score."""
        score = (
            self.muscular * 0.3
            + self.cardiovascular * 0.2
            + self.mental * 0.2
            + (10 - self.recovery) * 0.3
        )
        return clamp(score, 1, 10)

    def to_dict(self) -> Dict:
        return {
            'overall': self.overall,
            'muscular': self.muscular,
            'cardiovascular': self.cardiovascular,
            'mental': self.mental,
            'recovery': self.recovery,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "FatigueLevel":
        return cls(
            overall=data.get('overall', 5),
            muscular=data.get('muscular', 5),
            cardiovascular=data.get('cardiovascular', 5),
            mental=data.get('mental', 5),
            recovery=data.get('recovery', 5),
        )


@dataclass(frozen=True)
class SetPerformance:
    reps: int
    rpe: float
    completed: bool = True
    set_number: int = 1
    weight: Optional[float] = None
    duration: Optional[float] = None  # seconds
    distance: Optional[float] = None  # meters

    def to_dict(self) -> Dict:
        return {
            'set_number': self.set_number,
            'reps': self.reps,
            'rpe': self.rpe,
            'completed': self.completed,
            'weight': self.weight,
            'duration': self.duration,
            'distance': self.distance,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "SetPerformance":
        return cls(
            reps=int(data['reps']),
            rpe=data['rpe'],
            completed=data.get('completed', True),
            set_number=data.get('set_number', 1),
            weight=data.get('weight'),
            duration=data.get('duration'),
            distance=data.get('distance'),
        )


@dataclass(frozen=True)
class ExercisePerformance:
    exercise_id: str
    sets: Tuple[SetPerformance, ...] = ()
    form_quality: float = 7        # 1-10
    difficulty_rating: float = 5   # 1-10
    rest_time: float = 0           # seconds

    def completed_volume(self) -> float:
        """Completed reps times weight, or reps alone for bodyweight sets."""
        return sum(
            s.reps * (s.weight if s.weight else 1)
            for s in self.sets if s.completed
        )

    def to_dict(self) -> Dict:
        return {
            'exercise_id': self.exercise_id,
            'sets': [s.to_dict() for s in self.sets],
            'form_quality': self.form_quality,
            'difficulty_rating': self.difficulty_rating,
            'rest_time': self.rest_time,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ExercisePerformance":
        return cls(
            exercise_id=data['exercise_id'],
            sets=tuple(SetPerformance.from_dict(s) for s in data.get('sets', ())),
            form_quality=data.get('form_quality', 7),
            difficulty_rating=data.get('difficulty_rating', 5),
            rest_time=data.get('rest_time', 0),
        )


@dataclass(frozen=True)
class PerformanceMetrics:
    """One session's performance, in-progress or finalized."""
    workout_id: str
    date: datetime
    duration: float  # seconds
    fatigue: FatigueLevel
    completion_rate: float      # 0-1
    perceived_exertion: float   # 1-10 RPE
    avg_heart_rate: Optional[float] = None
    max_heart_rate: Optional[float] = None
    exercise_performance: Tuple[ExercisePerformance, ...] = ()

    def total_volume(self) -> float:
        return sum(ex.completed_volume() for ex in self.exercise_performance)

    def heaviest_weight(self) -> Optional[float]:
        weights = [
            s.weight for ex in self.exercise_performance
            for s in ex.sets if s.completed and s.weight
        ]
        return max(weights) if weights else None

    def to_dict(self) -> Dict:
        return {
            'workout_id': self.workout_id,
            'date': _format_datetime(self.date),
            'duration': self.duration,
            'fatigue': self.fatigue.to_dict(),
            'completion_rate': self.completion_rate,
            'perceived_exertion': self.perceived_exertion,
            'avg_heart_rate': self.avg_heart_rate,
            'max_heart_rate': self.max_heart_rate,
            'exercise_performance': [ex.to_dict() for ex in self.exercise_performance],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "PerformanceMetrics":
        return cls(
            workout_id=data['workout_id'],
            date=_parse_datetime(data['date']),
            duration=data.get('duration', 0),
            fatigue=FatigueLevel.from_dict(data.get('fatigue', {})),
            completion_rate=data['completion_rate'],
            perceived_exertion=data['perceived_exertion'],
            avg_heart_rate=data.get('avg_heart_rate'),
            max_heart_rate=data.get('max_heart_rate'),
            exercise_performance=tuple(
                ExercisePerformance.from_dict(ex) for ex in data.get('exercise_performance', ())
            ),
        )

    @classmethod
    def default(cls, workout_id: str = "", date: Optional[datetime] = None) -> "PerformanceMetrics":
        """Neutral snapshot used before any session has been recorded."""
        return cls(
            workout_id=workout_id,
            date=date or datetime.utcnow(),
            duration=0,
            fatigue=FatigueLevel(),
            completion_rate=1.0,
            perceived_exertion=6,
        )


@dataclass(frozen=True)
class PerformanceUpdate:
    """Partial live metrics measured so far in a session."""
    fatigue: Optional[FatigueLevel] = None
    avg_heart_rate: Optional[float] = None
    completion_rate: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "PerformanceUpdate":
        fatigue = data.get('fatigue')
        return cls(
            fatigue=FatigueLevel.from_dict(fatigue) if fatigue else None,
            avg_heart_rate=data.get('avg_heart_rate'),
            completion_rate=data.get('completion_rate'),
        )


@dataclass(frozen=True)
class RestingFactors:
    previous_set_intensity: float
    muscle_group_fatigue: float
    exercise_type: ExerciseType
    time_of_day: TimeOfDay
    heart_rate_recovery: Optional[float] = None  # bpm drop
    sleep_quality: Optional[float] = None        # 0-1


@dataclass(frozen=True)
class RestRecommendation:
    type: RecommendationType
    reason: str
    adjustment: int  # seconds
    priority: Priority


@dataclass(frozen=True)
class SmartRestTimer:
    """Rest recommendation computed after a set. Never persisted."""
    base_rest_time: int
    factors: RestingFactors
    current_rest: int
    recommendations: Tuple[RestRecommendation, ...] = ()
    adaptive_rest: bool = True


@dataclass(frozen=True)
class AdaptiveWorkoutConfig:
    """Adaptive state for one (user, workout) pair."""
    id: str
    base_workout: BaseWorkout
    difficulty: DifficultyLevel
    personalized_modifications: Tuple[PersonalizedModification, ...]
    progression_plan: ProgressionPlan
    adaptations: Tuple[WorkoutAdaptation, ...]
    last_performance: PerformanceMetrics

    @property
    def workout_id(self) -> str:
        return self.base_workout.id

    def pending_modifications(self) -> Tuple[PersonalizedModification, ...]:
        return tuple(m for m in self.personalized_modifications if not m.applied)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'base_workout': self.base_workout.to_dict(),
            'difficulty': self.difficulty.to_dict(),
            'personalized_modifications': [m.to_dict() for m in self.personalized_modifications],
            'progression_plan': self.progression_plan.to_dict(),
            'adaptations': [a.to_dict() for a in self.adaptations],
            'last_performance': self.last_performance.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "AdaptiveWorkoutConfig":
        return cls(
            id=data['id'],
            base_workout=BaseWorkout.from_dict(data['base_workout']),
            difficulty=DifficultyLevel.from_dict(data['difficulty']),
            personalized_modifications=tuple(
                PersonalizedModification.from_dict(m) for m in data.get('personalized_modifications', ())
            ),
            progression_plan=ProgressionPlan.from_dict(data['progression_plan']),
            adaptations=tuple(WorkoutAdaptation.from_dict(a) for a in data.get('adaptations', ())),
            last_performance=PerformanceMetrics.from_dict(data['last_performance']),
        )
