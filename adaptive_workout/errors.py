"""Error types raised by the adaptive workout engine."""

from typing import Optional


class AdaptiveWorkoutError(Exception):
    """Base class for engine errors."""


class ConfigurationError(AdaptiveWorkoutError):
    """Raised when a base workout cannot be turned into an adaptive config."""


class NotFoundError(AdaptiveWorkoutError):
    """Raised when no adaptive config exists for a workout."""

    def __init__(self, workout_id: str):
        self.workout_id = workout_id
        super().__init__(f"No adaptive config for workout '{workout_id}'")


class ConcurrencyError(AdaptiveWorkoutError):
    """Raised when a persisted config changed between read and write.

    Callers should reload the latest snapshot and retry.
    """

    def __init__(self, workout_id: str, expected_version: Optional[int], actual_version: Optional[int]):
        self.workout_id = workout_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Lost update on workout '{workout_id}': "
            f"expected version {expected_version}, found {actual_version}"
        )
