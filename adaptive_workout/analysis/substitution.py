"""Exercise substitution ranking."""

import logging
from typing import Iterable, List

from ..config import config
from .models import Exercise, SubstitutionReason, UserProfile, clamp

logger = logging.getLogger(__name__)


def muscle_overlap(original: Exercise, candidate: Exercise) -> int:
    """Number of target muscle groups two exercises share."""
    return len(original.muscle_groups & candidate.muscle_groups)


class SubstitutionRanker:
    """Scores and ranks replacement exercises.

    Candidates must share a muscle group with the original, need only
    equipment the user owns, and differ from the original. Ties keep
    catalog order.
    """

    def __init__(self, limit: int = config.SUBSTITUTION_LIMIT):
        self.limit = limit

    def is_candidate(self, original: Exercise, candidate: Exercise, profile: UserProfile) -> bool:
        return (
            candidate.id != original.id
            and muscle_overlap(original, candidate) > 0
            and candidate.equipment <= profile.available_equipment
        )

    def score(self, original: Exercise, candidate: Exercise, reason: SubstitutionReason) -> float:
        score = 0.5 + muscle_overlap(original, candidate) * 0.2
        if original.difficulty == candidate.difficulty:
            score += 0.2
        return clamp(score, 0.0, 1.0)

    def rank(
        self,
        original: Exercise,
        reason: SubstitutionReason,
        profile: UserProfile,
        catalog: Iterable[Exercise],
    ) -> List[Exercise]:
        """Return up to ``limit`` substitutes, best first."""
        scored = [
            (self.score(original, candidate, reason), muscle_overlap(original, candidate), candidate)
            for candidate in catalog
            if self.is_candidate(original, candidate, profile)
        ]
        # Overlap breaks ties the score clamp creates; sorted() is stable,
        # so remaining ties keep catalog order.
        scored = sorted(scored, key=lambda item: (item[0], item[1]), reverse=True)

        logger.debug(
            f"{len(scored)} substitutes for {original.id} ({reason.value}), returning top {self.limit}"
        )
        return [candidate for _, _, candidate in scored[:self.limit]]
