"""
Grading loop: turns an answer into card, confusion and streak updates.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from facecards.application.card_store import CardStore, as_utc
from facecards.application.confusion import ConfusionTracker
from facecards.application.srs import SrsEngine
from facecards.application.streak import Streak
from facecards.domain.models import Direction, Rating

logger = logging.getLogger(__name__)


@dataclass
class GradeResult:
    """What one answer changed."""

    graded: bool  # whether any card was rescheduled
    streak: int
    announcement: str | None = None


class GradingLoop:
    """
    Applies answers to the stores.

    Correct on the first try: the target is rated GOOD and the streak grows.
    Correct after a miss: nothing is rescheduled, the miss already counted.
    Wrong: the target and both cards of the person picked instead are rated
    AGAIN, the confusion is recorded and the streak resets.
    """

    def __init__(
        self,
        cards: CardStore,
        confusion: ConfusionTracker,
        streak: Streak,
        engine: SrsEngine,
    ):
        self.cards = cards
        self.confusion = confusion
        self.streak = streak
        self.engine = engine

    def _rate(self, person_id: str, direction: Direction, rating: Rating, now: datetime) -> None:
        card = self.cards.get(person_id, direction, now)
        self.cards.put(person_id, direction, self.engine.review(card, rating, now))

    def record_answer(
        self,
        target_id: str,
        direction: Direction,
        is_correct: bool,
        now: datetime,
        distractor_id: str | None = None,
        has_errored: bool = False,
    ) -> GradeResult:
        now = as_utc(now)

        if is_correct:
            if has_errored:
                return GradeResult(graded=False, streak=self.streak.count)
            self._rate(target_id, direction, Rating.GOOD, now)
            self.cards.save()
            announcement = self.streak.hit()
            return GradeResult(graded=True, streak=self.streak.count, announcement=announcement)

        self._rate(target_id, direction, Rating.AGAIN, now)
        if distractor_id is not None and distractor_id != target_id:
            for other_direction in Direction:
                self._rate(distractor_id, other_direction, Rating.AGAIN, now)
            self.confusion.record(target_id, distractor_id)
            logger.info(f"Recorded confusion {target_id} -> {distractor_id}")
        self.cards.save()
        self.streak.reset()
        return GradeResult(graded=True, streak=0)
