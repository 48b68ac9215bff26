"""
Spaced-repetition capability: given a card and a rating, produce the updated card.

Memory state (stability, difficulty) and the raw interval come from FSRS via
fsrs-rs-python. Learning steps are applied on top: AGAIN always comes back
after a short relearn step, and sub-day intervals are floored.
"""

import logging
from datetime import datetime, timedelta

from fsrs_rs_python import DEFAULT_PARAMETERS, FSRS

from facecards.domain import constants as C
from facecards.domain.models import Card, CardState, Rating

logger = logging.getLogger(__name__)


class SrsEngine:
    """FSRS-backed scheduler. Pure logic: no storage, no clock of its own."""

    def __init__(
        self,
        parameters: list[float] | None = None,
        desired_retention: float = C.DESIRED_RETENTION,
        relearn_minutes: float = C.RELEARN_MINUTES,
        learning_floor_minutes: float = C.LEARNING_FLOOR_MINUTES,
        max_interval_days: float = C.MAX_INTERVAL_DAYS,
    ):
        self.fsrs = FSRS(parameters=list(parameters or DEFAULT_PARAMETERS))
        self.desired_retention = desired_retention
        self.relearn_step = timedelta(minutes=relearn_minutes)
        self.learning_floor_days = learning_floor_minutes / 1440.0
        self.max_interval_days = max_interval_days

    def _to_memory_state(self, card: Card):
        if card.state == CardState.NEW or not card.stability or card.difficulty is None:
            return None

        from fsrs_rs_python import MemoryState

        return MemoryState(
            stability=max(0.1, float(card.stability)),
            difficulty=max(C.FSRS_MIN_DIFFICULTY, min(C.FSRS_MAX_DIFFICULTY, card.difficulty)),
        )

    def _next_state(self, card: Card, rating: Rating, interval_days: float) -> CardState:
        if rating == Rating.AGAIN:
            if card.state in (CardState.REVIEW, CardState.RELEARNING):
                return CardState.RELEARNING
            return CardState.LEARNING
        if interval_days >= C.GRADUATION_THRESHOLD_DAYS:
            return CardState.REVIEW
        if card.state == CardState.NEW:
            return CardState.LEARNING
        return card.state

    def review(self, card: Card, rating: Rating, now: datetime) -> Card:
        """
        Apply one rating and return a new Card; the input is left untouched.
        """
        if card.last_review:
            days_elapsed = max(0, round((now - card.last_review).total_seconds() / 86400.0))
        else:
            days_elapsed = 0

        next_states = self.fsrs.next_states(
            self._to_memory_state(card), self.desired_retention, days_elapsed
        )
        selected = {
            Rating.AGAIN: next_states.again,
            Rating.HARD: next_states.hard,
            Rating.GOOD: next_states.good,
            Rating.EASY: next_states.easy,
        }[rating]

        raw_interval = float(selected.interval)
        if rating == Rating.AGAIN:
            due = now + self.relearn_step
        else:
            interval = max(self.learning_floor_days, min(self.max_interval_days, raw_interval))
            due = now + timedelta(days=interval)

        lapses = card.lapses
        if rating == Rating.AGAIN and card.state == CardState.REVIEW:
            lapses += 1

        updated = Card(
            due=due,
            state=self._next_state(card, rating, raw_interval),
            difficulty=float(selected.memory.difficulty),
            stability=float(selected.memory.stability),
            last_review=now,
            reps=card.reps + 1,
            lapses=lapses,
        )
        logger.debug(
            f"Reviewed card rating={rating.name} state={card.state.name}->{updated.state.name} "
            f"interval={raw_interval:.3f}d"
        )
        return updated
