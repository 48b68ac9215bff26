import random
from datetime import datetime, timedelta, timezone

import pytest

from facecards.application.card_store import CardStore
from facecards.application.confusion import ConfusionTracker
from facecards.application.grading import GradingLoop
from facecards.application.session import ChallengeSession
from facecards.application.streak import Streak
from facecards.domain.models import Card, CardState, Person, Rating
from facecards.infrastructure.persistence.json_store import MemoryStore

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeEngine:
    """
    Deterministic stand-in for SrsEngine.

    GOOD: review in 3 days, difficulty -1. AGAIN: back in 1 minute, difficulty +2.
    """

    def __init__(self):
        self.calls: list[tuple[Rating, datetime]] = []

    def review(self, card: Card, rating: Rating, now: datetime) -> Card:
        self.calls.append((rating, now))
        difficulty = card.difficulty if card.difficulty is not None else 5.0
        if rating == Rating.AGAIN:
            state = (
                CardState.RELEARNING
                if card.state in (CardState.REVIEW, CardState.RELEARNING)
                else CardState.LEARNING
            )
            return Card(
                due=now + timedelta(minutes=1),
                state=state,
                difficulty=min(10.0, difficulty + 2),
                stability=0.5,
                last_review=now,
                reps=card.reps + 1,
                lapses=card.lapses + (card.state == CardState.REVIEW),
            )
        return Card(
            due=now + timedelta(days=3),
            state=CardState.REVIEW,
            difficulty=max(1.0, difficulty - 1),
            stability=3.0,
            last_review=now,
            reps=card.reps + 1,
            lapses=card.lapses,
        )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def roster():
    """The four-person roster: A and C use she/her, B and D he/him."""
    return [
        Person(id="1", display_name="Alice Adams", image_ref="/img/a.jpg", pronouns="she/her"),
        Person(id="2", display_name="Bob Brown", image_ref="/img/b.jpg", pronouns="he/him"),
        Person(id="3", display_name="Carol Chen", image_ref="/img/c.jpg", pronouns="she/her"),
        Person(id="4", display_name="Dan Diaz", image_ref="/img/d.jpg", pronouns="he/him"),
    ]


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def make_session(roster, store, engine, rng, now):
    """Factory for sessions sharing one store, like reloading the page."""

    def _make(people=None, symmetric=False, clock=None) -> ChallengeSession:
        cards = CardStore(store)
        confusion = ConfusionTracker(store, symmetric=symmetric)
        streak = Streak(store)
        grading = GradingLoop(cards, confusion, streak, engine)
        return ChallengeSession(
            roster=people if people is not None else roster,
            cards=cards,
            confusion=confusion,
            streak=streak,
            grading=grading,
            store=store,
            rng=rng,
            clock=clock or (lambda: now),
        )

    return _make
