import random
from collections import Counter
from datetime import timedelta

import pytest

from facecards.application.card_store import CardStore
from facecards.application.scheduler import enumerate_cards, select_next_card
from facecards.domain.errors import RosterTooSmallError
from facecards.domain.models import Card, CardState, Direction


def _schedule(cards, person, direction, due, state=CardState.REVIEW):
    cards.put(person.id, direction, Card(due=due, state=state, difficulty=5.0, stability=2.0))


def _schedule_everything(cards, roster, now, offset):
    for i, ref in enumerate(enumerate_cards(roster)):
        _schedule(cards, ref.person, ref.direction, now + offset + timedelta(minutes=i))


def test_enumerate_cards_two_per_person(roster):
    refs = enumerate_cards(roster)
    assert len(refs) == 8
    assert {r.direction for r in refs} == set(Direction)
    assert refs[0].key == "1:face-to-name"
    assert refs[1].key == "1:name-to-face"


def test_most_overdue_card_wins(roster, store, now):
    cards = CardStore(store)
    _schedule(cards, roster[2], Direction.FACE_TO_NAME, now - timedelta(hours=1))
    _schedule(cards, roster[1], Direction.NAME_TO_FACE, now - timedelta(hours=3))
    _schedule(cards, roster[3], Direction.FACE_TO_NAME, now - timedelta(hours=2))

    ref = select_next_card(roster, cards, now)

    assert ref.person == roster[1]
    assert ref.direction == Direction.NAME_TO_FACE


def test_due_ties_keep_roster_order(roster, store, now):
    cards = CardStore(store)
    due = now - timedelta(minutes=5)
    _schedule(cards, roster[3], Direction.FACE_TO_NAME, due)
    _schedule(cards, roster[1], Direction.FACE_TO_NAME, due)

    assert select_next_card(roster, cards, now).person == roster[1]


def test_card_due_exactly_now_is_due(roster, store, now):
    cards = CardStore(store)
    _schedule_everything(cards, roster, now, timedelta(days=1))
    _schedule(cards, roster[2], Direction.NAME_TO_FACE, now)

    ref = select_next_card(roster, cards, now)
    assert (ref.person, ref.direction) == (roster[2], Direction.NAME_TO_FACE)


def test_new_cards_before_future_cards(roster, store, now):
    cards = CardStore(store)
    # Everything reviewed and in the future except Dan's two cards
    for ref in enumerate_cards(roster[:3]):
        _schedule(cards, ref.person, ref.direction, now + timedelta(minutes=1))

    for seed in range(20):
        ref = select_next_card(roster, cards, now, rng=random.Random(seed))
        assert ref.person == roster[3]


def test_new_cards_picked_uniformly(roster, store, now):
    cards = CardStore(store)
    rng = random.Random(7)
    picks = Counter(select_next_card(roster, cards, now, rng=rng).key for _ in range(800))

    assert len(picks) == 8
    assert min(picks.values()) > 50


def test_nothing_due_nothing_new_picks_soonest(roster, store, now):
    cards = CardStore(store)
    _schedule_everything(cards, roster, now, timedelta(hours=2))
    _schedule(cards, roster[3], Direction.NAME_TO_FACE, now + timedelta(minutes=30))

    first = select_next_card(roster, cards, now, rng=random.Random(1))
    second = select_next_card(roster, cards, now, rng=random.Random(2))

    assert first == second
    assert (first.person, first.direction) == (roster[3], Direction.NAME_TO_FACE)


def test_future_learning_card_is_not_due(roster, store, now):
    cards = CardStore(store)
    _schedule_everything(cards, roster, now, timedelta(days=1))
    _schedule(
        cards, roster[0], Direction.FACE_TO_NAME, now + timedelta(seconds=30), CardState.LEARNING
    )
    _schedule(cards, roster[1], Direction.FACE_TO_NAME, now - timedelta(days=2))

    assert select_next_card(roster, cards, now).person == roster[1]


def test_naive_now_is_treated_as_utc(roster, store, now):
    cards = CardStore(store)
    _schedule(cards, roster[2], Direction.FACE_TO_NAME, now - timedelta(minutes=1))

    ref = select_next_card(roster, cards, now.replace(tzinfo=None))
    assert ref.person == roster[2]


def test_lookups_create_new_cards(roster, store, now):
    cards = CardStore(store)
    select_next_card(roster, cards, now)
    assert len(cards) == 8


@pytest.mark.parametrize("size", [0, 1])
def test_tiny_roster_is_refused(roster, store, now, size):
    with pytest.raises(RosterTooSmallError):
        select_next_card(roster[:size], CardStore(store), now)
