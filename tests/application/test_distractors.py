import random
from datetime import timedelta

import pytest

from facecards.application.confusion import ConfusionTracker
from facecards.application.distractors import (
    candidate_count,
    mastery_grade,
    select_distractors,
)
from facecards.application.utils.text import short_name
from facecards.domain.models import Card, CardState, Person


def _card(now, difficulty=None, state=CardState.REVIEW):
    if difficulty is None:
        return Card(due=now)
    return Card(due=now + timedelta(days=1), state=state, difficulty=difficulty, stability=2.0)


def _people(n, pronouns="they/them"):
    first = ["Ann", "Ben", "Cid", "Dee", "Eve", "Fay", "Gus", "Hal", "Ivy", "Jo", "Kit", "Lou"]
    return [
        Person(
            id=str(i),
            display_name=f"{first[i]} Person{i}",
            image_ref=f"/{i}.jpg",
            pronouns=pronouns,
        )
        for i in range(n)
    ]


# ---------- Candidate count ----------


@pytest.mark.parametrize(
    "difficulty,grade",
    [(1.0, 4), (2.99, 4), (3.0, 3), (4.9, 3), (5.0, 2), (6.9, 2), (7.0, 1), (10.0, 1)],
)
def test_mastery_grade_tiers(now, difficulty, grade):
    assert mastery_grade(_card(now, difficulty)) == grade


def test_new_card_is_lowest_grade(now):
    assert mastery_grade(_card(now)) == 1
    assert candidate_count(_card(now), 20) == 2


@pytest.mark.parametrize("roster_size", [2, 3, 4, 5, 8, 20])
def test_candidate_count_monotonic_in_mastery(now, roster_size):
    hard = candidate_count(_card(now, 8.0), roster_size)
    easy = candidate_count(_card(now, 4.0), roster_size)

    assert 2 <= hard <= easy
    assert easy <= max(2, roster_size)
    assert hard % 2 == 0 and easy % 2 == 0


def test_candidate_count_capped_and_even(now):
    assert candidate_count(_card(now, 1.0), 100) == 8
    assert candidate_count(_card(now, 1.0), 5) == 4
    assert candidate_count(_card(now, 1.0), 2) == 2


# ---------- Selection ----------


def test_result_excludes_target_and_respects_count(now, store):
    people = _people(10)
    target = people[0]
    chosen = select_distractors(target, _card(now, 1.0), people, ConfusionTracker(store), count=5)

    assert len(chosen) == 5
    assert target not in chosen
    assert len({p.id for p in chosen}) == 5


def test_default_count_follows_mastery(now, store):
    people = _people(10)
    confusion = ConfusionTracker(store)

    assert len(select_distractors(people[0], _card(now), people, confusion)) == 1
    assert len(select_distractors(people[0], _card(now, 2.0), people, confusion)) == 7


def test_count_capped_by_roster(now, store):
    people = _people(3)
    chosen = select_distractors(people[0], _card(now), people, ConfusionTracker(store), count=10)
    assert len(chosen) == 2


def test_short_names_unique_against_target_and_each_other(now, store):
    people = [
        Person(id="t", display_name="Sam Smith", image_ref="/t.jpg"),
        Person(id="a", display_name="Sam Jones", image_ref="/a.jpg"),
        Person(id="b", display_name="Alex Kim", image_ref="/b.jpg"),
        Person(id="c", display_name="Alex Lee", image_ref="/c.jpg"),
        Person(id="d", display_name="Mary Jo Park", image_ref="/d.jpg"),
        Person(id="e", display_name="Mary Kay", image_ref="/e.jpg"),
    ]
    for seed in range(25):
        chosen = select_distractors(
            people[0], _card(now), people, ConfusionTracker(store), count=5, rng=random.Random(seed)
        )
        names = [short_name(p.display_name) for p in [people[0], *chosen]]
        assert len(names) == len(set(names))
        # Sam, one Alex, Mary Jo and Mary are the only distinct short names
        assert len(chosen) == 3


def test_known_confusions_come_first_by_count(now, store):
    people = _people(10)
    confusion = ConfusionTracker(store)
    for _ in range(3):
        confusion.record("0", "7")
    confusion.record("0", "4")
    for _ in range(2):
        confusion.record("0", "2")

    chosen = select_distractors(people[0], _card(now, 1.0), people, confusion, count=3)

    assert [p.id for p in chosen] == ["7", "2", "4"]


def test_confusions_with_people_no_longer_on_roster_are_skipped(now, store):
    people = _people(4)
    confusion = ConfusionTracker(store)
    confusion.record("0", "99")
    confusion.record("0", "3")

    chosen = select_distractors(people[0], _card(now), people, confusion, count=1)
    assert [p.id for p in chosen] == ["3"]


def test_same_pronouns_preferred_over_others(now, store, roster):
    alice = roster[0]
    for seed in range(25):
        chosen = select_distractors(
            alice, _card(now), roster, ConfusionTracker(store), rng=random.Random(seed)
        )
        assert [p.id for p in chosen] == ["3"]


def test_fills_with_anyone_once_pronoun_matches_run_out(now, store, roster):
    chosen = select_distractors(roster[0], _card(now, 1.0), roster, ConfusionTracker(store))

    assert len(chosen) == 3
    assert chosen[0].id == "3"
    assert {p.id for p in chosen[1:]} == {"2", "4"}


def test_everyone_shares_the_short_name(now, store):
    people = [
        Person(id="1", display_name="Alex One", image_ref="/1.jpg"),
        Person(id="2", display_name="Alex Two", image_ref="/2.jpg"),
    ]
    assert select_distractors(people[0], _card(now), people, ConfusionTracker(store)) == []


def test_namesakes_allowed_when_uniqueness_is_off(now, store):
    people = [
        Person(id="1", display_name="Sam", image_ref="/1.jpg"),
        Person(id="2", display_name="Sam", image_ref="/2.jpg"),
    ]
    confusion = ConfusionTracker(store)

    by_full_name = select_distractors(
        people[0], _card(now), people, confusion, short_name_fn=str.strip
    )
    assert by_full_name == []
    chosen = select_distractors(people[0], _card(now), people, confusion, unique_names=False)
    assert [p.id for p in chosen] == ["2"]
