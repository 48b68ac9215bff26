"""
Distractor selection: the wrong answers offered next to the right one.

Better known cards get more options. Options are drawn in priority order:
1. People previously mistaken for the target, most frequent first
2. People with the same pronouns as the target, shuffled
3. Anyone else, shuffled

No two offered people (target included) may share a short name, so every
rendered option can be told apart.
"""

import logging
import random
from collections.abc import Callable, Iterable

from facecards.application.confusion import ConfusionTracker
from facecards.application.utils.text import short_name
from facecards.domain import constants as C
from facecards.domain.models import Card, CardState, Person

logger = logging.getLogger(__name__)


def mastery_grade(card: Card) -> int:
    """
    Map FSRS difficulty (1 easiest, 10 hardest) onto a 1-4 grade.

    Grade 4: difficulty < 3, grade 3: < 5, grade 2: < 7,
    grade 1: 7 and above, or a card never graded.
    """
    if card.state == CardState.NEW or card.difficulty is None:
        return C.LOWEST_GRADE
    for bound, grade in C.DIFFICULTY_GRADES:
        if card.difficulty < bound:
            return grade
    return C.LOWEST_GRADE


def candidate_count(card: Card, max_available: int) -> int:
    """
    Number of options (target included) to show: 2, 4, 6 or 8 by grade,
    capped by roster size, kept even, never below 2.
    """
    requested = min(mastery_grade(card) * 2, max_available, C.MAX_CHOICE_KEYS)
    if requested % 2:
        requested -= 1
    return max(C.MIN_CANDIDATES, requested)


def select_distractors(
    target: Person,
    target_card: Card,
    roster: list[Person],
    confusion: ConfusionTracker,
    count: int | None = None,
    short_name_fn: Callable[[str], str] = short_name,
    rng: random.Random | None = None,
    unique_names: bool = True,
) -> list[Person]:
    """
    Pick wrong answers for ``target``.

    Args:
        target: The person being tested.
        target_card: Their card in the direction being tested; sets the count.
        roster: All usable people.
        confusion: Confusion Tracker, for the first priority tier.
        count: Number of distractors wanted. Defaults to candidate_count - 1.
        short_name_fn: Name projection used for the uniqueness rule.
        rng: Source of randomness for the shuffled tiers.
        unique_names: Enforce the short-name rule. Off, only ids must differ.

    Returns:
        At most ``min(count, len(roster) - 1)`` people; fewer only when the
        short-name rule leaves nobody else to pick.
    """
    rng = rng or random.Random()
    if count is None:
        count = candidate_count(target_card, len(roster)) - 1
    quota = max(0, min(count, len(roster) - 1))

    by_id = {p.id: p for p in roster}
    shuffled = list(roster)
    rng.shuffle(shuffled)

    chosen: list[Person] = []
    chosen_ids = {target.id}
    used_short_names = {short_name_fn(target.display_name)}

    def take(pool: Iterable[Person]) -> None:
        for person in pool:
            if len(chosen) >= quota:
                return
            if person.id in chosen_ids:
                continue
            name = short_name_fn(person.display_name)
            if unique_names and name in used_short_names:
                continue
            chosen.append(person)
            chosen_ids.add(person.id)
            used_short_names.add(name)

    confused = [
        by_id[other_id]
        for other_id, _ in confusion.confused_with(target.id)
        if other_id in by_id
    ]
    take(confused)
    take(p for p in shuffled if p.pronouns == target.pronouns)
    take(shuffled)

    if len(chosen) < quota:
        logger.info(
            f"Only {len(chosen)} of {quota} distractors for {target.id} have a distinct short name"
        )
    return chosen
