"""
Scheduler: picks the next card to test.

Priority:
1. The most overdue card that has been studied before
2. A random new card
3. When everything is scheduled in the future, the card due soonest
"""

import logging
import random
from datetime import datetime

from facecards.application.card_store import CardStore, as_utc
from facecards.application.roster import ensure_playable
from facecards.domain.models import CardRef, CardState, Direction, Person

logger = logging.getLogger(__name__)


def enumerate_cards(roster: list[Person]) -> list[CardRef]:
    """Two candidates per person, in roster order."""
    return [
        CardRef(person=person, direction=direction)
        for person in roster
        for direction in Direction
    ]


def select_next_card(
    roster: list[Person],
    cards: CardStore,
    now: datetime,
    rng: random.Random | None = None,
) -> CardRef:
    """
    Choose the next (person, direction) to present.

    Args:
        roster: Usable people, at least two.
        cards: Card Store; cards are created on first access.
        now: The single "now" for this decision.
        rng: Source of randomness for picking among new cards.

    Raises:
        RosterTooSmallError: fewer than two people.
    """
    ensure_playable(roster)
    rng = rng or random.Random()
    now = as_utc(now)

    candidates = [
        (ref, cards.get(ref.person.id, ref.direction, now)) for ref in enumerate_cards(roster)
    ]

    due = [
        (ref, card) for ref, card in candidates if card.state != CardState.NEW and card.due <= now
    ]
    if due:
        # sorted() is stable, so ties keep roster order
        ref, card = sorted(due, key=lambda c: c[1].due)[0]
        logger.debug(f"Selected due card {ref.key} (due {card.due.isoformat()})")
        return ref

    new = [ref for ref, card in candidates if card.state == CardState.NEW]
    if new:
        ref = rng.choice(new)
        logger.debug(f"Selected new card {ref.key} from {len(new)} candidates")
        return ref

    ref, card = sorted(candidates, key=lambda c: c[1].due)[0]
    logger.debug(f"Nothing due; selected soonest card {ref.key} (due {card.due.isoformat()})")
    return ref
