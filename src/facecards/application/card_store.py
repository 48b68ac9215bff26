"""
Card Store: mastery records keyed by ``"{person_id}:{direction}"``.

Cards live in memory and are mirrored to the StateStore after every mutation.
"""

import logging
from datetime import datetime, timezone

from pydantic import TypeAdapter, ValidationError

from facecards.domain.constants import CARDS_RECORD
from facecards.domain.models import Card, Direction, card_key
from facecards.domain.ports import StateStore

logger = logging.getLogger(__name__)

_CARDS = TypeAdapter(dict[str, Card])


def as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps as UTC so every comparison uses one time base."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class CardStore:
    def __init__(self, store: StateStore):
        self._store = store
        self._cards: dict[str, Card] = self._load()

    def _load(self) -> dict[str, Card]:
        raw = self._store.load(CARDS_RECORD)
        if raw is None:
            return {}
        try:
            cards = _CARDS.validate_python(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable card states: {e.error_count()} errors")
            return {}
        for card in cards.values():
            card.due = as_utc(card.due)
            if card.last_review is not None:
                card.last_review = as_utc(card.last_review)
        return cards

    def get(self, person_id: str, direction: Direction, now: datetime) -> Card:
        """Return the card for this pair, creating a NEW one on first access."""
        key = card_key(person_id, direction)
        card = self._cards.get(key)
        if card is None:
            card = Card(due=as_utc(now))
            self._cards[key] = card
        return card

    def put(self, person_id: str, direction: Direction, card: Card) -> None:
        """Replace a card in memory. Call save() once the batch of updates is done."""
        self._cards[card_key(person_id, direction)] = card

    def save(self) -> None:
        self._store.save(CARDS_RECORD, _CARDS.dump_python(self._cards, mode="json"))

    def __contains__(self, key: str) -> bool:
        return key in self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def items(self):
        return self._cards.items()
